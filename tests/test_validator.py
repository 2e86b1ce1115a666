"""
Unit tests for TokenValidator.
"""

import logging

import pytest

from origin_trial_token import LATEST_VERSION, Token, pack, to_text
from origin_trial_token.validator import TokenValidator, ValidationResult

NOW = 1609459000


@pytest.fixture
def validator(ed25519_verifier) -> TokenValidator:
    return TokenValidator(ed25519_verifier)


@pytest.fixture
def token_text(sample_token, ed25519_signer) -> str:
    return to_text(pack(LATEST_VERSION, sample_token, ed25519_signer))


class TestValidate:
    """Tests for TokenValidator.validate()."""

    def test_valid(self, validator, token_text, sample_token):
        result = validator.validate(token_text, now=NOW)
        assert isinstance(result, ValidationResult)
        assert result.is_valid is True
        assert result.token == sample_token
        assert result.error is None

    def test_expired(self, validator, token_text, sample_token):
        result = validator.validate(token_text, now=sample_token.expiry)
        assert result.is_valid is False
        assert result.error_kind == "expired"
        assert result.token == sample_token

    def test_clock_skew(self, ed25519_verifier, token_text, sample_token):
        """Clock skew extends acceptance past the expiry."""
        validator = TokenValidator(ed25519_verifier, clock_skew_seconds=60)
        assert validator.validate(token_text, now=sample_token.expiry + 30).is_valid is True
        assert validator.validate(token_text, now=sample_token.expiry + 60).is_valid is False

    def test_feature_filter(self, ed25519_verifier, token_text):
        assert TokenValidator(ed25519_verifier, feature="Frobulate").validate(
            token_text, now=NOW
        ).is_valid is True

        result = TokenValidator(ed25519_verifier, feature="Other").validate(token_text, now=NOW)
        assert result.is_valid is False
        assert result.error_kind == "feature_mismatch"

    def test_signature_invalid(self, p256_verifier, token_text):
        result = TokenValidator(p256_verifier).validate(token_text, now=NOW)
        assert result.is_valid is False
        assert result.error_kind == "signature_invalid"
        assert result.token is None

    def test_invalid_encoding(self, validator):
        result = validator.validate("***", now=NOW)
        assert result.error_kind == "invalid_encoding"

    def test_truncated(self, validator):
        result = validator.validate(to_text(b"\x03" * 10), now=NOW)
        assert result.error_kind == "truncated"

    def test_length_mismatch(self, validator, sample_token, ed25519_signer):
        blob = pack(LATEST_VERSION, sample_token, ed25519_signer) + b"!"
        assert validator.validate(to_text(blob), now=NOW).error_kind == "length_mismatch"

    def test_malformed_input(self, ed25519_signer, ed25519_verifier):
        """A correctly signed but malformed payload is still rejected."""
        payload = b'{"origin": "https://example.com:443"}'
        blob = bytes([LATEST_VERSION]) + ed25519_signer(payload) + len(payload).to_bytes(4, "big") + payload
        result = TokenValidator(ed25519_verifier).validate(to_text(blob), now=NOW)
        assert result.is_valid is False
        assert result.error_kind == "malformed_input"

    def test_deeply_nested_payload(self):
        """A trusted payload that nests too deeply is rejected, not raised."""
        payload = b"[" * 200000 + b"]" * 200000
        blob = bytes([LATEST_VERSION]) + bytes(64) + len(payload).to_bytes(4, "big") + payload
        result = TokenValidator(None).validate(to_text(blob), now=NOW)
        assert result.is_valid is False
        assert result.error_kind == "malformed_input"

    @pytest.mark.parametrize("text", [None, b"AAAA", 42])
    def test_non_string_input(self, validator, text):
        result = validator.validate(text, now=NOW)
        assert result.is_valid is False
        assert result.error_kind == "invalid_encoding"

    def test_failure_kinds_logged(self, p256_verifier, token_text, caplog):
        """Each rejection is logged with its kind."""
        with caplog.at_level(logging.INFO, logger="origin_trial_token.validator"):
            TokenValidator(p256_verifier).validate(token_text, now=NOW)
            TokenValidator(p256_verifier).validate("***", now=NOW)
        assert "signature_invalid" in caplog.text
        assert "invalid_encoding" in caplog.text

    def test_trust_mode(self, token_text):
        """A validator without a verifier accepts any signature."""
        assert TokenValidator(None).validate(token_text, now=NOW).is_valid is True


class TestValidateBatch:
    """Tests for TokenValidator.validate_batch()."""

    def test_order_and_index(self, validator, token_text, ed25519_signer):
        other = Token(origin="https://other.example:443", feature="Other", expiry=NOW + 10)
        other_text = to_text(pack(LATEST_VERSION, other, ed25519_signer))
        texts = [token_text, "***", other_text, token_text[:-8]]

        results = validator.validate_batch(texts, now=NOW, max_workers=4)

        assert [r.token_index for r in results] == [0, 1, 2, 3]
        assert [r.is_valid for r in results] == [True, False, True, False]
        assert results[2].token == other

    def test_empty(self, validator):
        assert validator.validate_batch([]) == []


class TestStats:
    def test_counts(self, validator, token_text):
        validator.validate(token_text, now=NOW)
        validator.validate("***", now=NOW)
        validator.validate_batch([token_text, token_text], now=NOW)

        assert validator.stats == {"validations": 4, "successes": 3, "failures": 1}
