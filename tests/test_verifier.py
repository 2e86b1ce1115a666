"""
Unit tests for the verifier capabilities.
"""

import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from origin_trial_token import MalformedKeyError, PublicKey, PublicKeyKind, trust_all
from origin_trial_token.signer import EcdsaP256Signer
from origin_trial_token.verifier import EcdsaP256Verifier, Ed25519Verifier, verifier_for_key


class TestVerifierForKey:
    """verifier_for_key() picks the algorithm from the key kind."""

    def test_ed25519(self, ed25519_signer):
        assert isinstance(verifier_for_key(ed25519_signer.public_key()), Ed25519Verifier)

    def test_p256(self, p256_signer):
        assert isinstance(verifier_for_key(p256_signer.public_key()), EcdsaP256Verifier)

    def test_point_not_on_curve(self):
        """65 bytes of the right shape that are not a P-256 point."""
        bogus = PublicKey(kind=PublicKeyKind.ECDSA_P256, bytes=b"\x04" + b"\x01" * 64)
        with pytest.raises(MalformedKeyError):
            verifier_for_key(bogus)


class TestEd25519Verifier:
    def test_accepts_valid(self, ed25519_signer, ed25519_verifier):
        assert ed25519_verifier(ed25519_signer(b"data"), b"data") is True

    def test_rejects_other_data(self, ed25519_signer, ed25519_verifier):
        assert ed25519_verifier(ed25519_signer(b"data"), b"other") is False

    def test_rejects_zero_signature(self, ed25519_verifier):
        assert ed25519_verifier(bytes(64), b"data") is False


class TestEcdsaP256Verifier:
    def test_accepts_valid(self, p256_signer, p256_verifier):
        assert p256_verifier(p256_signer(b"data"), b"data") is True

    def test_rejects_other_data(self, p256_signer, p256_verifier):
        assert p256_verifier(p256_signer(b"data"), b"other") is False

    def test_rejects_zero_signature(self, p256_verifier):
        assert p256_verifier(bytes(64), b"data") is False

    def test_rejects_wrong_size(self, p256_signer, p256_verifier):
        assert p256_verifier(p256_signer(b"data")[:63], b"data") is False

    def test_rejects_other_key(self, p256_signer):
        other = EcdsaP256Signer(ec.generate_private_key(ec.SECP256R1()))
        verifier = verifier_for_key(other.public_key())
        assert verifier(p256_signer(b"data"), b"data") is False


def test_trust_all_accepts_anything():
    assert trust_all(b"", b"") is True
