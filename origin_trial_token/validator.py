"""
Origin Trial Token validation for token-accepting services.

TokenValidator turns base64 token text into a ValidationResult instead of
raising, so a service can reject one token and keep serving. Every failure
means "do not honor this token"; the error_kind is logged and reported only
for diagnostics.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from origin_trial_token.envelope import Verifier, from_text, unpack
from origin_trial_token.errors import TrialTokenError
from origin_trial_token.token import Token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one token."""

    is_valid: bool
    token: Optional[Token] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None
    token_index: int = 0


class TokenValidator:
    """
    Validates trial tokens presented to a service.

    Example:
        >>> validator = TokenValidator(verifier_for_key(read_public_key("key.pub")))
        >>> result = validator.validate(header_value)
        >>> if result.is_valid:
        ...     enable(result.token.feature)
    """

    def __init__(
        self,
        verifier: Optional[Verifier],
        *,
        clock_skew_seconds: int = 0,
        feature: Optional[str] = None,
    ):
        """
        Initialize the validator.

        Args:
            verifier: Signature verifier, or None to trust every signature (insecure).
            clock_skew_seconds: Grace period added to each token's expiry.
            feature: If set, only tokens for this feature are accepted.
        """
        self._verifier = verifier
        self._clock_skew = clock_skew_seconds
        self._feature = feature
        self._lock = threading.Lock()
        self._stats = {"validations": 0, "successes": 0, "failures": 0}

    def validate(self, text: str, now: Optional[float] = None) -> ValidationResult:
        """Validate one base64 token, returning a result rather than raising."""
        result = self._validate(text, now)
        with self._lock:
            self._stats["validations"] += 1
            self._stats["successes" if result.is_valid else "failures"] += 1
        return result

    def _validate(self, text: str, now: Optional[float]) -> ValidationResult:
        try:
            token = unpack(from_text(text), self._verifier)
        except TrialTokenError as e:
            logger.info(f"Rejected token ({e.kind}): {e}")
            return ValidationResult(False, error=str(e), error_kind=e.kind)

        if now is None:
            now = time.time()
        if token.is_expired(now - self._clock_skew):
            logger.info(f"Rejected token (expired): {token.feature} expired at {token.expiry}")
            return ValidationResult(
                False, token=token, error=f"Token expired at {token.expiry}", error_kind="expired"
            )

        if self._feature is not None and token.feature != self._feature:
            logger.info(f"Rejected token (feature_mismatch): {token.feature} != {self._feature}")
            return ValidationResult(
                False,
                token=token,
                error=f"Token is for feature {token.feature!r}",
                error_kind="feature_mismatch",
            )

        logger.debug(f"Accepted token for {token.feature} on {token.origin}")
        return ValidationResult(True, token=token)

    def validate_batch(
        self,
        texts: Iterable[str],
        now: Optional[float] = None,
        max_workers: Optional[int] = None,
    ) -> List[ValidationResult]:
        """
        Validate many tokens concurrently.

        Each token is validated independently; results keep input order and
        carry their position in token_index.
        """
        texts = list(texts)
        if now is None:
            now = time.time()

        def validate_one(index: int, text: str) -> ValidationResult:
            result = self.validate(text, now)
            return ValidationResult(
                result.is_valid, result.token, result.error, result.error_kind, token_index=index
            )

        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(validate_one, range(len(texts)), texts))

    @property
    def stats(self) -> Dict[str, int]:
        """Counts of validations, successes and failures so far."""
        with self._lock:
            return dict(self._stats)
