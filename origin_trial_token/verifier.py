"""
Origin Trial Token verifiers.

Verifiers are callables taking (signature, payload) and returning a bool.
verifier_for_key() picks the algorithm from a classified PublicKey.
"""

from __future__ import annotations

import logging
from typing import Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature

from origin_trial_token.envelope import SIGNATURE_SIZE, trust_all
from origin_trial_token.errors import MalformedKeyError
from origin_trial_token.keys import PublicKey, PublicKeyKind

logger = logging.getLogger(__name__)


class Ed25519Verifier:
    """Checks Ed25519 signatures against a raw 32-byte public key."""

    def __init__(self, raw_key: bytes):
        try:
            self._key = Ed25519PublicKey.from_public_bytes(raw_key)
        except ValueError as e:
            raise MalformedKeyError(f"Invalid Ed25519 public key: {e}") from e

    def __call__(self, signature: bytes, data: bytes) -> bool:
        try:
            self._key.verify(signature, data)
        except InvalidSignature:
            return False
        return True


class EcdsaP256Verifier:
    """Checks fixed-size (r || s) ECDSA P-256 SHA-256 signatures."""

    def __init__(self, raw_key: bytes):
        try:
            self._key = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256R1(), raw_key)
        except ValueError as e:
            raise MalformedKeyError(f"Invalid P-256 public point: {e}") from e

    def __call__(self, signature: bytes, data: bytes) -> bool:
        if len(signature) != SIGNATURE_SIZE:
            return False
        half = SIGNATURE_SIZE // 2
        r = int.from_bytes(signature[:half], "big")
        s = int.from_bytes(signature[half:], "big")
        try:
            self._key.verify(encode_dss_signature(r, s), data, ec.ECDSA(hashes.SHA256()))
        except InvalidSignature:
            return False
        return True


def verifier_for_key(public_key: PublicKey) -> Union[Ed25519Verifier, EcdsaP256Verifier]:
    """
    Build the verifier matching a classified public key.

    Raises:
        MalformedKeyError: If the key bytes are not a valid point for the kind.
    """
    logger.debug(f"Using {public_key.kind.value} verifier")
    if public_key.kind is PublicKeyKind.ED25519:
        return Ed25519Verifier(public_key.bytes)
    return EcdsaP256Verifier(public_key.bytes)


__all__ = ["Ed25519Verifier", "EcdsaP256Verifier", "verifier_for_key", "trust_all"]
