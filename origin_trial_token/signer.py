"""
Origin Trial Token signers.

A signer is any callable taking the payload bytes and returning a 64-byte
signature. The classes here wrap `cryptography` private keys so they can be
passed straight to envelope.pack().
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature

from origin_trial_token.errors import UnsupportedKeyError
from origin_trial_token.keys import PublicKey, PublicKeyKind

P256_SCALAR_SIZE = 32


class Ed25519Signer:
    """
    Signs payloads with an Ed25519 private key.

    Example:
        >>> signer = Ed25519Signer(Ed25519PrivateKey.generate())
        >>> blob = pack(LATEST_VERSION, token, signer)
    """

    kind = PublicKeyKind.ED25519

    def __init__(self, private_key: Ed25519PrivateKey):
        self._key = private_key

    def __call__(self, data: bytes) -> bytes:
        return self._key.sign(data)

    def public_key(self) -> PublicKey:
        raw = self._key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        return PublicKey(kind=self.kind, bytes=raw)


class EcdsaP256Signer:
    """
    Signs payloads with ECDSA over P-256 and SHA-256.

    The DER signature produced by `cryptography` is re-packed as r || s, each
    a 32-byte big-endian integer, so it fits the fixed signature slot.
    """

    kind = PublicKeyKind.ECDSA_P256

    def __init__(self, private_key: ec.EllipticCurvePrivateKey):
        if not isinstance(private_key.curve, ec.SECP256R1):
            raise UnsupportedKeyError(f"ECDSA key must be on P-256, got {private_key.curve.name}")
        self._key = private_key

    def __call__(self, data: bytes) -> bytes:
        r, s = decode_dss_signature(self._key.sign(data, ec.ECDSA(hashes.SHA256())))
        return r.to_bytes(P256_SCALAR_SIZE, "big") + s.to_bytes(P256_SCALAR_SIZE, "big")

    def public_key(self) -> PublicKey:
        raw = self._key.public_key().public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.UncompressedPoint,
        )
        return PublicKey(kind=self.kind, bytes=raw)


def load_signer(
    pem: Union[str, bytes], password: Optional[bytes] = None
) -> Union[Ed25519Signer, EcdsaP256Signer]:
    """
    Build a signer from a PEM "PRIVATE KEY" block.

    Generate one with e.g.:
        openssl genpkey -algorithm ED25519 > key.pem

    Raises:
        UnsupportedKeyError: If the PEM cannot be loaded or holds a key type
            other than Ed25519 or ECDSA P-256.
    """
    if isinstance(pem, str):
        pem = pem.encode("ascii")
    try:
        key = serialization.load_pem_private_key(pem, password=password)
    except (ValueError, TypeError) as e:
        raise UnsupportedKeyError(f"Could not load PEM private key: {e}") from e

    if isinstance(key, Ed25519PrivateKey):
        return Ed25519Signer(key)
    if isinstance(key, ec.EllipticCurvePrivateKey):
        return EcdsaP256Signer(key)
    raise UnsupportedKeyError(f"Unsupported private key type: {type(key).__name__}")


def read_signer(path: Union[str, Path]) -> Union[Ed25519Signer, EcdsaP256Signer]:
    """Read a PEM private key file and build a signer from it."""
    return load_signer(Path(path).read_bytes())
