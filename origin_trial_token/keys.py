"""
Public key classification.

Works out which verification algorithm a SubjectPublicKeyInfo is meant for
and extracts its raw key material, so callers can build the right verifier.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

from origin_trial_token.der import DerError, DerReader
from origin_trial_token.errors import MalformedKeyError, UnsupportedKeyError

logger = logging.getLogger(__name__)

# id-Ed25519, RFC 8410
ED25519_OID = "1.3.101.112"
# id-ecPublicKey, RFC 5480
EC_PUBLIC_KEY_OID = "1.2.840.10045.2.1"
# secp256r1 / prime256v1
P256_CURVE_OID = "1.2.840.10045.3.1.7"


class PublicKeyKind(Enum):
    ED25519 = "Ed25519"
    ECDSA_P256 = "EcdsaP256"

    @property
    def byte_len(self) -> int:
        """Size of the raw key material for this kind."""
        if self is PublicKeyKind.ED25519:
            return 32
        # Uncompressed point: 0x04 || X || Y
        return 65


@dataclass(frozen=True)
class PublicKey:
    """Raw public key material tagged with its algorithm."""

    kind: PublicKeyKind
    bytes: bytes

    def __post_init__(self) -> None:
        if len(self.bytes) != self.kind.byte_len:
            raise MalformedKeyError(
                f"{self.kind.value} key must be {self.kind.byte_len} bytes, got {len(self.bytes)}"
            )


def resolve_public_key(der: bytes) -> PublicKey:
    """
    Classify a DER-encoded SubjectPublicKeyInfo.

    Args:
        der: SubjectPublicKeyInfo bytes (PEM armor already removed).

    Returns:
        The key kind and raw key bytes.

    Raises:
        UnsupportedKeyError: On any structural problem, or an algorithm other
            than Ed25519 or ECDSA on P-256.
        MalformedKeyError: If the key material has the wrong length for its kind.
    """
    try:
        reader = DerReader(der)
        spki = reader.read_sequence()
        reader.finish()

        algorithm = spki.read_sequence()
        kind = _resolve_algorithm(algorithm)
        algorithm.finish()

        bits = spki.read_bit_string()
        spki.finish()
    except DerError as e:
        raise UnsupportedKeyError(f"Not a supported SubjectPublicKeyInfo: {e}") from e

    logger.debug(f"Resolved {kind.value} public key ({len(bits)} bytes)")
    return PublicKey(kind=kind, bytes=bits)


def _resolve_algorithm(algorithm: DerReader) -> PublicKeyKind:
    oid = algorithm.read_oid()
    if oid == ED25519_OID:
        return PublicKeyKind.ED25519
    if oid != EC_PUBLIC_KEY_OID:
        raise UnsupportedKeyError(f"Unsupported key algorithm: {oid}")

    curve = algorithm.read_oid()
    if curve != P256_CURVE_OID:
        raise UnsupportedKeyError(f"Unsupported elliptic curve: {curve}")
    return PublicKeyKind.ECDSA_P256


def load_public_key_pem(pem: Union[str, bytes]) -> PublicKey:
    """
    Classify a PEM "PUBLIC KEY" block.

    Raises:
        UnsupportedKeyError: If the PEM cannot be loaded or names an
            unsupported algorithm.
        MalformedKeyError: If the key material has the wrong length.
    """
    if isinstance(pem, str):
        pem = pem.encode("ascii")
    try:
        key = serialization.load_pem_public_key(pem)
    except (ValueError, UnsupportedAlgorithm) as e:
        raise UnsupportedKeyError(f"Could not load PEM public key: {e}") from e

    der = key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return resolve_public_key(der)


def read_public_key(path: Union[str, Path]) -> PublicKey:
    """Read and classify a PEM public key file."""
    return load_public_key_pem(Path(path).read_bytes())
