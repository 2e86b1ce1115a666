"""
Origin Trial Token envelope codec.

Wire format (all integers big-endian):

    offset  size  field
    0       1     version tag
    1       64    signature
    65      4     payload length L
    69      L     payload (UTF-8 JSON, see origin_trial_token.token)

The signature covers the payload bytes only. The verifying side checks the
exact bytes it received and never re-encodes the payload.
"""

from __future__ import annotations

import base64
import binascii
import logging
import struct
from dataclasses import dataclass
from typing import Callable, Optional

from origin_trial_token.errors import (
    InvalidEncodingError,
    LengthMismatchError,
    PayloadTruncatedError,
    SignatureInvalidError,
    SigningError,
    TruncatedError,
)
from origin_trial_token.token import Token

logger = logging.getLogger(__name__)

SIGNATURE_SIZE = 64

_HEADER = struct.Struct(f">B{SIGNATURE_SIZE}sI")

HEADER_SIZE = _HEADER.size  # 69

MAX_PAYLOAD_SIZE = 2**32 - 1

# Signer: payload bytes -> 64-byte signature.
Signer = Callable[[bytes], bytes]

# Verifier: (64-byte signature, payload bytes) -> whether the signature is good.
Verifier = Callable[[bytes, bytes], bool]


def trust_all(signature: bytes, data: bytes) -> bool:
    """
    Verifier that accepts every signature.

    INSECURE: only for inspecting tokens whose origin is already trusted,
    e.g. a developer dumping a token they just minted.
    """
    return True


@dataclass(frozen=True)
class Envelope:
    """A parsed, not yet trusted, token envelope."""

    version: int
    signature: bytes
    payload: bytes

    def __post_init__(self) -> None:
        if not 0 <= self.version <= 0xFF:
            raise ValueError(f"Version must fit in one byte: {self.version}")
        if len(self.signature) != SIGNATURE_SIZE:
            raise ValueError(
                f"Signature must be exactly {SIGNATURE_SIZE} bytes, got {len(self.signature)}"
            )
        if len(self.payload) > MAX_PAYLOAD_SIZE:
            raise ValueError(f"Payload too large: {len(self.payload)} bytes")

    @classmethod
    def parse(cls, data: bytes) -> "Envelope":
        """
        Split envelope bytes into their fields without verifying anything.

        Raises:
            TruncatedError: If fewer than HEADER_SIZE bytes are present.
            PayloadTruncatedError: If fewer payload bytes follow than declared.
            LengthMismatchError: If more payload bytes follow than declared.
        """
        data = bytes(data)
        if len(data) < HEADER_SIZE:
            raise TruncatedError(f"Token too short for header: {len(data)} < {HEADER_SIZE}")

        version, signature, length = _HEADER.unpack_from(data)
        remaining = len(data) - HEADER_SIZE
        if remaining < length:
            raise PayloadTruncatedError(
                f"Payload truncated: declared {length} bytes, {remaining} present"
            )
        if remaining > length:
            raise LengthMismatchError(
                f"Trailing data after payload: declared {length} bytes, {remaining} present"
            )

        return cls(version=version, signature=signature, payload=data[HEADER_SIZE:])

    def to_bytes(self) -> bytes:
        """Serialize the envelope to its wire format."""
        return _HEADER.pack(self.version, self.signature, len(self.payload)) + self.payload

    def verify(self, verifier: Optional[Verifier]) -> Token:
        """
        Check the signature and decode the payload into a trusted Token.

        Args:
            verifier: Callable taking (signature, payload). Pass None (or
                trust_all) to skip signature checking; this is insecure.

        Raises:
            SignatureInvalidError: If the verifier rejects the signature.
            MalformedInputError: If the verified payload does not decode.
        """
        if verifier is None or verifier is trust_all:
            logger.warning("Accepting token without signature verification")
        elif not verifier(self.signature, self.payload):
            raise SignatureInvalidError("Token signature does not verify")

        return Token.from_payload(self.version, self.payload)


def pack(version: int, token: Token, signer: Signer) -> bytes:
    """
    Sign a Token and pack it into envelope bytes.

    Args:
        version: Version tag, 0-255.
        token: The grant to sign.
        signer: Callable returning a 64-byte signature over the payload.

    Returns:
        version || signature || length || payload

    Raises:
        SigningError: If the signer returns anything but 64 bytes.
    """
    payload = token.to_payload()
    signature = signer(payload)
    if not isinstance(signature, (bytes, bytearray)):
        raise SigningError(f"Signer returned {type(signature).__name__}, expected bytes")
    if len(signature) != SIGNATURE_SIZE:
        raise SigningError(
            f"Signer returned {len(signature)} bytes, expected {SIGNATURE_SIZE}"
        )
    envelope = Envelope(version=version, signature=bytes(signature), payload=payload)
    logger.debug(f"Packed token for {token.feature} on {token.origin} (version {version})")
    return envelope.to_bytes()


def unpack(data: bytes, verifier: Optional[Verifier]) -> Token:
    """
    Parse and verify envelope bytes into a trusted Token.

    The verifier argument is required: pass None explicitly to accept the
    token without checking its signature.
    """
    return Envelope.parse(data).verify(verifier)


def to_text(data: bytes) -> str:
    """Base64-encode envelope bytes for transport, e.g. in an HTTP header."""
    return base64.b64encode(data).decode("ascii")


def from_text(text: str) -> bytes:
    """
    Decode base64 transport text back to envelope bytes.

    Raises:
        InvalidEncodingError: If the text is not a string of valid base64.
    """
    if not isinstance(text, str):
        raise InvalidEncodingError(f"Token text must be str, got {type(text).__name__}")
    try:
        return base64.b64decode(text.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidEncodingError(f"Token is not valid base64: {e}") from e
