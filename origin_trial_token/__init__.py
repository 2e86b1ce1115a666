"""
Origin Trial Token - signed grants of experimental web features.

A trial token grants a named feature to a web origin until a fixed expiry.
This package encodes token payloads, packs them into a signed binary
envelope, and classifies the public keys used to verify them.
"""

__version__ = "0.1.0"

# Payload model and envelope codec
from .token import Token, Usage, LATEST_VERSION
from .envelope import Envelope, pack, unpack, to_text, from_text, trust_all, SIGNATURE_SIZE, HEADER_SIZE

# Key classification
from .keys import PublicKey, PublicKeyKind, resolve_public_key, load_public_key_pem, read_public_key

# Errors
from .errors import (
    TrialTokenError,
    MalformedInputError,
    InvalidEncodingError,
    EnvelopeError,
    TruncatedError,
    LengthMismatchError,
    PayloadTruncatedError,
    SignatureInvalidError,
    SigningError,
    PublicKeyError,
    UnsupportedKeyError,
    MalformedKeyError,
)


# Signing, verification and validation helpers (lazy loaded)
def __getattr__(name):
    """Lazy loading of signer, verifier and validator helpers."""
    if name in ("Ed25519Signer", "EcdsaP256Signer", "load_signer", "read_signer"):
        from . import signer

        return getattr(signer, name)
    elif name in ("Ed25519Verifier", "EcdsaP256Verifier", "verifier_for_key"):
        from . import verifier

        return getattr(verifier, name)
    elif name in ("TokenValidator", "ValidationResult"):
        from . import validator

        return getattr(validator, name)
    raise AttributeError(f"module 'origin_trial_token' has no attribute '{name}'")


__all__ = [
    "__version__",
    # Core
    "Token",
    "Usage",
    "LATEST_VERSION",
    "Envelope",
    "pack",
    "unpack",
    "to_text",
    "from_text",
    "trust_all",
    "SIGNATURE_SIZE",
    "HEADER_SIZE",
    # Keys
    "PublicKey",
    "PublicKeyKind",
    "resolve_public_key",
    "load_public_key_pem",
    "read_public_key",
    # Errors
    "TrialTokenError",
    "MalformedInputError",
    "InvalidEncodingError",
    "EnvelopeError",
    "TruncatedError",
    "LengthMismatchError",
    "PayloadTruncatedError",
    "SignatureInvalidError",
    "SigningError",
    "PublicKeyError",
    "UnsupportedKeyError",
    "MalformedKeyError",
    # Capabilities (lazy loaded)
    "Ed25519Signer",
    "EcdsaP256Signer",
    "load_signer",
    "read_signer",
    "Ed25519Verifier",
    "EcdsaP256Verifier",
    "verifier_for_key",
    # Service (lazy loaded)
    "TokenValidator",
    "ValidationResult",
]
