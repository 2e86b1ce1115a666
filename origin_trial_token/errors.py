"""
Origin Trial Token errors.

Every failure raised by the library derives from TrialTokenError, which is
itself a ValueError so callers that only care about "bad input" can catch
that. The subclasses keep the failure kinds distinguishable for diagnostics.
"""


class TrialTokenError(ValueError):
    """Base class for all trial token failures."""

    kind = "error"


class MalformedInputError(TrialTokenError):
    """Payload text is unparseable, misses a required field or has a wrong type."""

    kind = "malformed_input"


class InvalidEncodingError(TrialTokenError):
    """The base64 transport text could not be decoded."""

    kind = "invalid_encoding"


class EnvelopeError(TrialTokenError):
    """The binary envelope is structurally invalid."""

    kind = "envelope"


class TruncatedError(EnvelopeError):
    """The envelope ended before all of its bytes arrived."""

    kind = "truncated"


class LengthMismatchError(EnvelopeError):
    """The declared payload length does not match the bytes that follow it."""

    kind = "length_mismatch"


class PayloadTruncatedError(TruncatedError, LengthMismatchError):
    """Fewer payload bytes remain than the length field declares."""

    kind = "truncated"


class SignatureInvalidError(TrialTokenError):
    """The verifier rejected the signed payload."""

    kind = "signature_invalid"


class SigningError(TrialTokenError):
    """A signer failed to produce a usable signature."""

    kind = "signing"


class PublicKeyError(TrialTokenError):
    """Public key material could not be classified or validated."""

    kind = "public_key"


class UnsupportedKeyError(PublicKeyError):
    """The key structure or algorithm is not one we can verify with."""

    kind = "unsupported_key"


class MalformedKeyError(PublicKeyError):
    """The algorithm is known but the key material has the wrong size."""

    kind = "malformed_key"
