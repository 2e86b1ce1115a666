"""
Origin Trial Token payload model.

A Token grants a named experimental feature to a web origin until a fixed
expiry. This module converts Tokens to and from the JSON payload that gets
signed and carried inside the binary envelope.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from origin_trial_token.errors import MalformedInputError

LATEST_VERSION = 3

MAX_EXPIRY = 2**64 - 1


class Usage(Enum):
    """Usage restriction carried by third-party tokens."""

    NONE = None
    SUBSET = "subset"

    @classmethod
    def from_wire(cls, value: Optional[str]) -> "Usage":
        # Unrecognised restrictions are treated as no restriction.
        if value == cls.SUBSET.value:
            return cls.SUBSET
        return cls.NONE


@dataclass(frozen=True)
class Token:
    """
    A trial token grant.

    Attributes:
        origin: Scheme, host and port, e.g. "https://example.com:443".
        feature: Case-sensitive feature name.
        expiry: Unix seconds (UTC) after which the grant is void.
        is_subdomain: Whether subdomains of the origin are covered.
        is_third_party: Whether the token may be injected by a third party.
        usage: Usage restriction, only meaningful for third-party tokens.

    Example:
        >>> token = Token(origin="https://example.com:443", feature="Frobulate", expiry=1609459199)
        >>> Token.from_payload(LATEST_VERSION, token.to_payload()) == token
        True
    """

    origin: str
    feature: str
    expiry: int
    is_subdomain: bool = False
    is_third_party: bool = False
    usage: Usage = Usage.NONE

    def __post_init__(self) -> None:
        if not isinstance(self.origin, str):
            raise TypeError("origin must be a string")
        if not isinstance(self.feature, str):
            raise TypeError("feature must be a string")
        if isinstance(self.expiry, bool) or not isinstance(self.expiry, int):
            raise TypeError("expiry must be an integer")
        if not 0 <= self.expiry <= MAX_EXPIRY:
            raise ValueError(f"expiry out of range for an unsigned 64-bit value: {self.expiry}")
        if not isinstance(self.is_subdomain, bool) or not isinstance(self.is_third_party, bool):
            raise TypeError("is_subdomain and is_third_party must be booleans")
        if not isinstance(self.usage, Usage):
            raise TypeError("usage must be a Usage member")

    @classmethod
    def from_payload(cls, version: int, data: bytes) -> "Token":
        """
        Decode a Token from its JSON payload.

        Args:
            version: Envelope version the payload arrived under. Reserved for
                future payload changes; every version decodes the same way.
            data: UTF-8 JSON object bytes.

        Returns:
            The decoded Token.

        Raises:
            MalformedInputError: If the payload is not a JSON object, misses a
                required field, or a field has the wrong type.
        """
        try:
            obj = json.loads(bytes(data).decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
            raise MalformedInputError(f"Payload is not valid JSON: {e}") from e

        if not isinstance(obj, dict):
            raise MalformedInputError("Payload must be a JSON object")

        origin = _require(obj, "origin", str)
        feature = _require(obj, "feature", str)
        expiry = _require(obj, "expiry", int)
        if not 0 <= expiry <= MAX_EXPIRY:
            raise MalformedInputError(f"Field 'expiry' out of range: {expiry}")

        usage = _optional(obj, "usage", str, None)

        return cls(
            origin=origin,
            feature=feature,
            expiry=expiry,
            is_subdomain=_optional(obj, "isSubdomain", bool, False),
            is_third_party=_optional(obj, "isThirdParty", bool, False),
            usage=Usage.from_wire(usage),
        )

    def to_payload(self) -> bytes:
        """Encode the Token as compact JSON with a fixed key order."""
        obj: Dict[str, Any] = {"origin": self.origin}
        if self.is_subdomain:
            obj["isSubdomain"] = True
        obj["feature"] = self.feature
        obj["expiry"] = self.expiry
        if self.is_third_party:
            obj["isThirdParty"] = True
        if self.usage is not Usage.NONE:
            obj["usage"] = self.usage.value
        return json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8")

    def is_expired(self, now: Optional[float] = None) -> bool:
        """Whether the grant has lapsed at `now` (defaults to the current time)."""
        if now is None:
            now = time.time()
        return self.expiry <= now

    def to_signed_token(self, signer, version: int = LATEST_VERSION) -> bytes:
        """Sign and pack this Token into envelope bytes."""
        from origin_trial_token.envelope import pack

        return pack(version, self, signer)

    @classmethod
    def from_buffer(cls, data: bytes, verifier) -> "Token":
        """Unpack and verify envelope bytes into a trusted Token."""
        from origin_trial_token.envelope import unpack

        return unpack(data, verifier)


def _require(obj: Dict[str, Any], key: str, expected: type) -> Any:
    if key not in obj:
        raise MalformedInputError(f"Missing required field '{key}'")
    return _check_type(key, obj[key], expected)


def _optional(obj: Dict[str, Any], key: str, expected: type, default: Any) -> Any:
    if key not in obj:
        return default
    return _check_type(key, obj[key], expected)


def _check_type(key: str, value: Any, expected: type) -> Any:
    # bool is a subclass of int in Python; JSON true/false is never an integer here.
    if expected is int and isinstance(value, bool):
        raise MalformedInputError(f"Field '{key}' must be an integer")
    if not isinstance(value, expected):
        raise MalformedInputError(f"Field '{key}' must be of type {expected.__name__}")
    return value
