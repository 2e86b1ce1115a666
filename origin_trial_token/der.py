"""
Minimal DER reader for SubjectPublicKeyInfo structures.

Only the handful of shapes needed to classify a public key are understood:
SEQUENCE, OBJECT IDENTIFIER and BIT STRING. Anything else is a DerError.
"""

from __future__ import annotations

from typing import Tuple

TAG_BIT_STRING = 0x03
TAG_OBJECT_IDENTIFIER = 0x06
TAG_SEQUENCE = 0x30


class DerError(ValueError):
    """Raised on any structural problem in the DER input."""


class DerReader:
    """
    Sequential reader over concatenated tag/length/value elements.

    Example:
        >>> reader = DerReader(bytes.fromhex("302a300506032b6570032100" + "00" * 32))
        >>> outer = reader.read_sequence()
        >>> reader.finish()
        >>> algorithm = outer.read_sequence()
        >>> oid = algorithm.read_oid()
    """

    def __init__(self, data: bytes):
        self._data = bytes(data)
        self._pos = 0

    def at_end(self) -> bool:
        return self._pos >= len(self._data)

    def finish(self) -> None:
        """Require that every byte has been consumed."""
        if not self.at_end():
            raise DerError(f"{len(self._data) - self._pos} trailing bytes")

    def read_element(self, expected_tag: int) -> bytes:
        """Read one element, check its tag, and return its contents."""
        tag, value = self._read_tlv()
        if tag != expected_tag:
            raise DerError(f"Expected tag 0x{expected_tag:02x}, got 0x{tag:02x}")
        return value

    def read_sequence(self) -> "DerReader":
        return DerReader(self.read_element(TAG_SEQUENCE))

    def read_oid(self) -> str:
        return decode_oid(self.read_element(TAG_OBJECT_IDENTIFIER))

    def read_bit_string(self) -> bytes:
        """Read a BIT STRING holding whole octets and return those octets."""
        value = self.read_element(TAG_BIT_STRING)
        if not value:
            raise DerError("Empty BIT STRING")
        if value[0] != 0:
            raise DerError(f"BIT STRING has {value[0]} unused bits")
        return value[1:]

    def _read_byte(self) -> int:
        if self._pos >= len(self._data):
            raise DerError("Unexpected end of data")
        byte = self._data[self._pos]
        self._pos += 1
        return byte

    def _read_tlv(self) -> Tuple[int, bytes]:
        tag = self._read_byte()
        if tag & 0x1F == 0x1F:
            raise DerError("High-tag-number form is not supported")

        length = self._read_byte()
        if length & 0x80:
            count = length & 0x7F
            if count == 0:
                raise DerError("Indefinite length is not allowed in DER")
            if count > 4:
                raise DerError(f"Length field too long: {count} bytes")
            length = 0
            for _ in range(count):
                length = (length << 8) | self._read_byte()
            if length < 0x80:
                raise DerError("Long-form length used for a short value")

        end = self._pos + length
        if end > len(self._data):
            raise DerError(f"Element length {length} runs past end of data")
        value = self._data[self._pos:end]
        self._pos = end
        return tag, value


def decode_oid(value: bytes) -> str:
    """Decode OBJECT IDENTIFIER contents to dotted-decimal form."""
    if not value:
        raise DerError("Empty OBJECT IDENTIFIER")

    arcs = []
    current = 0
    for i, byte in enumerate(value):
        if current == 0 and byte == 0x80:
            raise DerError("Non-minimal OBJECT IDENTIFIER arc")
        current = (current << 7) | (byte & 0x7F)
        if not byte & 0x80:
            arcs.append(current)
            current = 0
        elif i == len(value) - 1:
            raise DerError("Truncated OBJECT IDENTIFIER arc")

    first = arcs[0]
    if first < 40:
        head = [0, first]
    elif first < 80:
        head = [1, first - 40]
    else:
        head = [2, first - 80]
    return ".".join(str(arc) for arc in head + arcs[1:])
