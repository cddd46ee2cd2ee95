"""Fixed-width 256-bit digest value."""

import hashlib

DIGEST_SIZE = 32


class Digest:
    """
    A SHA-256 digest held as a 256-bit unsigned integer.

    The integer is the big-endian reading of the 32 hash bytes, so
    to_bytes() gives back exactly what the hash function produced,
    leading zero bytes included.
    """

    __slots__ = ("_value",)

    def __init__(self, value: int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Digest value must be an int, got {type(value).__name__}")
        if not 0 <= value < 1 << (8 * DIGEST_SIZE):
            raise ValueError("Digest value must fit in 256 unsigned bits")
        object.__setattr__(self, "_value", value)

    @classmethod
    def from_bytes(cls, raw: bytes) -> "Digest":
        if len(raw) != DIGEST_SIZE:
            raise ValueError(f"expected {DIGEST_SIZE} bytes, got {len(raw)}")
        return cls(int.from_bytes(raw, "big"))

    @property
    def value(self) -> int:
        return self._value

    def to_bytes(self) -> bytes:
        """32-byte big-endian representation."""
        return self._value.to_bytes(DIGEST_SIZE, "big")

    def to_hex(self) -> str:
        """64 lowercase hex characters, most significant byte first."""
        return self.to_bytes().hex()

    def __setattr__(self, name, value):
        raise AttributeError("Digest is immutable")

    def __eq__(self, other):
        if not isinstance(other, Digest):
            return NotImplemented
        return self._value == other._value

    def __hash__(self):
        return hash(self._value)

    def __str__(self):
        return self.to_hex()

    def __repr__(self):
        return f"Digest('{self.to_hex()}')"


def digest_bytes(data: bytes) -> Digest:
    """SHA-256 of the whole byte sequence in a single pass."""
    return Digest.from_bytes(hashlib.sha256(data).digest())
