"""Content-derived identifiers for record values.

compute_digest() is the single entry point: it canonically encodes a record
and hashes the bytes. A record that cannot be encoded raises instead of
producing a digest, so every Digest returned here covers the complete value.
"""

from typing import Any

from .digest import Digest, digest_bytes
from .encoding import encode


def compute_digest(value: Any) -> Digest:
    """
    Compute the SHA-256 digest of a record's canonical encoding.

    Args:
        value: An instance of a dataclass or pydantic model

    Returns:
        Digest of the canonical CBOR bytes

    Raises:
        EncodingError: If a field value does not match its declared type
        SchemaError: If the record type cannot be registered

    Example:
        >>> compute_digest(Person(id=42, name="Alice")).to_hex()
        '05a7eaf3fdfa2cb1cf74576d5d6d28d31a0117fb1eb811071cada865bb0dd169'
    """
    return digest_bytes(encode(value))
