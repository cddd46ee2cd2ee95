"""Deterministic digests of structured records.

This package canonically encodes a record (a dataclass or pydantic model
with a fixed field layout) to CBOR and hashes the bytes with SHA-256,
giving a stable identifier for the record's content.

Example:
    from dataclasses import dataclass
    import numpy as np
    from structdigest import compute_digest, register

    @register
    @dataclass
    class Person:
        id: np.uint32
        name: str

    compute_digest(Person(id=42, name="Alice")).to_hex()
    # '05a7eaf3fdfa2cb1cf74576d5d6d28d31a0117fb1eb811071cada865bb0dd169'
"""

from .digest import DIGEST_SIZE, Digest, digest_bytes
from .encoding import encode
from .exceptions import EncodingError, SchemaError, StructDigestError
from .hashing import compute_digest
from .schema import (
    FieldSpec,
    RecordSchema,
    TypeKind,
    TypeSpec,
    get_schema,
    is_record_type,
    is_registered,
    register,
    registered_types,
)

__version__ = "0.1.0"

__all__ = [
    # Entry point
    "compute_digest",
    # Digest
    "Digest",
    "DIGEST_SIZE",
    "digest_bytes",
    # Encoding
    "encode",
    # Schema registration
    "register",
    "get_schema",
    "is_record_type",
    "is_registered",
    "registered_types",
    "RecordSchema",
    "FieldSpec",
    "TypeSpec",
    "TypeKind",
    # Exceptions
    "StructDigestError",
    "SchemaError",
    "EncodingError",
]
