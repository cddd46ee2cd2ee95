"""Canonical CBOR encoding of record values.

A record is written as a CBOR map whose keys are its field names in
declaration order. The byte output depends only on the field values, never
on how or when the record was constructed, so it can be hashed into a
stable identifier.

Layout:
    record      -> map {field name: value, ...} in declaration order
    bool / None -> true, false / null
    integers    -> integer, shortest form
    floats      -> float64; NaN and +/-inf as float16 (f97e00, f97c00, f9fc00)
                   numpy float fields are range-checked, then narrowed
    str / bytes -> text string / byte string
    list, tuple -> array
    ndarray     -> map {"dtype": "<f8", "shape": [2, 3], "data": <C-order LE bytes>}
"""

import math
from typing import Any

import cbor2
import numpy as np

from .exceptions import EncodingError
from .schema import RecordSchema, TypeKind, TypeSpec, get_schema, is_record_type

# Array dtypes with a fixed binary layout: bool, signed, unsigned, float, complex
_ARRAY_KINDS = "biufc"


def encode(value: Any) -> bytes:
    """
    Encode a record into its canonical byte sequence.

    Args:
        value: An instance of a dataclass or pydantic model

    Returns:
        Canonical CBOR bytes

    Raises:
        EncodingError: If value is not a record, or a field value does not
            match its declared type
        SchemaError: If the record type declares an unsupported field type

    Example:
        >>> encode(Person(id=42, name="Alice")).hex()
        'a2626964182a646e616d6565416c696365'
    """
    if not is_record_type(type(value)):
        raise EncodingError(
            f"expected a dataclass or pydantic model instance, got {type(value).__name__}"
        )

    schema = get_schema(type(value))
    tree = _encode_record(value, schema, schema.name)
    try:
        return cbor2.dumps(tree)
    except (cbor2.CBOREncodeError, ValueError, TypeError) as e:
        raise EncodingError(f"CBOR serialization failed: {e}", schema.name) from e


def _encode_record(value: Any, schema: RecordSchema, path: str) -> dict:
    out = {}
    for field in schema.fields:
        try:
            item = getattr(value, field.name)
        except AttributeError as e:
            raise EncodingError("field is missing", f"{path}.{field.name}") from e
        out[field.name] = _encode_value(item, field.spec, f"{path}.{field.name}")
    return out


def _encode_value(value: Any, spec: TypeSpec, path: str) -> Any:
    """Convert value to a CBOR-native object according to its declared spec."""
    kind = spec.kind

    if kind == TypeKind.OPTIONAL:
        if value is None:
            return None
        return _encode_value(value, spec.items[0], path)

    if kind == TypeKind.BOOL:
        if isinstance(value, (bool, np.bool_)):
            return bool(value)
        raise _mismatch(value, spec, path)

    if kind == TypeKind.INT:
        if _is_integer(value):
            return int(value)
        raise _mismatch(value, spec, path)

    if kind == TypeKind.NP_INT:
        if not _is_integer(value):
            raise _mismatch(value, spec, path)
        info = np.iinfo(spec.py_type)
        number = int(value)
        if not info.min <= number <= info.max:
            raise EncodingError(
                f"{number} is outside the range of {info.dtype} [{info.min}, {info.max}]",
                path,
            )
        return number

    if kind in (TypeKind.FLOAT, TypeKind.NP_FLOAT):
        if not (isinstance(value, (float, np.floating)) or _is_integer(value)):
            raise _mismatch(value, spec, path)
        try:
            number = float(value)
        except OverflowError as e:
            raise EncodingError(f"integer too large for {spec.describe()}", path) from e
        if kind == TypeKind.FLOAT:
            return number
        info = np.finfo(spec.py_type)
        # Checked before narrowing so a finite value never becomes inf
        if math.isfinite(number) and abs(number) > float(info.max):
            raise EncodingError(
                f"{number!r} is outside the range of {info.dtype} [{-info.max}, {info.max}]",
                path,
            )
        return float(spec.py_type(number))

    if kind == TypeKind.STR:
        if isinstance(value, str):
            return value
        raise _mismatch(value, spec, path)

    if kind == TypeKind.BYTES:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        raise _mismatch(value, spec, path)

    if kind == TypeKind.NDARRAY:
        return _encode_array(value, spec, path)

    if kind == TypeKind.LIST:
        if not isinstance(value, (list, tuple)):
            raise _mismatch(value, spec, path)
        item_spec = spec.items[0]
        return [_encode_value(v, item_spec, f"{path}[{i}]") for i, v in enumerate(value)]

    if kind == TypeKind.TUPLE:
        if not isinstance(value, (list, tuple)):
            raise _mismatch(value, spec, path)
        if len(value) != len(spec.items):
            raise EncodingError(
                f"expected {len(spec.items)} items, got {len(value)}", path
            )
        return [
            _encode_value(v, item_spec, f"{path}[{i}]")
            for i, (v, item_spec) in enumerate(zip(value, spec.items))
        ]

    if kind == TypeKind.RECORD:
        # Exact type only: a subclass may carry fields the declared type does not
        if type(value) is not spec.py_type:
            raise _mismatch(value, spec, path)
        return _encode_record(value, get_schema(spec.py_type), path)

    raise EncodingError(f"no encoding for {kind.value}", path)


def _encode_array(value: Any, spec: TypeSpec, path: str) -> dict:
    if not isinstance(value, np.ndarray):
        raise _mismatch(value, spec, path)
    if value.dtype.kind not in _ARRAY_KINDS:
        raise EncodingError(f"unsupported array dtype {value.dtype}", path)

    little = value.astype(value.dtype.newbyteorder("<"), copy=False)
    return {
        "dtype": little.dtype.str,
        "shape": [int(n) for n in little.shape],
        "data": little.tobytes(order="C"),
    }


def _is_integer(value: Any) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, np.integer))


def _mismatch(value: Any, spec: TypeSpec, path: str) -> EncodingError:
    return EncodingError(
        f"expected {spec.describe()}, got {type(value).__name__} ({value!r:.60})",
        path,
    )
