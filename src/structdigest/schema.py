"""Schema registration for record types.

A record type is a dataclass or a pydantic model whose fields, field order
and field types are fixed by its class definition. Before a record can be
encoded its shape is validated once and cached here; encoding then walks the
cached field list instead of inspecting the object.

Example:
    from dataclasses import dataclass
    import numpy as np
    from structdigest import register

    @register
    @dataclass
    class Sample:
        id: np.uint32
        label: str
        readings: list[float]
"""

import dataclasses
import threading
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np
from pydantic import BaseModel

from .exceptions import SchemaError


class TypeKind(Enum):
    """Classification of a declared field type."""
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STR = "str"
    BYTES = "bytes"
    NP_INT = "np_int"          # fixed-width numpy integer, range-checked
    NP_FLOAT = "np_float"      # numpy float32/float64
    NDARRAY = "ndarray"
    LIST = "list"              # list[T] or tuple[T, ...]
    TUPLE = "tuple"            # tuple[T1, T2, ...] with fixed arity
    OPTIONAL = "optional"
    RECORD = "record"


_PRIMITIVES = {
    bool: TypeKind.BOOL,
    int: TypeKind.INT,
    float: TypeKind.FLOAT,
    str: TypeKind.STR,
    bytes: TypeKind.BYTES,
}

_NUMPY_INTS = (
    np.int8, np.int16, np.int32, np.int64,
    np.uint8, np.uint16, np.uint32, np.uint64,
)

_NUMPY_FLOATS = (np.float32, np.float64)


@dataclass(frozen=True)
class TypeSpec:
    """Resolved form of a field annotation."""
    kind: TypeKind
    py_type: Any = None
    items: tuple["TypeSpec", ...] = ()

    def describe(self) -> str:
        """Human-readable type name for diagnostics."""
        if self.kind == TypeKind.LIST:
            return f"list[{self.items[0].describe()}]"
        if self.kind == TypeKind.TUPLE:
            return f"tuple[{', '.join(item.describe() for item in self.items)}]"
        if self.kind == TypeKind.OPTIONAL:
            return f"{self.items[0].describe()} | None"
        if self.py_type is not None:
            return getattr(self.py_type, "__qualname__", repr(self.py_type))
        return self.kind.value


@dataclass(frozen=True)
class FieldSpec:
    """A single record field in declaration order."""
    name: str
    annotation: Any
    spec: TypeSpec


@dataclass(frozen=True)
class RecordSchema:
    """Validated, ordered field list of a record type."""
    record_type: type
    fields: tuple[FieldSpec, ...]

    @property
    def name(self) -> str:
        return self.record_type.__qualname__

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]


_registry: dict[type, RecordSchema] = {}
_pending: set[type] = set()
_lock = threading.RLock()


def is_record_type(cls: Any) -> bool:
    """Check whether cls is a dataclass or pydantic model class."""
    if not isinstance(cls, type) or typing.get_origin(cls) is not None:
        return False
    if dataclasses.is_dataclass(cls):
        return True
    return issubclass(cls, BaseModel) and cls is not BaseModel


def register(cls: type) -> type:
    """
    Validate a record type and cache its schema.

    Usable as a class decorator. Registering an already registered type is
    a no-op. Nested record types are registered along with it.

    Args:
        cls: A dataclass or pydantic model class

    Returns:
        The class itself, unchanged

    Raises:
        SchemaError: If cls is not a record type or declares a field whose
            type has no canonical encoding
    """
    with _lock:
        _register_locked(cls)
    return cls


def get_schema(cls: type) -> RecordSchema:
    """Return the schema for cls, registering it on first use."""
    schema = _registry.get(cls)
    if schema is not None:
        return schema
    with _lock:
        return _register_locked(cls)


def is_registered(cls: type) -> bool:
    return cls in _registry


def registered_types() -> list[type]:
    """All registered record types, in registration order."""
    return list(_registry)


def clear_registry() -> None:
    """Forget every registered schema."""
    with _lock:
        _registry.clear()
        _pending.clear()


def _register_locked(cls: type) -> RecordSchema:
    if not is_record_type(cls):
        raise SchemaError(
            f"{cls!r} is not a record type (expected a dataclass or pydantic model)"
        )

    if cls in _registry:
        return _registry[cls]

    _pending.add(cls)
    try:
        fields = tuple(
            FieldSpec(name, annotation, _resolve(annotation, cls, name))
            for name, annotation in _declared_fields(cls)
        )
    finally:
        _pending.discard(cls)

    schema = RecordSchema(record_type=cls, fields=fields)
    _registry[cls] = schema
    return schema


def _declared_fields(cls: type) -> list[tuple[str, Any]]:
    """(name, annotation) pairs in declaration order."""
    if dataclasses.is_dataclass(cls):
        try:
            hints = typing.get_type_hints(cls, include_extras=True)
        except NameError as e:
            raise SchemaError(
                f"{cls.__qualname__}: cannot resolve field annotations: {e}"
            ) from e
        return [(f.name, hints.get(f.name, f.type)) for f in dataclasses.fields(cls)]

    return [(name, info.annotation) for name, info in cls.model_fields.items()]


def _resolve(annotation: Any, owner: type, field: str) -> TypeSpec:
    """Resolve a field annotation to a TypeSpec."""
    where = f"{owner.__qualname__}.{field}"

    if typing.get_origin(annotation) is typing.Annotated:
        annotation = typing.get_args(annotation)[0]

    if annotation in _PRIMITIVES:
        return TypeSpec(_PRIMITIVES[annotation])

    if annotation in _NUMPY_INTS:
        return TypeSpec(TypeKind.NP_INT, py_type=annotation)

    if annotation in _NUMPY_FLOATS:
        return TypeSpec(TypeKind.NP_FLOAT, py_type=annotation)

    if annotation is np.ndarray or typing.get_origin(annotation) is np.ndarray:
        return TypeSpec(TypeKind.NDARRAY, py_type=np.ndarray)

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin is typing.Union or origin is types.UnionType:
        non_none = [a for a in args if a is not type(None)]
        if len(non_none) != 1 or len(args) != 2:
            raise SchemaError(
                f"{where}: only Optional[T] unions are supported, got {annotation!r}"
            )
        return TypeSpec(TypeKind.OPTIONAL, items=(_resolve(non_none[0], owner, field),))

    if origin is list:
        if len(args) != 1:
            raise SchemaError(f"{where}: list fields must declare an item type")
        return TypeSpec(TypeKind.LIST, py_type=list, items=(_resolve(args[0], owner, field),))

    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return TypeSpec(TypeKind.LIST, py_type=tuple, items=(_resolve(args[0], owner, field),))
        if args == ((),):
            return TypeSpec(TypeKind.TUPLE, py_type=tuple)
        return TypeSpec(
            TypeKind.TUPLE,
            py_type=tuple,
            items=tuple(_resolve(a, owner, field) for a in args),
        )

    if is_record_type(annotation):
        # Self-referencing and mutually recursive records resolve lazily
        if annotation not in _registry and annotation not in _pending:
            _register_locked(annotation)
        return TypeSpec(TypeKind.RECORD, py_type=annotation)

    if annotation in (list, tuple):
        raise SchemaError(f"{where}: {annotation.__name__} fields must declare an item type")

    raise SchemaError(f"{where}: unsupported field type {annotation!r}")
