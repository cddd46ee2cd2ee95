"""Tests for structdigest.schema module."""

import threading
from dataclasses import dataclass
from typing import Annotated, Any, Optional, Union

import numpy as np
import numpy.typing as npt
import pytest
from pydantic import BaseModel

from structdigest import SchemaError, TypeKind, get_schema, is_registered, register, registered_types
from structdigest.schema import is_record_type
from conftest import Address, Customer, Measurement, Person, PersonModel, SignalModel, TreeNode


class TestRegister:
    """Test explicit registration."""

    def test_register_returns_class(self):
        assert register(Person) is Person

    def test_register_as_decorator(self):
        @register
        @dataclass
        class Point:
            x: float
            y: float

        assert is_registered(Point)
        assert get_schema(Point).field_names() == ["x", "y"]

    def test_register_idempotent(self):
        register(Person)
        schema = get_schema(Person)
        register(Person)
        assert get_schema(Person) is schema

    def test_get_schema_registers_lazily(self):
        assert not is_registered(Person)
        get_schema(Person)
        assert is_registered(Person)

    def test_nested_records_registered(self):
        register(Customer)
        assert is_registered(Person)
        assert is_registered(Address)

    def test_registered_types_in_order(self):
        register(Address)
        register(Person)
        assert registered_types() == [Address, Person]

    def test_concurrent_registration(self):
        schemas = []

        def worker():
            schemas.append(get_schema(Customer))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(schemas) == 8
        assert all(s is schemas[0] for s in schemas)


class TestSchemaFields:
    """Test resolved field specs."""

    def test_declaration_order(self):
        assert get_schema(Customer).field_names() == ["person", "address", "tags", "scores"]

    def test_schema_name(self):
        assert get_schema(Person).name == "Person"

    def test_primitive_kinds(self):
        kinds = [f.spec.kind for f in get_schema(Address).fields]
        assert kinds == [TypeKind.STR, TypeKind.INT, TypeKind.OPTIONAL]

    def test_numpy_kinds(self):
        specs = {f.name: f.spec for f in get_schema(Measurement).fields}
        assert specs["reading"].kind == TypeKind.NP_FLOAT
        assert specs["reading"].py_type is np.float32
        assert specs["samples"].kind == TypeKind.NDARRAY
        assert specs["window"].kind == TypeKind.TUPLE
        assert len(specs["window"].items) == 2

    def test_uint32_field(self):
        spec = get_schema(Person).fields[0].spec
        assert spec.kind == TypeKind.NP_INT
        assert spec.py_type is np.uint32

    def test_variadic_tuple_is_list(self):
        spec = get_schema(Customer).fields[3].spec
        assert spec.kind == TypeKind.LIST
        assert spec.py_type is tuple
        assert spec.items[0].kind == TypeKind.FLOAT

    def test_nested_record_kind(self):
        spec = get_schema(Customer).fields[0].spec
        assert spec.kind == TypeKind.RECORD
        assert spec.py_type is Person

    def test_self_reference(self):
        spec = get_schema(TreeNode).fields[1].spec
        assert spec.kind == TypeKind.LIST
        assert spec.items[0].py_type is TreeNode

    def test_pydantic_fields(self):
        assert get_schema(PersonModel).field_names() == ["id", "name"]
        note = get_schema(SignalModel).fields[2].spec
        assert note.kind == TypeKind.OPTIONAL
        assert note.items[0].kind == TypeKind.STR

    def test_annotated_stripped(self):
        @dataclass
        class Tagged:
            value: Annotated[int, "meters"]

        assert get_schema(Tagged).fields[0].spec.kind == TypeKind.INT

    def test_ndarray_generic_alias(self):
        @dataclass
        class Typed:
            values: npt.NDArray[np.float64]

        assert get_schema(Typed).fields[0].spec.kind == TypeKind.NDARRAY

    def test_describe(self):
        spec = get_schema(Customer).fields[2].spec
        assert spec.describe() == "list[str]"
        assert get_schema(Address).fields[2].spec.describe() == "str | None"


class TestSchemaErrors:
    """Test that unsupported shapes are rejected at registration time."""

    def test_plain_class_rejected(self):
        class Plain:
            x: int

        with pytest.raises(SchemaError, match="not a record type"):
            register(Plain)

    def test_instance_rejected(self, alice):
        with pytest.raises(SchemaError):
            register(alice)

    def test_base_model_itself_rejected(self):
        with pytest.raises(SchemaError):
            register(BaseModel)

    @pytest.mark.parametrize(
        "annotation",
        [dict, dict[str, int], set[int], Any, object, list, tuple, Union[int, str], complex],
    )
    def test_unsupported_annotation(self, annotation):
        @dataclass
        class Bad:
            value: annotation

        with pytest.raises(SchemaError, match=r"Bad\.value"):
            register(Bad)
        assert not is_registered(Bad)

    def test_unsupported_nested_in_list(self):
        @dataclass
        class Bad:
            values: list[dict]

        with pytest.raises(SchemaError):
            register(Bad)

    def test_unresolvable_forward_reference(self):
        @dataclass
        class Dangling:
            other: "DoesNotExist"  # noqa: F821

        with pytest.raises(SchemaError, match="cannot resolve"):
            register(Dangling)

    def test_failed_nested_registration_leaves_outer_unregistered(self):
        @dataclass
        class Inner:
            value: dict

        @dataclass
        class Outer:
            inner: Inner

        with pytest.raises(SchemaError, match=r"Inner\.value"):
            register(Outer)
        assert not is_registered(Outer)
        assert not is_registered(Inner)

    def test_optional_union(self):
        @dataclass
        class Fine:
            value: Optional[float]

        register(Fine)
        assert is_registered(Fine)


class TestIsRecordType:
    def test_dataclass(self):
        assert is_record_type(Person)

    def test_pydantic(self):
        assert is_record_type(PersonModel)

    def test_other(self):
        assert not is_record_type(int)
        assert not is_record_type(Person(1, "x"))
        assert not is_record_type(BaseModel)
