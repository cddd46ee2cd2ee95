"""Pytest configuration and shared record types for structdigest tests."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import numpy as np
import pytest
from pydantic import BaseModel, ConfigDict

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from structdigest.schema import clear_registry


@dataclass
class Person:
    id: np.uint32
    name: str


@dataclass
class Address:
    street: str
    number: int
    unit: Optional[str] = None


@dataclass
class Customer:
    person: Person
    address: Address
    tags: list[str] = field(default_factory=list)
    scores: tuple[float, ...] = ()


@dataclass
class Measurement:
    sensor: str
    reading: np.float32
    samples: np.ndarray
    window: tuple[int, int]


@dataclass
class TreeNode:
    label: str
    children: list["TreeNode"] = field(default_factory=list)


class PersonModel(BaseModel):
    id: int
    name: str


class SignalModel(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    channel: np.uint8
    values: np.ndarray
    note: str | None = None


@pytest.fixture(autouse=True)
def fresh_registry():
    """Clear the schema registry before and after each test."""
    clear_registry()
    yield
    clear_registry()


@pytest.fixture
def alice():
    return Person(id=42, name="Alice")


@pytest.fixture
def customer(alice):
    return Customer(
        person=alice,
        address=Address(street="Main St", number=12),
        tags=["vip", "early"],
        scores=(0.5, 1.25),
    )
