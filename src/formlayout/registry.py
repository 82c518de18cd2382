"""Field type catalog and field factory."""

from __future__ import annotations

import itertools
import threading
from typing import TYPE_CHECKING
from uuid import uuid4

from formlayout.exceptions import UnknownFieldKindError
from formlayout.typing.enums import FieldKind
from formlayout.typing.models import (
    ChoiceAttributes,
    FieldTypeDescriptor,
    FormField,
    NumberAttributes,
    SelectOption,
    TextAttributes,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from formlayout.typing.protocol import IdFactory

FIELD_TYPES: tuple[FieldTypeDescriptor, ...] = (
    FieldTypeDescriptor(
        kind=FieldKind.TEXT.to_str(),
        label="Text Input",
        icon="📝",
        default_attributes=TextAttributes(min_length=3, max_length=100),
    ),
    FieldTypeDescriptor(
        kind=FieldKind.EMAIL.to_str(),
        label="Email",
        icon="✉️",
        default_attributes=TextAttributes(max_length=255),
    ),
    FieldTypeDescriptor(
        kind=FieldKind.NUMBER.to_str(),
        label="Number",
        icon="🔢",
        default_attributes=NumberAttributes(min_value=0, allow_decimal=False),
    ),
    FieldTypeDescriptor(
        kind=FieldKind.TEXTAREA.to_str(),
        label="Text Area",
        icon="📄",
        default_attributes=TextAttributes(max_length=500),
    ),
    FieldTypeDescriptor(
        kind=FieldKind.SELECT.to_str(),
        label="Dropdown",
        icon="🔽",
        default_attributes=ChoiceAttributes(
            options=[
                SelectOption(id="option_1", value="option_1", label="Option 1"),
                SelectOption(id="option_2", value="option_2", label="Option 2"),
            ],
        ),
    ),
)


def uuid_ids(prefix: str) -> str:
    """Return a random UUID-based identifier.

    Args:
        prefix (str): Entity prefix.

    Returns:
        str: Identifier such as `field_3f2c...`.
    """
    return f"{prefix}_{uuid4().hex}"


class CounterIds:
    """Monotonic identifier factory, unique for the lifetime of the instance."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def __call__(self, prefix: str) -> str:
        with self._lock:
            return f"{prefix}_{next(self._counter)}"


class FieldTypeRegistry:
    """Catalog of field kinds, seeded from a static descriptor table."""

    def __init__(self, descriptors: Iterable[FieldTypeDescriptor] = FIELD_TYPES) -> None:
        self._descriptors: dict[str, FieldTypeDescriptor] = {}
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: FieldTypeDescriptor) -> None:
        """Add a field kind to the catalog.

        Args:
            descriptor (FieldTypeDescriptor): Kind description and defaults.

        Raises:
            ValueError: If the kind is already registered.
        """
        if descriptor.kind in self._descriptors:
            raise ValueError(f"Field kind already registered: {descriptor.kind}")
        self._descriptors[descriptor.kind] = descriptor

    def describe(self, kind: str) -> FieldTypeDescriptor | None:
        """Return the descriptor for a kind, or None when unknown."""
        return self._descriptors.get(kind)

    def kinds(self) -> list[str]:
        """Return registered kinds in registration order."""
        return list(self._descriptors)

    def __contains__(self, kind: object) -> bool:
        return kind in self._descriptors


class FieldFactory:
    """Build new field instances from registry defaults."""

    def __init__(self, registry: FieldTypeRegistry, make_id: IdFactory = uuid_ids) -> None:
        self.registry = registry
        self.make_id = make_id

    def create(self, kind: str, *, page_id: str = "") -> FormField:
        """Create a field of the requested kind.

        The kind-specific attributes are a deep copy of the descriptor defaults,
        so editing one field never leaks into another field or the catalog.

        Args:
            kind (str): Registered field kind.
            page_id (str): Owning page, assigned by the engine.

        Raises:
            UnknownFieldKindError: If the kind is not registered.

        Returns:
            FormField: New field with a fresh identifier.
        """
        descriptor = self.registry.describe(kind)
        if descriptor is None:
            raise UnknownFieldKindError(field_kind=kind)
        return FormField(
            id=self.make_id("field"),
            kind=descriptor.kind,
            page_id=page_id,
            attributes=descriptor.default_attributes.model_copy(deep=True),
        )
