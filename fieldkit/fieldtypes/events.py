"""
Field Store Events

Every mutation of a field's value or meta travels to the central store as one
of these events.  Event names follow the `category.action` convention.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union

# ── Event names ───────────────────────────────────────────────────────────────
EVENT_FIELD_ADDED = "field.added"
EVENT_FIELD_INPUT = "field.input"
EVENT_FIELD_META_UPDATED = "field.meta_updated"
EVENT_FIELD_UNDONE = "field.undone"

ALL_EVENTS: list[str] = [
    EVENT_FIELD_ADDED,
    EVENT_FIELD_INPUT,
    EVENT_FIELD_META_UPDATED,
    EVENT_FIELD_UNDONE,
]


@dataclass(frozen=True)
class FieldInput:
    """A component asked for a new value."""

    field_id: str
    value: Any
    name: str = field(default=EVENT_FIELD_INPUT, init=False)


@dataclass(frozen=True)
class MetaUpdate:
    """A component asked for keys to be merged into its meta."""

    field_id: str
    partial: Mapping[str, Any]
    name: str = field(default=EVENT_FIELD_META_UPDATED, init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "partial", MappingProxyType(dict(self.partial)))


@dataclass(frozen=True)
class FieldUndo:
    """The store owner asked for a field's last change to be reverted."""

    field_id: str
    name: str = field(default=EVENT_FIELD_UNDONE, init=False)


FieldEvent = Union[FieldInput, MetaUpdate, FieldUndo]
