"""
Fieldtype Registry

FieldtypeRegistry: in-process registry mapping a validated handle to a
FieldtypeEntry (definition class + primary component + optional index
component).

Registration is last-write-wins.  Component names are checked against the
`<handle>-fieldtype[-index]` convention when they are bound, so a misspelled
name fails loudly instead of silently rendering nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from fieldkit.exceptions import ComponentNameMismatchError, FieldtypeNotFoundError, MissingComponentError
from fieldkit.fieldtypes.components import MUTATORS, ComponentDescriptor, FieldtypeComponent, IndexComponent
from fieldkit.fieldtypes.handles import (
    FieldtypeHandle,
    component_name,
    index_component_name,
    parse_component_name,
)

if TYPE_CHECKING:
    from fieldkit.fieldtypes.base import Fieldtype

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldtypeEntry:
    """Everything registered under one handle."""

    handle: FieldtypeHandle
    fieldtype_cls: type[Fieldtype]
    component: ComponentDescriptor | None = None
    index_component: ComponentDescriptor | None = None

    def make(self, config: Mapping[str, Any] | None = None) -> Fieldtype:
        """Instantiate the definition for one field instance."""
        return self.fieldtype_cls(config)


class FieldtypeRegistry:
    """In-process registry for fieldtypes and their UI components."""

    def __init__(self) -> None:
        self._entries: dict[FieldtypeHandle, FieldtypeEntry] = {}

    # ── Registration ──────────────────────────────────────────────────────────

    def register(
        self,
        fieldtype_cls: type[Fieldtype],
        component: type[FieldtypeComponent] | None = None,
        index_component: type[IndexComponent] | None = None,
    ) -> FieldtypeEntry:
        """
        Register a fieldtype class under its handle.

        Components default to the class's `component` / `index_component`
        attributes.  A second registration for the same handle replaces the
        first; re-registering the same class keeps components that were bound
        by name in the meantime.
        """
        handle = fieldtype_cls.get_handle()
        previous = self._entries.get(handle)

        entry = FieldtypeEntry(
            handle=handle,
            fieldtype_cls=fieldtype_cls,
            component=self._describe(
                component_name(handle), component or fieldtype_cls.component, FieldtypeComponent
            ),
            index_component=self._describe(
                index_component_name(handle), index_component or fieldtype_cls.index_component, IndexComponent
            ),
        )
        if previous is not None and previous.fieldtype_cls is fieldtype_cls:
            entry = replace(
                entry,
                component=entry.component or previous.component,
                index_component=entry.index_component or previous.index_component,
            )

        if previous is not None and previous != entry:
            logger.warning(
                "Fieldtype %s re-registered: %s replaces %s",
                handle,
                fieldtype_cls.__name__,
                previous.fieldtype_cls.__name__,
            )
        self._entries[handle] = entry
        logger.info("Fieldtype registered: %s (%s)", handle, fieldtype_cls.__name__)
        return entry

    def register_component(self, name: str, component_cls: type) -> FieldtypeEntry:
        """
        Bind a component class by its conventional name.

        Raises:
            ComponentNameMismatchError: if the name is malformed, names an
                unregistered handle, or the class kind does not match the
                name's variant.
        """
        parsed = parse_component_name(name)
        entry = self._entries.get(parsed.handle)
        if entry is None:
            raise ComponentNameMismatchError(
                name,
                f"no fieldtype registered under handle '{parsed.handle}'",
                expected=self._closest_name(parsed.handle, parsed.is_index),
            )

        expected_base = IndexComponent if parsed.is_index else FieldtypeComponent
        if not isinstance(component_cls, type):
            raise ComponentNameMismatchError(name, f"component must subclass {expected_base.__name__}")
        descriptor = self._describe(name, component_cls, expected_base)
        if parsed.is_index:
            entry = replace(entry, index_component=descriptor)
        else:
            entry = replace(entry, component=descriptor)
        self._entries[parsed.handle] = entry
        logger.info("Component bound: %s -> %s", name, component_cls.__name__)
        return entry

    def unregister(self, handle: str) -> None:
        """Remove a fieldtype; unknown handles raise FieldtypeNotFoundError."""
        entry = self.get(handle)
        del self._entries[entry.handle]
        logger.info("Fieldtype unregistered: %s", entry.handle)

    # ── Lookup ────────────────────────────────────────────────────────────────

    def get(self, handle: str) -> FieldtypeEntry:
        """Return the entry for `handle` or raise FieldtypeNotFoundError."""
        entry = self._entries.get(handle)  # type: ignore[call-overload]
        if entry is None:
            raise FieldtypeNotFoundError(handle)
        return entry

    def find(self, handle: str) -> FieldtypeEntry | None:
        """Return the entry for `handle`, or None if not registered."""
        return self._entries.get(handle)  # type: ignore[call-overload]

    def is_registered(self, handle: str) -> bool:
        return handle in self._entries

    def all_entries(self) -> list[FieldtypeEntry]:
        """Return all entries in registration order."""
        return list(self._entries.values())

    def selectable(self) -> list[FieldtypeEntry]:
        """Entries offered in the admin field picker."""
        return [e for e in self._entries.values() if e.fieldtype_cls.selectable]

    def make(self, handle: str, config: Mapping[str, Any] | None = None) -> Fieldtype:
        return self.get(handle).make(config)

    def resolve_component(self, handle: str) -> ComponentDescriptor:
        """
        Return the primary component for `handle`.

        Raises:
            FieldtypeNotFoundError: no fieldtype under this handle.
            MissingComponentError:  fieldtype registered without a component.
        """
        entry = self.get(handle)
        if entry.component is None:
            raise MissingComponentError(entry.handle, component_name(entry.handle))
        return entry.component

    def resolve_index_component(self, handle: str) -> ComponentDescriptor:
        """Return the index component, falling back to the generic IndexComponent."""
        entry = self.get(handle)
        if entry.index_component is not None:
            return entry.index_component
        return ComponentDescriptor(name=index_component_name(entry.handle), component_cls=IndexComponent)

    # ── Helpers ───────────────────────────────────────────────────────────────

    @staticmethod
    def _describe(name: str, component_cls: type | None, base: type) -> ComponentDescriptor | None:
        if component_cls is None:
            return None
        if not issubclass(component_cls, base):
            raise ComponentNameMismatchError(name, f"component must subclass {base.__name__}")
        if base is IndexComponent:
            mutators = [m for m in MUTATORS if getattr(component_cls, m, None) is not None]
            if mutators:
                raise ComponentNameMismatchError(name, f"index component exposes {', '.join(mutators)}")
        return ComponentDescriptor(name=name, component_cls=component_cls)

    def _closest_name(self, handle: str, is_index: bool) -> str | None:
        """Suggest a registered handle that differs only by underscores."""
        squashed = handle.replace("_", "")
        for candidate in self._entries:
            if candidate.replace("_", "") == squashed:
                return index_component_name(candidate) if is_index else component_name(candidate)
        return None


# ── Global singleton ──────────────────────────────────────────────────────────
fieldtype_registry = FieldtypeRegistry()


def get_fieldtype_registry() -> FieldtypeRegistry:
    """Return the global FieldtypeRegistry singleton."""
    return fieldtype_registry
