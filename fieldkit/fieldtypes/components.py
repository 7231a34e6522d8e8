"""
Fieldtype UI Components

Server-side models of the UI half of a fieldtype.

FieldProps          - read-only value/meta snapshot handed down by the store
UpdateChannel       - the only mutation path a component has (update / update_meta)
FieldtypeComponent  - editable component; receives props + an injected channel
IndexComponent      - listing component; receives a value only, no channel
ComponentDescriptor - registry record binding a component class to its name
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from fieldkit.store.state import FieldState

MUTATORS = ("update", "update_meta")


@runtime_checkable
class UpdateChannel(Protocol):
    """Mutation requests a component may send to the central store."""

    def update(self, value: Any) -> None: ...

    def update_meta(self, partial: Mapping[str, Any]) -> None: ...


class FieldProps:
    """
    Immutable inputs of a component.

    The value is a private deep copy of the store's value, so editing it in
    place never reaches the store; meta is exposed through a mapping proxy.
    """

    __slots__ = ("_field_id", "_handle", "_value", "_meta", "_config", "_version")

    def __init__(
        self,
        field_id: str,
        handle: str,
        value: Any,
        meta: Mapping[str, Any] | None = None,
        config: Mapping[str, Any] | None = None,
        version: int = 0,
    ) -> None:
        object.__setattr__(self, "_field_id", field_id)
        object.__setattr__(self, "_handle", handle)
        object.__setattr__(self, "_value", copy.deepcopy(value))
        object.__setattr__(self, "_meta", MappingProxyType(copy.deepcopy(dict(meta or {}))))
        object.__setattr__(self, "_config", MappingProxyType(dict(config or {})))
        object.__setattr__(self, "_version", version)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("FieldProps are read-only; request changes through update()")

    @classmethod
    def from_state(cls, state: FieldState) -> FieldProps:
        return cls(
            field_id=state.field_id,
            handle=state.handle,
            value=state.value,
            meta=state.meta,
            config=state.config,
            version=state.version,
        )

    field_id = property(lambda self: self._field_id)
    handle = property(lambda self: self._handle)
    value = property(lambda self: self._value)
    meta = property(lambda self: self._meta)
    config = property(lambda self: self._config)
    version = property(lambda self: self._version)

    def __repr__(self) -> str:
        return f"FieldProps(field_id={self._field_id!r}, handle={self._handle!r}, version={self._version})"


class FieldtypeComponent:
    """
    Editable component for one field instance.

    Props flow down from the store; changes flow up through the channel.
    Subclasses override `on_input` to turn user interaction into a new value,
    and may keep transient local state as long as it is mirrored back via
    `update`.
    """

    def __init__(self, props: FieldProps, channel: UpdateChannel) -> None:
        self._props = props
        self._channel = channel
        self.setup()

    # ── Inputs (read-only) ────────────────────────────────────────────────────

    @property
    def props(self) -> FieldProps:
        return self._props

    @property
    def value(self) -> Any:
        return self._props.value

    @property
    def meta(self) -> Mapping[str, Any]:
        return self._props.meta

    @property
    def config(self) -> Mapping[str, Any]:
        return self._props.config

    # ── Mutation channel ──────────────────────────────────────────────────────

    def update(self, value: Any) -> None:
        """Ask the store to replace this field's value."""
        self._channel.update(value)

    def update_meta(self, partial: Mapping[str, Any]) -> None:
        """Ask the store to merge `partial` into this field's meta."""
        self._channel.update_meta(partial)

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def setup(self) -> None:  # noqa: B027
        """Called once after construction; initialise local state here."""

    def props_changed(self, previous: FieldProps) -> None:  # noqa: B027
        """Called after the store pushed new props down."""

    def on_input(self, raw: Any) -> None:
        """Handle a user interaction.  Default: the raw input is the new value."""
        self.update(raw)

    def view(self) -> dict[str, Any]:
        """Serializable description of the component's current inputs."""
        return {
            "field": self._props.field_id,
            "handle": self._props.handle,
            "value": self._props.value,
            "meta": dict(self._props.meta),
            "config": dict(self._props.config),
        }

    def _receive(self, props: FieldProps) -> None:
        previous, self._props = self._props, props
        self.props_changed(previous)


class IndexComponent:
    """
    Read-only listing component.

    Receives a single (already pre-processed) value.  Subclasses may not
    define or inherit `update`/`update_meta`, and neither name can be attached
    to an instance afterwards.
    """

    __slots__ = ("_value", "_handle")

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for name in MUTATORS:
            if getattr(cls, name, None) is not None:
                raise TypeError(f"Index component {cls.__name__} may not expose '{name}'")

    def __init__(self, value: Any, handle: str | None = None) -> None:
        self._value = value
        self._handle = handle

    def __setattr__(self, name: str, value: Any) -> None:
        if name in MUTATORS:
            raise AttributeError(f"Index components are read-only; cannot attach '{name}'")
        super().__setattr__(name, value)

    @property
    def value(self) -> Any:
        return self._value

    @property
    def handle(self) -> str | None:
        return self._handle

    def display(self) -> str:
        """Render the value as a short, non-interactive summary."""
        if self._value is None:
            return ""
        return str(self._value)


@dataclass(frozen=True)
class ComponentDescriptor:
    """A component class bound to its conventional name."""

    name: str
    component_cls: type

    @property
    def is_index(self) -> bool:
        return issubclass(self.component_cls, IndexComponent)
