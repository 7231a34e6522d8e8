"""
Central Field Store

FieldStore owns the canonical value and meta of every field instance in a
form.  Components never write to it directly: they hold a FieldChannel whose
update()/update_meta() turn into events, and the store applies events one at
a time in the order they were dispatched.  Dispatching from inside a listener
queues the event behind the one being applied.
"""

from __future__ import annotations

import copy
import logging
from collections import defaultdict, deque
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from fieldkit.exceptions import FieldNotFoundError, NothingToUndoError
from fieldkit.fieldtypes.components import FieldProps
from fieldkit.fieldtypes.events import (
    EVENT_FIELD_ADDED,
    FieldEvent,
    FieldInput,
    FieldUndo,
    MetaUpdate,
)
from fieldkit.store.state import ChangeRecord, FieldState

if TYPE_CHECKING:
    from fieldkit.fieldtypes.components import FieldtypeComponent

logger = logging.getLogger(__name__)

Listener = Callable[[FieldState], None]


class FieldChannel:
    """Update channel bound to one field of one store."""

    __slots__ = ("_store", "_field_id")

    def __init__(self, store: FieldStore, field_id: str) -> None:
        self._store = store
        self._field_id = field_id

    @property
    def field_id(self) -> str:
        return self._field_id

    def update(self, value: Any) -> None:
        self._store.dispatch(FieldInput(self._field_id, value))

    def update_meta(self, partial: Mapping[str, Any]) -> None:
        self._store.dispatch(MetaUpdate(self._field_id, partial))


class FieldStore:
    """Single source of truth for field values and meta data."""

    def __init__(self, max_history: int = 50) -> None:
        self._states: dict[str, FieldState] = {}
        self._initial: dict[str, FieldState] = {}
        self._history: dict[str, deque[FieldState]] = {}
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._changes: list[ChangeRecord] = []
        self._queue: deque[FieldEvent] = deque()
        self._dispatching = False
        self._max_history = max_history

    # ── Fields ────────────────────────────────────────────────────────────────

    def add_field(
        self,
        field_id: str,
        handle: str,
        value: Any = None,
        meta: Mapping[str, Any] | None = None,
        config: Mapping[str, Any] | None = None,
        preload_error: str | None = None,
    ) -> FieldState:
        """Seed a field's canonical state (initial render)."""
        state = FieldState(
            field_id=field_id,
            handle=handle,
            value=copy.deepcopy(value),
            meta=meta or {},
            config=config or {},
            preload_error=preload_error,
        )
        self._states[field_id] = state
        self._initial[field_id] = state
        self._history[field_id] = deque(maxlen=self._max_history)
        self._changes.append(ChangeRecord(EVENT_FIELD_ADDED, field_id, state.version))
        return state

    def has_field(self, field_id: str) -> bool:
        return field_id in self._states

    def field_ids(self) -> list[str]:
        return list(self._states)

    def state(self, field_id: str) -> FieldState:
        try:
            return self._states[field_id]
        except KeyError:
            raise FieldNotFoundError(field_id) from None

    def value(self, field_id: str) -> Any:
        return copy.deepcopy(self.state(field_id).value)

    def meta(self, field_id: str) -> dict[str, Any]:
        return copy.deepcopy(dict(self.state(field_id).meta))

    def snapshot(self) -> dict[str, dict[str, Any]]:
        return {field_id: state.to_dict() for field_id, state in self._states.items()}

    # ── Mutation ──────────────────────────────────────────────────────────────

    def channel(self, field_id: str) -> FieldChannel:
        self.state(field_id)
        return FieldChannel(self, field_id)

    def update(self, field_id: str, value: Any) -> FieldState:
        self.dispatch(FieldInput(field_id, value))
        return self.state(field_id)

    def update_meta(self, field_id: str, partial: Mapping[str, Any]) -> FieldState:
        self.dispatch(MetaUpdate(field_id, partial))
        return self.state(field_id)

    def undo(self, field_id: str) -> FieldState:
        """Revert the field's most recent value or meta change."""
        self.state(field_id)
        if not self._history[field_id]:
            raise NothingToUndoError(field_id)
        self.dispatch(FieldUndo(field_id))
        return self.state(field_id)

    def dispatch(self, event: FieldEvent) -> None:
        """Queue an event and apply queued events in arrival order."""
        self.state(event.field_id)
        self._queue.append(event)
        if self._dispatching:
            return

        self._dispatching = True
        try:
            while self._queue:
                self._apply(self._queue.popleft())
        finally:
            self._dispatching = False

    def _apply(self, event: FieldEvent) -> None:
        current = self._states[event.field_id]
        history = self._history[event.field_id]

        if isinstance(event, FieldInput):
            new = current.with_value(event.value)
            history.append(current)
        elif isinstance(event, MetaUpdate):
            new = current.with_meta(event.partial)
            history.append(current)
        elif isinstance(event, FieldUndo):
            if not history:
                logger.debug("Undo for %s skipped: history exhausted", event.field_id)
                return
            previous = history.pop()
            new = FieldState(
                field_id=previous.field_id,
                handle=previous.handle,
                value=previous.value,
                meta=previous.meta,
                config=previous.config,
                version=current.version + 1,
                preload_error=previous.preload_error,
            )
        else:
            raise TypeError(f"Unsupported field event: {event!r}")

        self._states[event.field_id] = new
        self._changes.append(ChangeRecord(event.name, event.field_id, new.version))
        logger.debug("Applied %s to %s (v%d)", event.name, event.field_id, new.version)
        self._notify(new)

    # ── Subscriptions ─────────────────────────────────────────────────────────

    def subscribe(self, field_id: str, listener: Listener) -> Callable[[], None]:
        """Call `listener` with every new state of `field_id`.  Returns an unsubscribe callable."""
        self.state(field_id)
        self._listeners[field_id].append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners[field_id].remove(listener)
            except ValueError:
                pass  # Already removed

        return unsubscribe

    def _notify(self, state: FieldState) -> None:
        for listener in list(self._listeners.get(state.field_id, [])):
            try:
                listener(state)
            except Exception as exc:
                logger.warning("Listener for field %s raised: %s", state.field_id, exc)

    def mount(self, field_id: str, component_cls: type[FieldtypeComponent]) -> FieldtypeComponent:
        """
        Instantiate a component bound to this store.

        The component receives the current props and a channel, and is pushed
        fresh props after every change to its field.
        """
        component = component_cls(FieldProps.from_state(self.state(field_id)), self.channel(field_id))
        self.subscribe(field_id, lambda state: component._receive(FieldProps.from_state(state)))
        return component

    # ── Change tracking ───────────────────────────────────────────────────────

    def is_dirty(self, field_id: str | None = None) -> bool:
        """True when a field (or any field) differs from its initial state."""
        field_ids = [field_id] if field_id is not None else list(self._states)
        for fid in field_ids:
            current, initial = self.state(fid), self._initial[fid]
            if current.value != initial.value or dict(current.meta) != dict(initial.meta):
                return True
        return False

    def changes(self, field_id: str | None = None) -> list[ChangeRecord]:
        if field_id is None:
            return list(self._changes)
        return [c for c in self._changes if c.field_id == field_id]

    def can_undo(self, field_id: str) -> bool:
        self.state(field_id)
        return bool(self._history[field_id])
