"""
Form Service

Orchestrates fieldtypes for one publish form:

    open()    resolve every field's fieldtype + component, pre-process values,
              preload meta concurrently, seed a FieldStore
    submit()  validate and process the store's canonical values
    index()   condense values for listing views

Preload failure policy: a failing preload never blocks the form.  The field is
seeded with empty meta, its state carries `preload_error`, and the failure is
logged and reported in the session's `errors`.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from fieldkit.exceptions import (
    DuplicateFieldError,
    FieldNotFoundError,
    FieldValidationError,
    FormNotFoundError,
    PreloadError,
)
from fieldkit.fieldtypes.base import PreloadContext
from fieldkit.fieldtypes.registry import FieldtypeRegistry, fieldtype_registry
from fieldkit.store.store import FieldStore

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from fieldkit.fieldtypes.base import Fieldtype
    from fieldkit.fieldtypes.components import FieldtypeComponent

logger = logging.getLogger(__name__)


@dataclass
class FieldBlueprint:
    """One field of a form: its id, fieldtype handle, config and stored value."""

    field_id: str
    fieldtype: str
    config: dict[str, Any] = field(default_factory=dict)
    value: Any = None


class FormSession:
    """A form being edited: field definitions plus the store that owns their values."""

    def __init__(self, form_id: str, registry: FieldtypeRegistry) -> None:
        self.form_id = form_id
        self.registry = registry
        self.store = FieldStore()
        self.fieldtypes: dict[str, Fieldtype] = {}
        self.errors: dict[str, str] = {}
        self._components: dict[str, FieldtypeComponent] = {}

    def fieldtype(self, field_id: str) -> Fieldtype:
        try:
            return self.fieldtypes[field_id]
        except KeyError:
            raise FieldNotFoundError(field_id) from None

    def component(self, field_id: str) -> FieldtypeComponent:
        """Return the mounted component for a field, mounting it on first use."""
        if field_id not in self._components:
            state = self.store.state(field_id)
            descriptor = self.registry.resolve_component(state.handle)
            self._components[field_id] = self.store.mount(field_id, descriptor.component_cls)
        return self._components[field_id]

    def to_dict(self) -> dict[str, Any]:
        return {
            "form_id": self.form_id,
            "fields": [self.field_view(field_id) for field_id in self.store.field_ids()],
            "errors": dict(self.errors),
            "dirty": self.store.is_dirty(),
        }

    def field_view(self, field_id: str) -> dict[str, Any]:
        state = self.store.state(field_id)
        descriptor = self.registry.resolve_component(state.handle)
        return {
            **state.to_dict(),
            "component": descriptor.name,
            "can_undo": self.store.can_undo(field_id),
        }


class FormService:
    """Runs the fieldtype lifecycle for publish forms and listings."""

    def __init__(
        self,
        registry: FieldtypeRegistry | None = None,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        self.registry = registry if registry is not None else fieldtype_registry
        self.session_factory = session_factory

    # ── Form render ───────────────────────────────────────────────────────────

    async def open(self, blueprints: list[FieldBlueprint], form_id: str | None = None) -> FormSession:
        """
        Build a FormSession for the given fields.

        Raises:
            DuplicateFieldError:    two fields share an id.
            FieldtypeNotFoundError: a field references an unregistered handle.
            MissingComponentError:  a fieldtype has no primary UI component.
            FieldValidationError:   a stored value cannot be pre-processed.
        """
        session = FormSession(form_id or uuid.uuid4().hex, self.registry)

        counts = Counter(bp.field_id for bp in blueprints)
        duplicates = [field_id for field_id, n in counts.items() if n > 1]
        if duplicates:
            raise DuplicateFieldError(duplicates)

        # Resolve everything before doing any I/O so configuration errors fail fast
        prepared: list[tuple[FieldBlueprint, Fieldtype, Any]] = []
        bad_values: dict[str, list[str]] = {}
        for blueprint in blueprints:
            self.registry.resolve_component(blueprint.fieldtype)
            fieldtype = self.registry.make(blueprint.fieldtype, blueprint.config)
            try:
                value = fieldtype.pre_process(blueprint.value)
            except (TypeError, ValueError) as exc:
                bad_values[blueprint.field_id] = [f"Unusable stored value: {exc}"]
                continue
            prepared.append((blueprint, fieldtype, value))
        if bad_values:
            raise FieldValidationError(bad_values)

        results = await asyncio.gather(
            *(self._preload(bp.field_id, fieldtype, value) for bp, fieldtype, value in prepared)
        )

        for (blueprint, fieldtype, value), (meta, error) in zip(prepared, results):
            session.fieldtypes[blueprint.field_id] = fieldtype
            session.store.add_field(
                blueprint.field_id,
                fieldtype.get_handle(),
                value=value,
                meta=meta,
                config=fieldtype.config,
                preload_error=error.message if error else None,
            )
            if error:
                session.errors[blueprint.field_id] = error.message

        logger.info(
            "Form %s opened with %d fields (%d preload failures)",
            session.form_id,
            len(prepared),
            len(session.errors),
        )
        return session

    async def _preload(
        self, field_id: str, fieldtype: Fieldtype, value: Any
    ) -> tuple[dict[str, Any], PreloadError | None]:
        try:
            if self.session_factory is None:
                meta = await fieldtype.preload(PreloadContext(field_id=field_id, value=value))
            else:
                async with self.session_factory() as db:
                    meta = await fieldtype.preload(PreloadContext(field_id=field_id, value=value, db=db))
        except Exception as exc:
            error = PreloadError(field_id, fieldtype.get_handle(), exc)
            logger.warning("%s", error.message, extra={"field": field_id, "handle": fieldtype.get_handle()})
            return {}, error
        return dict(meta or {}), None

    # ── Submission ────────────────────────────────────────────────────────────

    def submit(self, session: FormSession) -> dict[str, Any]:
        """
        Validate and process every field's canonical value.

        Returns:
            Mapping of field id to processed (storable) value.

        Raises:
            FieldValidationError: with the error messages of every failing field.
        """
        return self.process_values(session.fieldtypes, {fid: session.store.value(fid) for fid in session.fieldtypes})

    def process_values(self, fieldtypes: Mapping[str, Fieldtype], values: Mapping[str, Any]) -> dict[str, Any]:
        errors: dict[str, list[str]] = {}
        processed: dict[str, Any] = {}

        for field_id, fieldtype in fieldtypes.items():
            value = values.get(field_id)
            field_errors = fieldtype.validate(value)
            if field_errors:
                errors[field_id] = field_errors
                continue
            processed[field_id] = fieldtype.process(value)

        if errors:
            raise FieldValidationError(errors)
        return processed

    # ── Listings ──────────────────────────────────────────────────────────────

    def index(self, handle: str, values: list[Any], config: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Pre-process values for a listing and render them with the index component."""
        fieldtype = self.registry.make(handle, config)
        descriptor = self.registry.resolve_index_component(handle)
        rows = []
        for position, value in enumerate(values):
            try:
                display_value = fieldtype.pre_process_index(value)
            except (TypeError, ValueError) as exc:
                raise FieldValidationError({f"values.{position}": [str(exc)]}) from exc
            component = descriptor.component_cls(display_value, fieldtype.get_handle())
            rows.append({"value": display_value, "display": component.display(), "component": descriptor.name})
        return rows


class FormSessionManager:
    """In-memory registry of open form sessions."""

    def __init__(self) -> None:
        self._sessions: dict[str, FormSession] = {}

    def add(self, session: FormSession) -> FormSession:
        self._sessions[session.form_id] = session
        return session

    def get(self, form_id: str) -> FormSession:
        try:
            return self._sessions[form_id]
        except KeyError:
            raise FormNotFoundError(form_id) from None

    def discard(self, form_id: str) -> None:
        self.get(form_id)
        del self._sessions[form_id]
        logger.debug("Form %s discarded", form_id)

    def __len__(self) -> int:
        return len(self._sessions)


# ── Module-level singleton ────────────────────────────────────────────────────

form_sessions = FormSessionManager()


def get_form_sessions() -> FormSessionManager:
    """Return the global FormSessionManager singleton."""
    return form_sessions
