"""
Relationship fieldtype pointing at other entries.

The stored value is an ordered list of entry ids.  preload() resolves them to
summaries so the component can render titles without a round trip per item.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select

from fieldkit.fieldtypes.base import Fieldtype, PreloadContext
from fieldkit.fieldtypes.components import FieldtypeComponent, IndexComponent
from fieldkit.models.entry import Entry

logger = logging.getLogger(__name__)


def entry_ids(value: Any, strict: bool = False) -> list[int]:
    """
    Normalize a value to a de-duplicated, ordered list of int ids.

    Items that are not numeric ids are dropped, or raise ValueError when
    `strict` is set.
    """
    if value in (None, "", []):
        return []
    if not isinstance(value, (list, tuple)):
        value = [value]
    ids: list[int] = []
    for item in value:
        try:
            entry_id = int(item)
        except (TypeError, ValueError):
            if strict:
                raise ValueError(f"Not an entry id: {item!r}") from None
            logger.debug("Dropping non-numeric entry id %r", item)
            continue
        if entry_id not in ids:
            ids.append(entry_id)
    return ids


class EntriesComponent(FieldtypeComponent):
    def select(self, entry_id: int, summary: dict[str, Any] | None = None) -> None:
        ids = entry_ids(self.value)
        if entry_id in ids:
            return
        self.update([*ids, entry_id])
        if summary is not None:
            self.update_meta({"data": [*self.meta.get("data", []), summary]})

    def deselect(self, entry_id: int) -> None:
        self.update([i for i in entry_ids(self.value) if i != entry_id])

    def reorder(self, ordered_ids: list[int]) -> None:
        if sorted(ordered_ids) != sorted(entry_ids(self.value)):
            raise ValueError("reorder() must receive the currently selected ids")
        self.update(list(ordered_ids))


class EntriesIndexComponent(IndexComponent):
    def display(self) -> str:
        count = len(self.value or [])
        return "1 entry" if count == 1 else f"{count} entries"


class EntriesFieldtype(Fieldtype):
    handle = "entries"
    title = "Entries"
    description = "Link to one or more other entries."
    icon = "link"
    categories = ("relationship",)
    config_fields = {
        "collections": {"type": "array", "default": []},
        "max_items": {"type": "integer", "default": None},
        "required": {"type": "toggle", "default": False},
    }

    component = EntriesComponent
    index_component = EntriesIndexComponent

    async def preload(self, context: PreloadContext) -> dict[str, Any]:
        ids = entry_ids(context.value)
        if not ids:
            return {"data": []}
        if context.db is None:
            raise RuntimeError("entries preload requires a database session")

        query = select(Entry).where(Entry.id.in_(ids))
        collections = self.config.get("collections")
        if collections:
            query = query.where(Entry.collection.in_(collections))
        result = await context.db.execute(query)
        found = {entry.id: entry.summary() for entry in result.scalars().all()}

        missing = [i for i in ids if i not in found]
        if missing:
            logger.debug("Field %s references missing entries: %s", context.field_id, missing)
        return {"data": [found.get(i, {"id": i, "title": None, "invalid": True}) for i in ids]}

    def pre_process(self, value: Any) -> list[int]:
        return entry_ids(value)

    def process(self, value: Any) -> list[int]:
        ids = entry_ids(value)
        max_items = self.config.get("max_items")
        return ids[:max_items] if max_items else ids

    def validate(self, value: Any) -> list[str]:
        errors = super().validate(value)
        try:
            ids = entry_ids(value, strict=True)
        except ValueError:
            return [*errors, "Entries must be referenced by numeric id."]
        max_items = self.config.get("max_items")
        if max_items and len(ids) > max_items:
            errors.append(f"At most {max_items} entries may be selected.")
        return errors

    def pre_process_index(self, value: Any) -> list[int]:
        return entry_ids(value)
