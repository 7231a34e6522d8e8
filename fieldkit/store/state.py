"""Immutable per-field state held by the central store."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any


def _freeze(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(copy.deepcopy(dict(mapping or {})))


@dataclass(frozen=True)
class FieldState:
    """
    Canonical value and meta of one field instance.

    A new FieldState is produced for every applied event; `version` counts
    them.  `preload_error` is set when the fieldtype's preload failed and the
    field was rendered with empty meta instead.
    """

    field_id: str
    handle: str
    value: Any = None
    meta: Mapping[str, Any] = field(default_factory=dict)
    config: Mapping[str, Any] = field(default_factory=dict)
    version: int = 0
    preload_error: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "meta", _freeze(self.meta))
        object.__setattr__(self, "config", _freeze(self.config))

    def with_value(self, value: Any) -> FieldState:
        return replace(self, value=copy.deepcopy(value), version=self.version + 1)

    def with_meta(self, partial: Mapping[str, Any]) -> FieldState:
        """Shallow merge: keys in `partial` overwrite, all other keys are kept."""
        return replace(self, meta={**self.meta, **partial}, version=self.version + 1)

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field_id,
            "handle": self.handle,
            "value": copy.deepcopy(self.value),
            "meta": copy.deepcopy(dict(self.meta)),
            "config": dict(self.config),
            "version": self.version,
            "preload_error": self.preload_error,
        }


@dataclass(frozen=True)
class ChangeRecord:
    """One entry in the store's change log."""

    event: str
    field_id: str
    version: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
