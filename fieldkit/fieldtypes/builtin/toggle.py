"""Boolean on/off fieldtype."""

from __future__ import annotations

from typing import Any

from fieldkit.fieldtypes.base import Fieldtype
from fieldkit.fieldtypes.components import FieldtypeComponent, IndexComponent

_TRUTHY = {"1", "true", "yes", "on"}


def to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


class ToggleComponent(FieldtypeComponent):
    def on_input(self, raw: Any = None) -> None:
        # A bare click flips the current state
        self.update(not self.value if raw is None else to_bool(raw))


class ToggleIndexComponent(IndexComponent):
    def display(self) -> str:
        return "Yes" if self.value else "No"


class ToggleFieldtype(Fieldtype):
    handle = "toggle"
    title = "Toggle"
    description = "An on/off switch."
    icon = "toggle"
    categories = ("controls",)
    config_fields = {
        "default": {"type": "toggle", "default": False},
    }

    component = ToggleComponent
    index_component = ToggleIndexComponent

    def pre_process(self, value: Any) -> bool:
        return to_bool(self.default_value() if value is None else value)

    def process(self, value: Any) -> bool:
        return to_bool(value)

    def pre_process_index(self, value: Any) -> bool:
        return to_bool(value)
