"""
Password input with a show/hide switch.

The handle is derived from the class name (`toggle_password`), so its
components are bound as `toggle_password-fieldtype` and
`toggle_password-fieldtype-index`.
"""

from __future__ import annotations

from typing import Any

from fieldkit.fieldtypes.base import Fieldtype
from fieldkit.fieldtypes.components import FieldtypeComponent, IndexComponent

MASK_CHAR = "•"
MASK_LENGTH = 8


class TogglePasswordComponent(FieldtypeComponent):
    """Keeps the draft and the visibility switch locally; the draft is mirrored upward on change."""

    def setup(self) -> None:
        self.show = False
        self.draft = self.value or ""

    def props_changed(self, previous) -> None:
        self.draft = self.value or ""

    def toggle_visibility(self) -> None:
        self.show = not self.show

    def on_input(self, raw: Any) -> None:
        self.draft = "" if raw is None else str(raw)
        self.update(self.draft)

    def view(self) -> dict[str, Any]:
        view = super().view()
        view["input_type"] = "text" if self.show else "password"
        if not self.show:
            view["value"] = MASK_CHAR * len(self.draft)
        return view


class TogglePasswordIndexComponent(IndexComponent):
    pass


class TogglePasswordFieldtype(Fieldtype):
    title = "Toggle Password"
    description = "A password input whose contents can be revealed."
    icon = "lock"
    categories = ("special",)

    component = TogglePasswordComponent
    index_component = TogglePasswordIndexComponent

    def pre_process_index(self, value: Any) -> str:
        if not value:
            return ""
        return MASK_CHAR * MASK_LENGTH
