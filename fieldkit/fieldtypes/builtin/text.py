"""Single-line text fieldtype."""

from __future__ import annotations

from typing import Any

from fieldkit.fieldtypes.base import Fieldtype, PreloadContext
from fieldkit.fieldtypes.components import FieldtypeComponent


class TextComponent(FieldtypeComponent):
    def on_input(self, raw: Any) -> None:
        text = "" if raw is None else str(raw)
        limit = self.meta.get("character_limit")
        if limit:
            text = text[:limit]
        self.update(text)

    def view(self) -> dict[str, Any]:
        view = super().view()
        limit = self.meta.get("character_limit")
        if limit:
            view["remaining"] = limit - len(self.value or "")
        return view


class TextFieldtype(Fieldtype):
    handle = "text"
    title = "Text"
    description = "A single line of plain text."
    icon = "text"
    categories = ("text",)
    config_fields = {
        "placeholder": {"type": "text", "default": ""},
        "character_limit": {"type": "integer", "default": None},
        "required": {"type": "toggle", "default": False},
    }

    component = TextComponent

    async def preload(self, context: PreloadContext) -> dict[str, Any]:
        return {
            "character_limit": self.config.get("character_limit"),
            "placeholder": self.config.get("placeholder"),
        }

    def process(self, value: Any) -> str | None:
        if value is None:
            return None
        return str(value).strip()

    def validate(self, value: Any) -> list[str]:
        errors = super().validate(value)
        limit = self.config.get("character_limit")
        if limit and isinstance(value, str) and len(value) > limit:
            errors.append(f"Must be at most {limit} characters.")
        return errors
