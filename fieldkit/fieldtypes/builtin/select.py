"""Single or multiple choice from a configured list of options."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from fieldkit.fieldtypes.base import Fieldtype, PreloadContext
from fieldkit.fieldtypes.components import FieldtypeComponent


def normalize_options(options: Any) -> list[dict[str, str]]:
    """Accept `{"value": "Label"}` or `["value", ...]` and return `[{"value", "label"}]`."""
    if not options:
        return []
    if isinstance(options, Mapping):
        return [{"value": str(k), "label": str(v)} for k, v in options.items()]
    normalized = []
    for option in options:
        if isinstance(option, Mapping):
            normalized.append({"value": str(option["value"]), "label": str(option.get("label", option["value"]))})
        else:
            normalized.append({"value": str(option), "label": str(option)})
    return normalized


class SelectComponent(FieldtypeComponent):
    def on_input(self, raw: Any) -> None:
        if not self.config.get("multiple"):
            self.update(raw)
            return
        # Multiple mode: clicking an option adds or removes it
        selected = list(self.value or [])
        if raw in selected:
            selected.remove(raw)
        else:
            selected.append(raw)
        self.update(selected)


class SelectFieldtype(Fieldtype):
    handle = "select"
    title = "Select"
    description = "Choose one or more options from a list."
    icon = "select"
    categories = ("controls",)
    config_fields = {
        "options": {"type": "array", "default": []},
        "multiple": {"type": "toggle", "default": False},
        "required": {"type": "toggle", "default": False},
    }

    component = SelectComponent

    def options(self) -> list[dict[str, str]]:
        return normalize_options(self.config.get("options"))

    async def preload(self, context: PreloadContext) -> dict[str, Any]:
        return {"options": self.options()}

    def pre_process(self, value: Any) -> Any:
        value = super().pre_process(value)
        if self.config.get("multiple"):
            return [] if value is None else ([value] if isinstance(value, str) else list(value))
        return value

    def process(self, value: Any) -> Any:
        if self.config.get("multiple"):
            if value is None:
                return []
            return [str(v) for v in ([value] if isinstance(value, str) else value)]
        return None if value in (None, "") else str(value)

    def validate(self, value: Any) -> list[str]:
        errors = super().validate(value)
        allowed = {o["value"] for o in self.options()}
        chosen = value if isinstance(value, list) else ([] if value in (None, "") else [value])
        invalid = [str(v) for v in chosen if str(v) not in allowed]
        if invalid:
            errors.append(f"Invalid option(s): {', '.join(invalid)}.")
        return errors

    def pre_process_index(self, value: Any) -> str:
        labels = {o["value"]: o["label"] for o in self.options()}
        chosen = value if isinstance(value, list) else ([] if value in (None, "") else [value])
        return super().pre_process_index(", ".join(labels.get(str(v), str(v)) for v in chosen))
