"""
Fieldtype Base Classes

FieldtypeMeta:  declarative metadata for a fieldtype (handle, title, config fields).
PreloadContext: everything a fieldtype may read while preloading meta data.
Fieldtype:      base class all server-side fieldtype definitions subclass.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar

from fieldkit.config import settings
from fieldkit.fieldtypes.handles import FieldtypeHandle, handle_from_class_name
from fieldkit.utils.sanitize import summarize

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from fieldkit.fieldtypes.components import FieldtypeComponent, IndexComponent
    from fieldkit.fieldtypes.registry import FieldtypeEntry, FieldtypeRegistry

REQUIRED_MESSAGE = "This field is required."


@dataclass
class FieldtypeMeta:
    """
    Declarative metadata describing a fieldtype.

    Attributes:
        handle:        lower_snake_case identifier, e.g. "toggle_password".
        title:         Human-readable name shown in the field picker.
        description:   Help text for the field picker.
        icon:          Icon name for the admin UI.
        categories:    Field picker categories, e.g. ["text", "special"].
        selectable:    Whether the fieldtype is offered in the field picker.
        config_fields: Schema fragments for per-field configuration options.
    """

    handle: str
    title: str
    description: str = ""
    icon: str = "generic"
    categories: list[str] = field(default_factory=list)
    selectable: bool = True
    config_fields: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PreloadContext:
    """Inputs available to `Fieldtype.preload()` for one field instance."""

    field_id: str
    value: Any = None
    db: AsyncSession | None = None


class Fieldtype:
    """
    Server-side half of a fieldtype.

    A subclass declares its metadata as class attributes and overrides only the
    hooks it needs.  One instance is created per field instance, carrying that
    field's configuration merged over the `config_fields` defaults.

    All value hooks must be deterministic and side-effect free.
    """

    handle: ClassVar[str | None] = None
    title: ClassVar[str | None] = None
    description: ClassVar[str] = ""
    icon: ClassVar[str] = "generic"
    categories: ClassVar[tuple[str, ...]] = ()
    selectable: ClassVar[bool] = True
    config_fields: ClassVar[dict[str, dict[str, Any]]] = {}

    # UI half, bound under "<handle>-fieldtype" / "<handle>-fieldtype-index"
    component: ClassVar[type[FieldtypeComponent] | None] = None
    index_component: ClassVar[type[IndexComponent] | None] = None

    def __init__(self, config: Mapping[str, Any] | None = None) -> None:
        defaults = {key: schema["default"] for key, schema in self.config_fields.items() if "default" in schema}
        self.config: Mapping[str, Any] = MappingProxyType({**defaults, **dict(config or {})})

    # ── Identity ──────────────────────────────────────────────────────────────

    @classmethod
    def get_handle(cls) -> FieldtypeHandle:
        """Return the declared handle, or one derived from the class name."""
        if cls.handle:
            return FieldtypeHandle(cls.handle)
        return handle_from_class_name(cls.__name__)

    @classmethod
    def meta(cls) -> FieldtypeMeta:
        handle = cls.get_handle()
        return FieldtypeMeta(
            handle=handle,
            title=cls.title or handle.replace("_", " ").title(),
            description=cls.description,
            icon=cls.icon,
            categories=list(cls.categories),
            selectable=cls.selectable,
            config_fields=dict(cls.config_fields),
        )

    @classmethod
    def register(cls, registry: FieldtypeRegistry | None = None) -> FieldtypeEntry:
        """Register this class (and its components) with a registry.  Idempotent."""
        if registry is None:
            from fieldkit.fieldtypes.registry import fieldtype_registry

            registry = fieldtype_registry
        return registry.register(cls)

    # ── Meta data ─────────────────────────────────────────────────────────────

    async def preload(self, context: PreloadContext) -> dict[str, Any]:
        """
        Return auxiliary data for the component, computed once before render.

        Override to eager-load context (e.g. related item summaries).  Only
        read-only fetches are allowed here.
        """
        return {}

    # ── Value hooks ───────────────────────────────────────────────────────────

    def default_value(self) -> Any:
        return self.config.get("default")

    def pre_process(self, value: Any) -> Any:
        """Stored value -> value handed to the component."""
        return self.default_value() if value is None else value

    def process(self, value: Any) -> Any:
        """Submitted value -> stored value."""
        return value

    def augment(self, value: Any) -> Any:
        """Stored value -> value exposed to templates and the API."""
        return value

    def validate(self, value: Any) -> list[str]:
        """Return a list of error messages; empty when the value is valid."""
        if self.config.get("required") and self.is_empty(value):
            return [REQUIRED_MESSAGE]
        return []

    @staticmethod
    def is_empty(value: Any) -> bool:
        return value is None or value == "" or value == [] or value == {}

    # ── Index (listing) view ──────────────────────────────────────────────────

    def pre_process_index(self, value: Any) -> Any:
        """
        Condense a raw value for listing views.

        The default strips markup and truncates strings, and serializes
        structured values to compact JSON.
        """
        return summarize(value, self.index_max_length())

    def index_max_length(self) -> int:
        return int(self.config.get("index_max_length") or settings.index_max_length)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} handle={self.get_handle()!r}>"
