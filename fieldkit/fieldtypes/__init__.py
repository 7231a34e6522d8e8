"""
Fieldtype system

Public API:
    Fieldtype           - base class for server-side fieldtype definitions
    FieldtypeMeta       - fieldtype metadata dataclass
    PreloadContext      - inputs available to Fieldtype.preload()
    FieldtypeComponent  - editable UI component (props in, update channel out)
    IndexComponent      - read-only listing component
    FieldtypeRegistry   - handle -> FieldtypeEntry registry
    fieldtype_registry  - global singleton registry instance
"""

from .base import Fieldtype, FieldtypeMeta, PreloadContext
from .components import ComponentDescriptor, FieldProps, FieldtypeComponent, IndexComponent
from .handles import FieldtypeHandle, component_name, index_component_name
from .registry import FieldtypeEntry, FieldtypeRegistry, fieldtype_registry

__all__ = [
    "ComponentDescriptor",
    "FieldProps",
    "Fieldtype",
    "FieldtypeComponent",
    "FieldtypeEntry",
    "FieldtypeHandle",
    "FieldtypeMeta",
    "FieldtypeRegistry",
    "IndexComponent",
    "PreloadContext",
    "component_name",
    "fieldtype_registry",
    "index_component_name",
]
