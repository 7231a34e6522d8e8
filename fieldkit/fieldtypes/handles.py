"""
Fieldtype Handles & Component Naming

A handle is the lower_snake_case identifier of a fieldtype.  UI components are
bound by names derived from it:

    <handle>-fieldtype         primary (editable) component
    <handle>-fieldtype-index   index (listing) component
"""

from __future__ import annotations

import re
from typing import NamedTuple

from unidecode import unidecode

from fieldkit.exceptions import ComponentNameMismatchError, InvalidHandleError

HANDLE_PATTERN = re.compile(r"^[a-z][a-z0-9]*(_[a-z0-9]+)*$")

COMPONENT_SUFFIX = "-fieldtype"
INDEX_COMPONENT_SUFFIX = "-fieldtype-index"

_CLASS_SUFFIX = "Fieldtype"
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


class FieldtypeHandle(str):
    """A validated fieldtype handle.  Constructing one with a malformed value raises."""

    __slots__ = ()

    def __new__(cls, value: str) -> FieldtypeHandle:
        if isinstance(value, FieldtypeHandle):
            return value
        if not isinstance(value, str) or not HANDLE_PATTERN.match(value):
            raise InvalidHandleError(value)
        return super().__new__(cls, value)

    @property
    def component_name(self) -> str:
        return component_name(self)

    @property
    def index_component_name(self) -> str:
        return index_component_name(self)


class ComponentName(NamedTuple):
    handle: FieldtypeHandle
    is_index: bool


def is_valid_handle(value: str) -> bool:
    return isinstance(value, str) and bool(HANDLE_PATTERN.match(value))


def component_name(handle: str) -> str:
    """Return the primary component name for a handle."""
    return f"{FieldtypeHandle(handle)}{COMPONENT_SUFFIX}"


def index_component_name(handle: str) -> str:
    """Return the index component name for a handle."""
    return f"{FieldtypeHandle(handle)}{INDEX_COMPONENT_SUFFIX}"


def parse_component_name(name: str) -> ComponentName:
    """
    Split a component name into its handle and variant.

    Raises:
        ComponentNameMismatchError: if the name carries neither suffix or the
            prefix is not a valid handle.
    """
    if name.endswith(INDEX_COMPONENT_SUFFIX):
        prefix, is_index = name[: -len(INDEX_COMPONENT_SUFFIX)], True
    elif name.endswith(COMPONENT_SUFFIX):
        prefix, is_index = name[: -len(COMPONENT_SUFFIX)], False
    else:
        raise ComponentNameMismatchError(
            name, f"name must end in '{COMPONENT_SUFFIX}' or '{INDEX_COMPONENT_SUFFIX}'"
        )

    if not is_valid_handle(prefix):
        raise ComponentNameMismatchError(name, f"'{prefix}' is not a lower_snake_case handle")

    return ComponentName(FieldtypeHandle(prefix), is_index)


def handle_from_class_name(class_name: str) -> FieldtypeHandle:
    """
    Derive a handle from a fieldtype class name.

    >>> handle_from_class_name("TogglePasswordFieldtype")
    'toggle_password'
    """
    name = unidecode(class_name)
    if name.endswith(_CLASS_SUFFIX) and name != _CLASS_SUFFIX:
        name = name[: -len(_CLASS_SUFFIX)]
    name = _CAMEL_BOUNDARY.sub("_", name)
    name = re.sub(r"[^A-Za-z0-9]+", "_", name).strip("_").lower()
    return FieldtypeHandle(name)
