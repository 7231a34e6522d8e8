"""Fieldtypes shipped with Fieldkit."""

from .entries import EntriesFieldtype
from .select import SelectFieldtype
from .text import TextFieldtype
from .toggle import ToggleFieldtype
from .toggle_password import TogglePasswordFieldtype

BUILTIN_FIELDTYPES = [
    TextFieldtype,
    ToggleFieldtype,
    TogglePasswordFieldtype,
    SelectFieldtype,
    EntriesFieldtype,
]

__all__ = [
    "BUILTIN_FIELDTYPES",
    "EntriesFieldtype",
    "SelectFieldtype",
    "TextFieldtype",
    "ToggleFieldtype",
    "TogglePasswordFieldtype",
]
