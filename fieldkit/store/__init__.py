"""
Central field store.

    FieldState   - immutable value/meta snapshot of one field instance
    FieldStore   - single owner of every field's value and meta
    FieldChannel - per-field update channel handed to components
"""

from .state import ChangeRecord, FieldState
from .store import FieldChannel, FieldStore

__all__ = ["ChangeRecord", "FieldChannel", "FieldState", "FieldStore"]
