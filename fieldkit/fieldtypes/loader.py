"""
Fieldtype Loader

Reads/writes per-fieldtype configuration (enable flags) from the JSON file
named by `settings.fieldtypes_config_file` and registers the built-in
fieldtypes at application startup.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from fieldkit.config import settings

if TYPE_CHECKING:
    from fieldkit.fieldtypes.registry import FieldtypeRegistry

logger = logging.getLogger(__name__)

# ── Config file location ──────────────────────────────────────────────────────
_FIELDTYPES_CONFIG_FILE = Path(settings.fieldtypes_config_file)

# ── Default config (all built-in fieldtypes enabled) ─────────────────────────
_DEFAULT_CONFIG: dict[str, dict[str, Any]] = {
    "text": {"enabled": True},
    "toggle": {"enabled": True},
    "toggle_password": {"enabled": True},
    "select": {"enabled": True},
    "entries": {"enabled": True},
}


# ── Config I/O ────────────────────────────────────────────────────────────────


def load_fieldtypes_config() -> dict[str, dict[str, Any]]:
    """
    Load fieldtype configuration from disk.

    Returns defaults if the file does not exist or cannot be parsed.
    """
    if _FIELDTYPES_CONFIG_FILE.exists():
        try:
            return json.loads(_FIELDTYPES_CONFIG_FILE.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Failed to read fieldtypes config: %s", exc)
    return copy.deepcopy(_DEFAULT_CONFIG)


def save_fieldtypes_config(config: dict[str, dict[str, Any]]) -> None:
    """Persist fieldtype configuration to disk."""
    _FIELDTYPES_CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    _FIELDTYPES_CONFIG_FILE.write_text(
        json.dumps(config, indent=2, ensure_ascii=False),
        encoding="utf-8",
    )


# ── Startup initialisation ────────────────────────────────────────────────────


def initialize_fieldtypes(registry: FieldtypeRegistry) -> list[str]:
    """
    Register every enabled built-in fieldtype.

    Called from main.py lifespan().  Returns the handles that were registered.
    """
    from fieldkit.fieldtypes.builtin import BUILTIN_FIELDTYPES

    config = load_fieldtypes_config()
    registered: list[str] = []

    for fieldtype_cls in BUILTIN_FIELDTYPES:
        handle = fieldtype_cls.get_handle()
        if not config.get(handle, {}).get("enabled", True):
            logger.info("Fieldtype %s disabled by config, skipping", handle)
            continue
        fieldtype_cls.register(registry)
        registered.append(handle)

    logger.info("Fieldtype initialisation complete - %d fieldtypes registered", len(registered))
    return registered
