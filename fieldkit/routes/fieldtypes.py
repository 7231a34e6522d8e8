"""
Fieldtype Registry Routes

GET  /api/v1/fieldtypes/                → list registered fieldtypes
GET  /api/v1/fieldtypes/{handle}        → single fieldtype
POST /api/v1/fieldtypes/{handle}/index  → condense values for a listing view
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from fieldkit.fieldtypes.registry import FieldtypeEntry, FieldtypeRegistry, get_fieldtype_registry
from fieldkit.schemas.fieldtypes import FieldtypeResponse, IndexRequest, IndexRow
from fieldkit.services.form_service import FormService

router = APIRouter(tags=["Fieldtypes"])
logger = logging.getLogger(__name__)


def _build_response(entry: FieldtypeEntry, registry: FieldtypeRegistry) -> FieldtypeResponse:
    meta = entry.fieldtype_cls.meta()
    return FieldtypeResponse(
        handle=meta.handle,
        title=meta.title,
        description=meta.description,
        icon=meta.icon,
        categories=meta.categories,
        selectable=meta.selectable,
        config_fields=meta.config_fields,
        component=entry.component.name if entry.component else None,
        index_component=registry.resolve_index_component(entry.handle).name,
    )


@router.get("/", response_model=list[FieldtypeResponse])
async def list_fieldtypes(
    selectable_only: bool = False,
    registry: FieldtypeRegistry = Depends(get_fieldtype_registry),
) -> list[FieldtypeResponse]:
    """List registered fieldtypes, optionally only those offered in the field picker."""
    entries = registry.selectable() if selectable_only else registry.all_entries()
    return [_build_response(e, registry) for e in entries]


@router.get("/{handle}", response_model=FieldtypeResponse)
async def get_fieldtype(
    handle: str,
    registry: FieldtypeRegistry = Depends(get_fieldtype_registry),
) -> FieldtypeResponse:
    """Get a single fieldtype by handle."""
    return _build_response(registry.get(handle), registry)


@router.post("/{handle}/index", response_model=list[IndexRow])
async def index_values(
    handle: str,
    payload: IndexRequest,
    registry: FieldtypeRegistry = Depends(get_fieldtype_registry),
) -> list[IndexRow]:
    """Pre-process raw values the way a listing renders them."""
    rows = FormService(registry).index(handle, payload.values, payload.config)
    return [IndexRow(**row) for row in rows]
