"""
Publish Form Routes

POST   /api/v1/forms/                               → open a form (preload all fields)
GET    /api/v1/forms/{form_id}                      → current form state
POST   /api/v1/forms/{form_id}/fields/{field}/update → replace a field's value
POST   /api/v1/forms/{form_id}/fields/{field}/meta   → merge keys into a field's meta
POST   /api/v1/forms/{form_id}/fields/{field}/undo   → revert a field's last change
POST   /api/v1/forms/{form_id}/submit               → validate + process all values
DELETE /api/v1/forms/{form_id}                      → discard the form

Value and meta changes go through the field's mounted component, i.e. the
same update channel a UI component uses.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from fieldkit.database import AsyncSessionLocal
from fieldkit.fieldtypes.registry import FieldtypeRegistry, get_fieldtype_registry
from fieldkit.schemas.fieldtypes import (
    FieldStateResponse,
    FieldUpdateRequest,
    FormOpenRequest,
    FormResponse,
    MetaUpdateRequest,
    SubmitResponse,
)
from fieldkit.services.form_service import FieldBlueprint, FormService, FormSessionManager, get_form_sessions

router = APIRouter(tags=["Forms"])
logger = logging.getLogger(__name__)


def get_form_service(registry: FieldtypeRegistry = Depends(get_fieldtype_registry)) -> FormService:
    return FormService(registry, session_factory=AsyncSessionLocal)


@router.post("/", response_model=FormResponse, status_code=status.HTTP_201_CREATED)
async def open_form(
    payload: FormOpenRequest,
    service: FormService = Depends(get_form_service),
    sessions: FormSessionManager = Depends(get_form_sessions),
) -> FormResponse:
    """Open a publish form: resolve fieldtypes and preload every field's meta."""
    blueprints = [FieldBlueprint(f.field, f.fieldtype, f.config, f.value) for f in payload.fields]
    session = sessions.add(await service.open(blueprints))
    return FormResponse(**session.to_dict())


@router.get("/{form_id}", response_model=FormResponse)
async def get_form(
    form_id: str,
    sessions: FormSessionManager = Depends(get_form_sessions),
) -> FormResponse:
    return FormResponse(**sessions.get(form_id).to_dict())


@router.post("/{form_id}/fields/{field_id}/update", response_model=FieldStateResponse)
async def update_field(
    form_id: str,
    field_id: str,
    payload: FieldUpdateRequest,
    sessions: FormSessionManager = Depends(get_form_sessions),
) -> FieldStateResponse:
    """Replace a field's value through its component's update channel."""
    session = sessions.get(form_id)
    session.component(field_id).update(payload.value)
    return FieldStateResponse(**session.field_view(field_id))


@router.post("/{form_id}/fields/{field_id}/meta", response_model=FieldStateResponse)
async def update_field_meta(
    form_id: str,
    field_id: str,
    payload: MetaUpdateRequest,
    sessions: FormSessionManager = Depends(get_form_sessions),
) -> FieldStateResponse:
    """Shallow-merge keys into a field's meta through its component's update channel."""
    session = sessions.get(form_id)
    session.component(field_id).update_meta(payload.meta)
    return FieldStateResponse(**session.field_view(field_id))


@router.post("/{form_id}/fields/{field_id}/undo", response_model=FieldStateResponse)
async def undo_field(
    form_id: str,
    field_id: str,
    sessions: FormSessionManager = Depends(get_form_sessions),
) -> FieldStateResponse:
    session = sessions.get(form_id)
    session.store.undo(field_id)
    return FieldStateResponse(**session.field_view(field_id))


@router.post("/{form_id}/submit", response_model=SubmitResponse)
async def submit_form(
    form_id: str,
    service: FormService = Depends(get_form_service),
    sessions: FormSessionManager = Depends(get_form_sessions),
) -> SubmitResponse:
    """Validate and process every field; 422 with per-field errors on failure."""
    session = sessions.get(form_id)
    values = service.submit(session)
    logger.info("Form %s submitted (%d fields)", form_id, len(values))
    return SubmitResponse(form_id=form_id, values=values)


@router.delete("/{form_id}", status_code=status.HTTP_204_NO_CONTENT)
async def discard_form(
    form_id: str,
    sessions: FormSessionManager = Depends(get_form_sessions),
) -> None:
    sessions.discard(form_id)
