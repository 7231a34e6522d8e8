from typing import Any

from pydantic import BaseModel, Field


class FieldtypeResponse(BaseModel):
    handle: str
    title: str
    description: str
    icon: str
    categories: list[str]
    selectable: bool
    config_fields: dict[str, Any]
    component: str | None
    index_component: str


class IndexRequest(BaseModel):
    values: list[Any]
    config: dict[str, Any] = Field(default_factory=dict)


class IndexRow(BaseModel):
    value: Any
    display: str
    component: str


class FieldBlueprintIn(BaseModel):
    field: str = Field(..., min_length=1, max_length=100)
    fieldtype: str
    config: dict[str, Any] = Field(default_factory=dict)
    value: Any = None


class FormOpenRequest(BaseModel):
    fields: list[FieldBlueprintIn]


class FieldStateResponse(BaseModel):
    field: str
    handle: str
    component: str
    value: Any
    meta: dict[str, Any]
    config: dict[str, Any]
    version: int
    preload_error: str | None = None
    can_undo: bool


class FormResponse(BaseModel):
    form_id: str
    fields: list[FieldStateResponse]
    errors: dict[str, str]
    dirty: bool


class FieldUpdateRequest(BaseModel):
    value: Any = None


class MetaUpdateRequest(BaseModel):
    meta: dict[str, Any]


class SubmitResponse(BaseModel):
    form_id: str
    values: dict[str, Any]
