"""
Tally Backend - Resource Request/Response Schemas
==================================================

What:  Request bodies and output models for each CRUD resource.

Request bodies declare every field as Optional with a None default:
    - POST: missing fields are reported by get_validation_error as a 400
      with the list of missing names, instead of FastAPI's per-field errors
    - PATCH: the same model is parsed, and PartialUpdate.from_model() uses
      `model_fields_set` to tell "not sent" from "sent as null"

Type errors (e.g. "abc" for an integer id) are still rejected by pydantic
and mapped to 400 by the RequestValidationError handler.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Bodies
# ══════════════════════════════════════════════════════════════════════════


class VariablePayload(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100, description="Variable name")


class DateRecordPayload(BaseModel):
    date: Optional[datetime.date] = Field(default=None, description="Calendar day (YYYY-MM-DD)")


class RecordPayload(BaseModel):
    """Body of POST /records and PATCH /records/{id}."""
    record: Optional[float] = Field(default=None, description="Recorded value")
    VariableId: Optional[int] = Field(default=None, description="Referenced Variable id")
    DateRecordId: Optional[int] = Field(default=None, description="Referenced DateRecord id")


class ElementPayload(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100, description="Element name")


class ElementIntPayload(BaseModel):
    record: Optional[int] = Field(default=None, description="Integer value")
    ElementId: Optional[int] = Field(default=None, description="Referenced Element id")


# ══════════════════════════════════════════════════════════════════════════
# Output Models
# ══════════════════════════════════════════════════════════════════════════


class VariableOut(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class DateRecordOut(BaseModel):
    id: int
    date: datetime.date

    model_config = {"from_attributes": True}


class RecordOut(BaseModel):
    id: int
    record: float
    VariableId: int
    DateRecordId: int

    model_config = {"from_attributes": True}


class ElementOut(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class ElementIntOut(BaseModel):
    id: int
    record: int
    ElementId: int

    model_config = {"from_attributes": True}
