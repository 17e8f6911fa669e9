"""
Pydantic schemas for detainee registration and search.
"""
from datetime import date, datetime
from typing import Optional

from pydantic import Field, field_validator

from core.validators import normalize_cedula
from schemas.user import CamelModel, _blank_to_none


class DetaineeCreate(CamelModel):
    """Structured fields of a registration (attachments travel separately)."""
    full_name: str = Field(..., min_length=1, max_length=255)
    cedula: str = Field(..., min_length=1, max_length=20)
    birth_date: date
    state: str = Field(..., min_length=1, max_length=100)
    municipality: str = Field(..., min_length=1, max_length=100)
    parish: str = Field(..., min_length=1, max_length=100)
    address: str = Field(..., min_length=1)
    registro: Optional[str] = None
    phone: Optional[str] = Field(default=None, max_length=50)

    @field_validator("full_name", "state", "municipality", "parish", "address", mode="before")
    @classmethod
    def strip_required(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("registro", "phone", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)

    @field_validator("cedula")
    @classmethod
    def normalize(cls, value: str) -> str:
        return normalize_cedula(value)

    @field_validator("birth_date")
    @classmethod
    def not_in_future(cls, value: date) -> date:
        if value > date.today():
            raise ValueError("Birth date cannot be in the future")
        return value


class SimpleSearchRequest(CamelModel):
    """Lookup by cedula only."""
    cedula: str = Field(..., min_length=1)

    @field_validator("cedula", mode="before")
    @classmethod
    def strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class AdvancedSearchRequest(CamelModel):
    """Any non-empty subset of the searchable fields."""
    cedula: Optional[str] = None
    full_name: Optional[str] = None
    state: Optional[str] = None
    municipality: Optional[str] = None
    parish: Optional[str] = None

    @field_validator("cedula", "full_name", "state", "municipality", "parish", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


class DetaineeResponse(CamelModel):
    id: int
    full_name: str
    cedula: str
    birth_date: date
    state: str
    municipality: str
    parish: str
    address: str
    registro: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    id_document_url: Optional[str] = None
    registered_by: int
    created_at: datetime
    updated_at: datetime


class OcrResult(CamelModel):
    full_name: str
    cedula: str
    birth_date: str
    confidence: float
