"""
Pydantic schemas for sign-up API request/response validation.
"""

from datetime import datetime
from typing import Dict

from pydantic import BaseModel, Field, field_serializer

from backend.src.schemas.event import _utc_iso


class ForcedSignUpRequest(BaseModel):
    """Coordinator sign-up of a member identified by id number."""

    id_number: str = Field(..., description="Member id number (3-10 digits)")

    model_config = {
        "json_schema_extra": {"example": {"id_number": "1042"}}
    }


class SignUpResponse(BaseModel):
    """Roster entry."""

    guid: str = Field(..., description="Sign-up GUID (sgn_xxx)")
    event_guid: str = Field(..., description="Event GUID (evt_xxx)")
    user_uid: str
    signed_up_at: datetime

    @field_serializer("signed_up_at")
    def serialize_datetime_utc(self, v: datetime) -> str:
        return _utc_iso(v)


class CancelSignUpResponse(BaseModel):
    removed: int


class SignUpCountsResponse(BaseModel):
    """Roster size per event GUID; events without sign-ups are omitted."""

    counts: Dict[str, int] = Field(default_factory=dict)
