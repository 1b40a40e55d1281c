"""
Pydantic schemas for user lookups.
"""

from typing import Optional

from pydantic import BaseModel, Field


class SupervisorCandidateResponse(BaseModel):
    """A member who can be assigned as shift supervisor."""

    guid: str = Field(..., description="User GUID (usr_xxx)")
    uid: str
    id_number: str
    name: Optional[str] = None
    role: str

    model_config = {"from_attributes": True}
