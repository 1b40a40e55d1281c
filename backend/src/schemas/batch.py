"""
Pydantic schemas for batch operations on selected events.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from backend.src.schemas.event import SupervisorSchema
from backend.src.services.batch import BatchOutcome, BatchResult


class BatchRequest(BaseModel):
    """Selection of events to act on."""

    guids: List[str] = Field(..., min_length=1, description="Event GUIDs (evt_xxx)")

    model_config = {
        "json_schema_extra": {
            "example": {
                "guids": [
                    "evt_01hgw2bbg0000000000000001",
                    "evt_01hgw2bbg0000000000000002",
                ]
            }
        }
    }


class BatchAssignSupervisorRequest(BatchRequest):
    """Selection of events plus the supervisor to assign (null clears)."""

    supervisor: Optional[SupervisorSchema] = Field(default=None)


class BatchResultResponse(BaseModel):
    """
    Per-GUID result of a batch operation.

    results maps every requested GUID to "ok" or the error message.
    """

    action: str
    outcome: BatchOutcome
    succeeded: List[str]
    failed: Dict[str, str]
    results: Dict[str, str]

    @classmethod
    def from_result(cls, result: BatchResult) -> "BatchResultResponse":
        return cls(
            action=result.action,
            outcome=result.outcome,
            succeeded=result.succeeded,
            failed=result.failed,
            results=result.results,
        )
