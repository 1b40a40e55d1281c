"""
Users API endpoints for member lookups used by scheduling screens.

User records are managed outside this service; only read access is offered.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.src.db.database import get_db
from backend.src.middleware.auth import Principal, require_coordinator
from backend.src.schemas.user import SupervisorCandidateResponse
from backend.src.services.user_service import UserService
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/supervisors", response_model=List[SupervisorCandidateResponse])
async def list_supervisors(
    principal: Principal = Depends(require_coordinator),
    db: Session = Depends(get_db),
):
    """
    List members who can supervise a shift (coordinators and admins).
    """
    service = UserService(db)
    users = service.list_supervisors()
    logger.debug(f"Listed {len(users)} supervisor candidates")

    return [
        SupervisorCandidateResponse(
            guid=u.guid,
            uid=u.uid,
            id_number=u.id_number,
            name=u.name,
            role=u.role,
        )
        for u in users
    ]
