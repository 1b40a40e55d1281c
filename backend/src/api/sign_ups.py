"""
Sign-up API endpoints for event rosters.

Provides endpoints for:
- Reading an event's roster
- Signing yourself up, or a member by id number (forced, coordinators)
- Cancelling your own sign-up or someone else's (coordinators)
- Listing sign-ups and roster sizes

Design:
- A non-forced sign-up never exceeds an event's capacity (409 when full)
- A user is on a roster at most once, forced or not (409 on duplicate)
- Events the caller cannot see behave as not found
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.src.db.database import get_db
from backend.src.middleware.auth import Principal, get_principal, require_coordinator
from backend.src.models import SignUp
from backend.src.schemas.sign_up import (
    CancelSignUpResponse,
    ForcedSignUpRequest,
    SignUpCountsResponse,
    SignUpResponse,
)
from backend.src.services.exceptions import (
    ConflictError,
    NoSignUpError,
    NotFoundError,
    ValidationError,
)
from backend.src.services.sign_up_service import SignUpService
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(tags=["Sign-ups"])


def get_sign_up_service(db: Session = Depends(get_db)) -> SignUpService:
    """Create SignUpService instance with database session."""
    return SignUpService(db=db)


def _sign_up_response(sign_up: SignUp) -> SignUpResponse:
    return SignUpResponse(
        guid=sign_up.guid,
        event_guid=sign_up.event.guid,
        user_uid=sign_up.user_uid,
        signed_up_at=sign_up.signed_up_at,
    )


def _ensure_visible(service: SignUpService, guid: str, principal: Principal) -> None:
    """Raise 404 unless the event exists and the caller may see it."""
    try:
        event = service.events.get_by_guid(guid)
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event {guid} not found",
        )
    if not service.events.is_visible_to(event, principal.role):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event {guid} not found",
        )


# ============================================================================
# Event roster
# ============================================================================


@router.get(
    "/events/{guid}/sign-ups",
    response_model=List[SignUpResponse],
    summary="Get event roster",
)
async def list_event_sign_ups(
    guid: str,
    principal: Principal = Depends(get_principal),
    service: SignUpService = Depends(get_sign_up_service),
) -> List[SignUpResponse]:
    _ensure_visible(service, guid, principal)
    return [_sign_up_response(s) for s in service.list_for_event(guid)]


@router.post(
    "/events/{guid}/sign-ups",
    response_model=SignUpResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up for an event",
)
async def sign_up(
    guid: str,
    principal: Principal = Depends(get_principal),
    service: SignUpService = Depends(get_sign_up_service),
) -> SignUpResponse:
    """
    Sign the caller up for an event.

    Raises:
        404: Event not found or not visible
        409: Event full, or caller already signed up
    """
    _ensure_visible(service, guid, principal)

    try:
        sign_up = service.sign_up(guid, principal.uid)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

    return _sign_up_response(sign_up)


@router.post(
    "/events/{guid}/sign-ups/forced",
    response_model=SignUpResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Force sign-up by id number",
    description="Sign up a member by id number, bypassing the capacity check",
)
async def force_sign_up(
    guid: str,
    request: ForcedSignUpRequest,
    principal: Principal = Depends(require_coordinator),
    service: SignUpService = Depends(get_sign_up_service),
) -> SignUpResponse:
    """
    Raises:
        400: Malformed id number
        404: Event or member not found
        409: Member already signed up
    """
    try:
        sign_up = service.sign_up_by_id_number(guid, request.id_number, forced=True)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": e.message, "errors": e.errors},
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

    logger.info(f"Coordinator {principal.uid} force-signed id {request.id_number} to {guid}")
    return _sign_up_response(sign_up)


@router.delete(
    "/events/{guid}/sign-ups/me",
    response_model=CancelSignUpResponse,
    summary="Cancel own sign-up",
)
async def cancel_own_sign_up(
    guid: str,
    principal: Principal = Depends(get_principal),
    service: SignUpService = Depends(get_sign_up_service),
) -> CancelSignUpResponse:
    try:
        removed = service.cancel(guid, principal.uid)
    except (NotFoundError, NoSignUpError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return CancelSignUpResponse(removed=removed)


@router.delete(
    "/events/{guid}/sign-ups/{user_uid}",
    response_model=CancelSignUpResponse,
    summary="Cancel a member's sign-up",
)
async def cancel_sign_up(
    guid: str,
    user_uid: str,
    principal: Principal = Depends(require_coordinator),
    service: SignUpService = Depends(get_sign_up_service),
) -> CancelSignUpResponse:
    try:
        removed = service.cancel(guid, user_uid)
    except (NotFoundError, NoSignUpError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return CancelSignUpResponse(removed=removed)


# ============================================================================
# Sign-up listings
# ============================================================================


@router.get(
    "/sign-ups",
    response_model=List[SignUpResponse],
    summary="List all sign-ups",
)
async def list_sign_ups(
    principal: Principal = Depends(require_coordinator),
    service: SignUpService = Depends(get_sign_up_service),
) -> List[SignUpResponse]:
    return [_sign_up_response(s) for s in service.list_all()]


@router.get(
    "/sign-ups/me",
    response_model=List[SignUpResponse],
    summary="List own sign-ups",
)
async def list_own_sign_ups(
    principal: Principal = Depends(get_principal),
    service: SignUpService = Depends(get_sign_up_service),
) -> List[SignUpResponse]:
    return [_sign_up_response(s) for s in service.list_for_user(principal.uid)]


@router.get(
    "/sign-ups/counts",
    response_model=SignUpCountsResponse,
    summary="Roster size per event",
)
async def sign_up_counts(
    principal: Principal = Depends(get_principal),
    service: SignUpService = Depends(get_sign_up_service),
) -> SignUpCountsResponse:
    return SignUpCountsResponse(counts=service.count_by_event())
