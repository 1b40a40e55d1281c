"""
Events API endpoints for managing scheduled events.

Provides endpoints for:
- Listing events visible to the caller's role
- Getting event details
- Creating single events and generating recurring shifts
- Updating, publishing, unpublishing and deleting events
- Assigning supervisors
- Batch operations on a selection of events

Design:
- Uses dependency injection for services
- Reads are open to every authenticated role (filtered by visibility);
  writes require coordinator or admin
- All endpoints use GUID format (evt_xxx) for identifiers
- Batch endpoints always answer 200 with a per-GUID result
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.src.db.database import get_db
from backend.src.middleware.auth import Principal, get_principal, require_coordinator
from backend.src.schemas.batch import (
    BatchAssignSupervisorRequest,
    BatchRequest,
    BatchResultResponse,
)
from backend.src.schemas.event import (
    AssignSupervisorRequest,
    EventCreate,
    EventResponse,
    EventUpdate,
    RecurringEventsCreate,
    RecurringEventsResponse,
)
from backend.src.services.event_service import EventService, EventTemplate
from backend.src.services.exceptions import NotFoundError, ValidationError
from backend.src.services.sign_up_service import SignUpService
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(
    prefix="/events",
    tags=["Events"],
)


# ============================================================================
# Dependencies
# ============================================================================


def get_event_service(db: Session = Depends(get_db)) -> EventService:
    """Create EventService instance with database session."""
    return EventService(db=db)


def get_sign_up_service(db: Session = Depends(get_db)) -> SignUpService:
    """Create SignUpService instance with database session."""
    return SignUpService(db=db)


def _event_response(
    event_service: EventService,
    sign_up_service: SignUpService,
    event,
) -> EventResponse:
    return EventResponse(
        **event_service.build_event_response(
            event, sign_up_service.count_for_event(event)
        )
    )


def _not_found(guid: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Event {guid} not found",
    )


def _bad_request(e: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": e.message, "errors": e.errors},
    )


# ============================================================================
# List / Get Endpoints
# ============================================================================


@router.get(
    "",
    response_model=List[EventResponse],
    summary="List events",
    description="List the events the caller's role may see, ordered by start time",
)
async def list_events(
    principal: Principal = Depends(get_principal),
    event_service: EventService = Depends(get_event_service),
    sign_up_service: SignUpService = Depends(get_sign_up_service),
) -> List[EventResponse]:
    """
    List events visible to the caller.

    - visitor: published open events and general meetings
    - volunteer: every published event
    - coordinator/admin: every event including drafts

    Example:
        GET /api/events
        X-User-Uid: uid-123
        X-User-Role: volunteer
    """
    events = event_service.list_for_role(principal.role)
    counts = sign_up_service.count_by_event()

    return [
        EventResponse(**event_service.build_event_response(e, counts.get(e.guid, 0)))
        for e in events
    ]


# ============================================================================
# Batch Endpoints
# ============================================================================
# Registered before /{guid}/... so "batch" is never taken for a GUID.


@router.post(
    "/batch/publish",
    response_model=BatchResultResponse,
    summary="Publish selected events",
)
async def batch_publish(
    request: BatchRequest,
    principal: Principal = Depends(require_coordinator),
    event_service: EventService = Depends(get_event_service),
) -> BatchResultResponse:
    result = event_service.batch_publish(request.guids)
    return BatchResultResponse.from_result(result)


@router.post(
    "/batch/unpublish",
    response_model=BatchResultResponse,
    summary="Unpublish selected events",
)
async def batch_unpublish(
    request: BatchRequest,
    principal: Principal = Depends(require_coordinator),
    event_service: EventService = Depends(get_event_service),
) -> BatchResultResponse:
    result = event_service.batch_unpublish(request.guids)
    return BatchResultResponse.from_result(result)


@router.post(
    "/batch/delete",
    response_model=BatchResultResponse,
    summary="Delete selected events",
    description="Delete selected events together with their sign-ups",
)
async def batch_delete(
    request: BatchRequest,
    principal: Principal = Depends(require_coordinator),
    event_service: EventService = Depends(get_event_service),
) -> BatchResultResponse:
    result = event_service.batch_delete(request.guids)
    return BatchResultResponse.from_result(result)


@router.post(
    "/batch/reset-sign-ups",
    response_model=BatchResultResponse,
    summary="Clear the rosters of selected events",
)
async def batch_reset_sign_ups(
    request: BatchRequest,
    principal: Principal = Depends(require_coordinator),
    event_service: EventService = Depends(get_event_service),
) -> BatchResultResponse:
    result = event_service.batch_reset_sign_ups(request.guids)
    return BatchResultResponse.from_result(result)


@router.post(
    "/batch/assign-supervisor",
    response_model=BatchResultResponse,
    summary="Assign a supervisor to selected events",
)
async def batch_assign_supervisor(
    request: BatchAssignSupervisorRequest,
    principal: Principal = Depends(require_coordinator),
    event_service: EventService = Depends(get_event_service),
) -> BatchResultResponse:
    """
    Assign the same supervisor to every selected event.

    Raises:
        400: Supervisor has neither id nor name (nothing is written)
    """
    supervisor = request.supervisor.model_dump() if request.supervisor else None
    try:
        result = event_service.batch_assign_supervisor(request.guids, supervisor)
    except ValidationError as e:
        raise _bad_request(e)

    return BatchResultResponse.from_result(result)


# ============================================================================
# Create Endpoints
# ============================================================================


@router.post(
    "",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new event",
    description="Create a single draft event",
)
async def create_event(
    event_data: EventCreate,
    principal: Principal = Depends(require_coordinator),
    event_service: EventService = Depends(get_event_service),
) -> EventResponse:
    """
    Create a single draft event.

    Returns:
        Created event (201 Created)

    Raises:
        400: Missing or invalid fields, all listed in detail.errors

    Example:
        POST /api/events
        {
          "title": "General assembly",
          "type": "general_meeting",
          "start_time": "2024-06-12T18:00:00Z",
          "end_time": "2024-06-12T20:00:00Z",
          "max_capacity": 0
        }
    """
    try:
        event = event_service.create(
            title=event_data.title,
            type=event_data.type,
            start_time=event_data.start_time,
            end_time=event_data.end_time,
            max_capacity=event_data.max_capacity,
            description=event_data.description,
            coordinator_uid=principal.uid,
            supervisor=event_data.supervisor.model_dump() if event_data.supervisor else None,
        )
    except ValidationError as e:
        raise _bad_request(e)

    return EventResponse(**event_service.build_event_response(event, 0))


@router.post(
    "/recurring",
    response_model=RecurringEventsResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Generate recurring shifts",
    description="Create one draft event per shift window for every matching day",
)
async def generate_recurring_events(
    request: RecurringEventsCreate,
    principal: Principal = Depends(require_coordinator),
    event_service: EventService = Depends(get_event_service),
) -> RecurringEventsResponse:
    """
    Generate recurring draft shifts.

    Raises:
        400: Invalid template
        503: Store failed mid-way; detail reports how many were created
    """
    template = EventTemplate(
        title=request.title,
        description=request.description or "",
        type=request.type,
        max_capacity=request.max_capacity,
        start_clock=request.start_clock,
        end_clock=request.end_clock,
    )

    try:
        created = event_service.generate_recurring(
            template,
            start=request.start_date,
            end=request.end_date,
            pattern=request.pattern,
            restrictions=[r.to_rule() for r in request.restrictions],
            coordinator_uid=principal.uid,
        )
    except ValidationError as e:
        raise _bad_request(e)

    return RecurringEventsResponse(created=created)


# ============================================================================
# Single Event Endpoints
# ============================================================================


@router.get(
    "/{guid}",
    response_model=EventResponse,
    summary="Get event",
)
async def get_event(
    guid: str,
    principal: Principal = Depends(get_principal),
    event_service: EventService = Depends(get_event_service),
    sign_up_service: SignUpService = Depends(get_sign_up_service),
) -> EventResponse:
    """
    Get event details by GUID.

    Events the caller's role may not see are reported as not found.

    Raises:
        404: Event not found or not visible
    """
    try:
        event = event_service.get_by_guid(guid)
    except NotFoundError:
        raise _not_found(guid)

    if not event_service.is_visible_to(event, principal.role):
        raise _not_found(guid)

    return _event_response(event_service, sign_up_service, event)


@router.patch(
    "/{guid}",
    response_model=EventResponse,
    summary="Update event",
)
async def update_event(
    guid: str,
    event_data: EventUpdate,
    principal: Principal = Depends(require_coordinator),
    event_service: EventService = Depends(get_event_service),
    sign_up_service: SignUpService = Depends(get_sign_up_service),
) -> EventResponse:
    """
    Update the fields present in the request body.

    Raises:
        400: Invalid field values
        404: Event not found
    """
    updates = event_data.model_dump(exclude_unset=True)

    try:
        event = event_service.update(guid, **updates)
    except NotFoundError:
        raise _not_found(guid)
    except ValidationError as e:
        raise _bad_request(e)

    return _event_response(event_service, sign_up_service, event)


@router.delete(
    "/{guid}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete event",
    description="Permanently delete an event and its sign-ups",
)
async def delete_event(
    guid: str,
    principal: Principal = Depends(require_coordinator),
    event_service: EventService = Depends(get_event_service),
) -> None:
    try:
        event_service.delete(guid)
    except NotFoundError:
        raise _not_found(guid)


@router.post(
    "/{guid}/publish",
    response_model=EventResponse,
    summary="Publish event",
)
async def publish_event(
    guid: str,
    principal: Principal = Depends(require_coordinator),
    event_service: EventService = Depends(get_event_service),
    sign_up_service: SignUpService = Depends(get_sign_up_service),
) -> EventResponse:
    try:
        event = event_service.publish(guid)
    except NotFoundError:
        raise _not_found(guid)

    return _event_response(event_service, sign_up_service, event)


@router.post(
    "/{guid}/unpublish",
    response_model=EventResponse,
    summary="Unpublish event",
    description="Return an event to draft; published_at is kept",
)
async def unpublish_event(
    guid: str,
    principal: Principal = Depends(require_coordinator),
    event_service: EventService = Depends(get_event_service),
    sign_up_service: SignUpService = Depends(get_sign_up_service),
) -> EventResponse:
    try:
        event = event_service.unpublish(guid)
    except NotFoundError:
        raise _not_found(guid)

    return _event_response(event_service, sign_up_service, event)


@router.post(
    "/{guid}/supervisor",
    response_model=EventResponse,
    summary="Assign supervisor",
    description="Set the supervisor of an event; a null supervisor clears it",
)
async def assign_supervisor(
    guid: str,
    request: AssignSupervisorRequest,
    principal: Principal = Depends(require_coordinator),
    event_service: EventService = Depends(get_event_service),
    sign_up_service: SignUpService = Depends(get_sign_up_service),
) -> EventResponse:
    supervisor = request.supervisor.model_dump() if request.supervisor else None

    try:
        event = event_service.assign_supervisor(guid, supervisor)
    except NotFoundError:
        raise _not_found(guid)
    except ValidationError as e:
        raise _bad_request(e)

    return _event_response(event_service, sign_up_service, event)
