"""
Transaction helpers shared by the scheduling services.

Translates database connectivity failures into StoreUnavailableError so
callers see one error type for "the store did not answer".
"""

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from backend.src.services.exceptions import StoreUnavailableError
from backend.src.utils.logging_config import get_logger


logger = get_logger("db")


def commit_or_raise(db: Session, action: str, committed: int = 0) -> None:
    """
    Commit the session, rolling back on connectivity failure.

    Args:
        db: Session holding the pending changes
        action: Short description used in the error message
        committed: Records already durable before this commit (chunked writes)

    Raises:
        StoreUnavailableError: If the database could not be reached
    """
    try:
        db.commit()
    except OperationalError as e:
        db.rollback()
        logger.error(f"Store unavailable while trying to {action}: {e}")
        raise StoreUnavailableError(
            f"Could not {action}: the database is unavailable",
            committed=committed,
        ) from e
