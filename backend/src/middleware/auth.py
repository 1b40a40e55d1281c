"""
Identity dependencies for API routes.

Provides:
- Principal: Dataclass carrying the acting user's uid and role
- get_principal: FastAPI dependency reading the identity headers
- require_roles: Dependency factory restricting an endpoint to some roles
- require_coordinator: Shorthand for coordinator/admin endpoints

Authentication happens upstream. The gateway in front of this service
validates the identity provider's token and forwards the result as the
X-User-Uid and X-User-Role headers, which are trusted as-is here.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, status

from backend.src.models import UserRole
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

USER_UID_HEADER = "X-User-Uid"
USER_ROLE_HEADER = "X-User-Role"


@dataclass(frozen=True)
class Principal:
    """
    The authenticated caller of a request.

    Attributes:
        uid: Identity-provider uid
        role: Role claim

    Usage:
        @router.get("/items")
        async def list_items(
            principal: Principal = Depends(get_principal)
        ):
            ...
    """

    uid: str
    role: UserRole


def get_principal(
    x_user_uid: Optional[str] = Header(None, alias=USER_UID_HEADER),
    x_user_role: Optional[str] = Header(None, alias=USER_ROLE_HEADER),
) -> Principal:
    """
    Build the Principal from the identity headers.

    Raises:
        HTTPException 401: If a header is missing or the role is unknown
    """
    uid = (x_user_uid or "").strip()
    role_claim = (x_user_role or "").strip().lower()

    if not uid or not role_claim:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required"
        )

    try:
        role = UserRole(role_claim)
    except ValueError:
        logger.warning(f"Rejected request with unknown role claim '{x_user_role}'")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Unknown role: {x_user_role}"
        )

    return Principal(uid=uid, role=role)


def require_roles(*roles: UserRole) -> Callable[..., Principal]:
    """
    Create a dependency that only lets the given roles through.

    Example:
        @router.post("/events")
        async def create_event(
            principal: Principal = Depends(require_roles(UserRole.ADMIN))
        ):
            ...

    Raises:
        HTTPException 403: From the dependency, if the caller's role is not allowed
    """
    allowed = frozenset(roles)

    def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient privileges"
            )
        return principal

    return dependency


require_coordinator = require_roles(UserRole.COORDINATOR, UserRole.ADMIN)


__all__ = [
    "Principal",
    "get_principal",
    "require_roles",
    "require_coordinator",
]
