"""
Middleware components for the scheduling backend.

This module provides:
- Principal: Dataclass representing the acting user
- get_principal: FastAPI dependency extracting the identity headers
- require_roles / require_coordinator: FastAPI dependencies restricting access by role
"""

from backend.src.middleware.auth import (
    Principal,
    get_principal,
    require_roles,
    require_coordinator,
)

__all__ = [
    "Principal",
    "get_principal",
    "require_roles",
    "require_coordinator",
]
