"""
Request principal.

Token issuance and verification live in the identity gateway in front of
this service. The gateway forwards the verified principal as the
X-User-Id and X-User-Role headers.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends, Header

from tourney.errors import AuthenticationError, AuthorizationError

ROLE_USER = "user"
ROLE_ORGANIZER = "organizer"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ORGANIZER, ROLE_ADMIN)


@dataclass(frozen=True)
class Principal:
    id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def get_principal(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> Principal:
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationError("Not authorized, no principal")
    role = (x_user_role or ROLE_USER).strip().lower()
    if role not in ROLES:
        raise AuthenticationError(f"Not authorized, unknown role '{role}'")
    return Principal(id=x_user_id.strip(), role=role)


def require_roles(*roles: str) -> Callable[..., Principal]:
    """Dependency factory: principal must hold one of *roles*."""

    def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.role not in roles:
            raise AuthorizationError("Not authorized to access this route")
        return principal

    return dependency
