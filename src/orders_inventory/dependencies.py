"""FastAPI dependencies shared by the routers."""
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from . import database
from .crud import ForbiddenError
from .policy import AccessPolicy, Principal, Role, RoleBasedPolicy

_default_policy = RoleBasedPolicy()


def get_policy() -> AccessPolicy:
    """Access policy used by every route; override it to plug in another authorization scheme."""
    return _default_policy


def get_current_user(
    x_user_id: Optional[int] = Header(None),
    x_user_role: Role = Header(Role.USER),
) -> Principal:
    """Caller identity as forwarded by the authenticating gateway."""
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="missing X-User-Id header",
        )
    return Principal(id=x_user_id, role=x_user_role)


def authorize(allowed: bool, message: str = "Not allowed to perform this action"):
    if not allowed:
        raise ForbiddenError(message)


# Common dependency aliases
DatabaseDep = Depends(database.get_db)
CurrentUserDep = Depends(get_current_user)
PolicyDep = Depends(get_policy)
