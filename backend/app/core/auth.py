"""Caller identification for API requests.

Sessions and passwords are handled by the deployment in front of the API;
requests reach this service carrying the id of the user they act for.
"""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from backend.app.core.database import get_store
from backend.app.models.user import User
from backend.app.services.inventory_store import InventoryStore


async def get_current_user(
    store: Annotated[InventoryStore, Depends(get_store)],
    x_user_id: Annotated[str | None, Header()] = None,
) -> User:
    """Resolve the ``X-User-Id`` header to a stored user."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    user = store.get_user(x_user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user",
        )
    return user


def require_role(required_role: str):
    """Dependency factory for role-based access control."""

    async def role_checker(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        if current_user.role != required_role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires {required_role} role",
            )
        return current_user

    return role_checker


CurrentUser = Annotated[User, Depends(get_current_user)]
