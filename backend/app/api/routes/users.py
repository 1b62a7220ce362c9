import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, status

from backend.app.core.auth import CurrentUser
from backend.app.core.config import settings
from backend.app.core.database import get_store
from backend.app.schemas.user import UserCreate, UserResponse, UserSettingsUpdate
from backend.app.services.inventory_store import InventoryStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    store: InventoryStore = Depends(get_store),
    x_user_id: Annotated[str | None, Header()] = None,
):
    """Register a user.

    The first user becomes an admin. After that only an admin caller may
    hand out the admin role.
    """
    if store.get_user_by_username(data.username):
        raise HTTPException(status.HTTP_409_CONFLICT, "Username already exists")

    if not store.list_users():
        role = "admin"
    else:
        caller = store.get_user(x_user_id) if x_user_id else None
        role = data.role if caller and caller.is_admin else "user"

    user = store.create_user(
        data.username,
        email=data.email,
        role=role,
        hass_url=data.hass_url or settings.hass_url,
    )
    return user


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: CurrentUser):
    return current_user


@router.put("/me/settings", response_model=UserResponse)
async def update_my_settings(
    data: UserSettingsUpdate,
    current_user: CurrentUser,
    store: InventoryStore = Depends(get_store),
):
    """Update the caller's e-mail and Home Assistant connection settings."""
    patch = data.model_dump(exclude_none=True)
    if patch.get("hass_url"):
        patch["hass_url"] = patch["hass_url"].rstrip("/")

    user = store.update_user(current_user.id, **patch)
    logger.info("Updated settings for %s: %s", current_user.username, sorted(patch))
    return user
