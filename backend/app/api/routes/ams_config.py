from fastapi import APIRouter, Depends, HTTPException

from backend.app.core.auth import CurrentUser
from backend.app.core.database import get_store
from backend.app.schemas.ams_config import AMSConfigCreate, AMSConfigResponse, AMSConfigUpdate
from backend.app.services.inventory_store import InventoryStore

router = APIRouter(prefix="/ams-config", tags=["ams-config"])


@router.get("", response_model=list[AMSConfigResponse])
async def list_ams_configs(current_user: CurrentUser, store: InventoryStore = Depends(get_store)):
    return [AMSConfigResponse.model_validate(c) for c in store.get_ams_configs(current_user.id)]


@router.post("", response_model=AMSConfigResponse, status_code=201)
async def create_ams_config(
    data: AMSConfigCreate,
    current_user: CurrentUser,
    store: InventoryStore = Depends(get_store),
):
    """Register an AMS unit whose tray sensors should be polled."""
    config = store.add_ams_config(current_user.id, data.name, data.type, data.sensor)
    return AMSConfigResponse.model_validate(config)


@router.put("/{ams_id}", response_model=AMSConfigResponse)
async def update_ams_config(
    ams_id: str,
    data: AMSConfigUpdate,
    current_user: CurrentUser,
    store: InventoryStore = Depends(get_store),
):
    config = store.update_ams_config(current_user.id, ams_id, **data.model_dump(exclude_none=True))
    if not config:
        raise HTTPException(404, "AMS configuration not found")
    return AMSConfigResponse.model_validate(config)


@router.delete("/{ams_id}")
async def delete_ams_config(ams_id: str, current_user: CurrentUser, store: InventoryStore = Depends(get_store)):
    if not store.delete_ams_config(current_user.id, ams_id):
        raise HTTPException(404, "AMS configuration not found")
    return {"success": True}
