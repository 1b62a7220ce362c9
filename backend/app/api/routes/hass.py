"""Home Assistant integration endpoints.

Tray state reaches the inventory either through the background poll, an
on-demand sync, or an automation pushing single tray updates to the webhook.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from backend.app.core.auth import CurrentUser
from backend.app.core.database import get_reconciler, get_scheduler
from backend.app.schemas.hass import HassConnectionTest, ReconcileResponse, TrayPayload
from backend.app.services.sync_scheduler import SyncScheduler
from backend.app.services.tray_reconciler import TrayReconciler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/hass", tags=["hass"])


@router.post("/webhook", response_model=ReconcileResponse)
async def tray_webhook(
    payload: TrayPayload,
    current_user: CurrentUser,
    reconciler: TrayReconciler = Depends(get_reconciler),
):
    """Apply one tray update pushed by a Home Assistant automation."""
    if current_user.hass_mode == "disabled":
        raise HTTPException(409, "Home Assistant sync is disabled for this user")

    result = reconciler.reconcile_one(current_user.id, payload.to_snapshot())
    logger.info("Webhook tray update for %s: %s %s", current_user.username, result.action.value, result.tag_id)
    return result.to_dict()


@router.post("/sync", response_model=list[ReconcileResponse])
async def sync_now(current_user: CurrentUser, scheduler: SyncScheduler = Depends(get_scheduler)):
    """Poll the caller's AMS trays immediately."""
    results = await scheduler.run_once(current_user.id)
    if results is None:
        raise HTTPException(400, "Home Assistant polling is not configured")
    return [r.to_dict() for r in results]


@router.post("/test")
async def test_connection(
    data: HassConnectionTest,
    current_user: CurrentUser,
    scheduler: SyncScheduler = Depends(get_scheduler),
):
    """Test a Home Assistant URL and token, defaulting to the saved ones."""
    url = data.url or current_user.hass_url
    token = data.token or current_user.hass_token
    if not url or not token:
        raise HTTPException(400, "Home Assistant URL and token are required")
    return await scheduler.homeassistant.test_connection(url, token)


@router.get("/sensors")
async def list_sensors(current_user: CurrentUser, scheduler: SyncScheduler = Depends(get_scheduler)):
    """List tray sensor entities available on the caller's Home Assistant."""
    if not current_user.hass_url or not current_user.hass_token:
        raise HTTPException(400, "Home Assistant URL and token are required")
    return await scheduler.homeassistant.list_tray_sensors(
        current_user.hass_url, current_user.hass_token, current_user.tray_name
    )
