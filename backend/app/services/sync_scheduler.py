"""Background Home Assistant polling that keeps tracked spools in sync."""

import asyncio
import logging

from backend.app.services.homeassistant import HomeAssistantService
from backend.app.services.inventory_store import InventoryStore
from backend.app.services.tray_reconciler import ReconcileResult, TrayReconciler

logger = logging.getLogger(__name__)


class SyncScheduler:
    """Polls every polling-mode user's AMS trays on a fixed interval."""

    def __init__(
        self,
        store: InventoryStore,
        reconciler: TrayReconciler,
        homeassistant: HomeAssistantService,
        interval: float = 60.0,
    ):
        self.store = store
        self.reconciler = reconciler
        self.homeassistant = homeassistant
        self.interval = interval
        self._task: asyncio.Task | None = None

    async def run_once(self, owner_id: str) -> list[ReconcileResult] | None:
        """Sync one user's trays.

        Returns None when the user is not set up for polling, otherwise the
        reconcile result for every tray that reported a tagged spool.
        """
        user = self.store.get_user(owner_id)
        if not user or not user.polling_enabled:
            return None

        if not user.hass_url or not user.hass_token:
            logger.info("User %s has no HASS URL/Token configuration", owner_id)
            return None

        configs = [c for c in self.store.get_ams_configs(owner_id) if c.enabled]
        if not configs:
            logger.info("User %s has no enabled AMS configurations", owner_id)
            return None

        per_unit = await asyncio.gather(
            *(
                self.homeassistant.get_trays(user.hass_url, user.hass_token, c.sensor, c.tray_count, user.tray_name)
                for c in configs
            )
        )
        snapshots = [tray for trays in per_unit for tray in trays if tray is not None]

        results = [self.reconciler.reconcile_one(owner_id, snapshot) for snapshot in snapshots]
        self.reconciler.cleanup_depleted(owner_id)

        logger.debug("Synced %d trays for user %s", len(results), owner_id)
        return results

    async def sync_all(self) -> None:
        """Sync every user. A failure for one user does not stop the others."""
        for user in self.store.list_users():
            try:
                await self.run_once(user.id)
            except Exception as e:
                logger.error("Error syncing user %s: %s", user.username, e)

    async def run(self):
        """Main loop - sync all users every interval until cancelled."""
        logger.info("Tray sync started (every %.0fs)", self.interval)
        while True:
            await self.sync_all()
            await asyncio.sleep(self.interval)

    def start(self):
        """Start the sync background task."""
        if self._task is None:
            self._task = asyncio.create_task(self.run())

    async def stop(self):
        """Cancel the sync background task and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Tray sync stopped")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()
