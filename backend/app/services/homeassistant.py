"""Service for reading AMS tray sensors from Home Assistant via REST API."""

import asyncio
import logging

import httpx

from backend.app.models.tray import TraySnapshot, is_valid_tag

logger = logging.getLogger(__name__)


class HomeAssistantService:
    """Reads AMS tray state exposed by the Bambu Lab Home Assistant integration.

    Each tray is a sensor entity named ``{sensor}_{tray_name}_{n}`` whose
    attributes carry the RFID tag, filament type, colour, product name and
    remaining percentage.
    """

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout

    @staticmethod
    def _headers(token: str) -> dict:
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def tray_entity_id(sensor: str, tray_number: int, tray_name: str = "tray") -> str:
        return f"{sensor}_{tray_name}_{tray_number}"

    async def get_tray(
        self,
        url: str,
        token: str,
        sensor: str,
        tray_number: int,
        tray_name: str = "tray",
        client: httpx.AsyncClient | None = None,
    ) -> TraySnapshot | None:
        """Fetch one tray's state.

        Returns None when the tray is unreachable, has no attributes, or holds
        no tagged spool.
        """
        entity_id = self.tray_entity_id(sensor, tray_number, tray_name)
        try:
            if client is None:
                async with httpx.AsyncClient(timeout=self.timeout) as own_client:
                    data = await self._get_state(own_client, url, token, entity_id)
            else:
                data = await self._get_state(client, url, token, entity_id)
        except Exception as e:
            logger.warning(f"Failed to read tray {tray_number} from {sensor}: {e}")
            return None

        attrs = data.get("attributes") if isinstance(data, dict) else None
        if not attrs:
            return None
        if not is_valid_tag(attrs.get("tag_uid")):
            return None
        return TraySnapshot.from_attributes(attrs)

    async def _get_state(self, client: httpx.AsyncClient, url: str, token: str, entity_id: str) -> dict:
        response = await client.get(
            f"{url.rstrip('/')}/api/states/{entity_id}",
            headers=self._headers(token),
        )
        response.raise_for_status()
        return response.json()

    async def get_trays(
        self, url: str, token: str, sensor: str, tray_count: int, tray_name: str = "tray"
    ) -> list[TraySnapshot | None]:
        """Fetch trays 1..tray_count of one AMS unit, in slot order."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return list(
                await asyncio.gather(
                    *(self.get_tray(url, token, sensor, n, tray_name, client=client) for n in range(1, tray_count + 1))
                )
            )

    async def test_connection(self, url: str, token: str) -> dict:
        """Test connection to Home Assistant.

        Returns dict with:
            - success: bool
            - message: str or None (HA message on success)
            - error: str or None (error message on failure)
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{url.rstrip('/')}/api/",
                    headers={"Authorization": f"Bearer {token}"},
                )
                response.raise_for_status()
                data = response.json()
                return {
                    "success": True,
                    "message": data.get("message", "Connected"),
                    "error": None,
                }
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 401:
                return {"success": False, "message": None, "error": "Invalid access token"}
            return {"success": False, "message": None, "error": f"HTTP {e.response.status_code}"}
        except httpx.TimeoutException:
            return {"success": False, "message": None, "error": "Connection timeout"}
        except httpx.ConnectError:
            return {"success": False, "message": None, "error": "Could not connect to Home Assistant"}
        except Exception as e:
            return {"success": False, "message": None, "error": str(e)}

    async def list_tray_sensors(self, url: str, token: str, tray_name: str = "tray") -> list[dict]:
        """List sensor entities that look like AMS trays.

        Returns list of entity dicts with:
            - entity_id: str
            - friendly_name: str
            - sensor: str (entity prefix to use in an AMS configuration)
            - tray: int
        """
        marker = f"_{tray_name}_"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{url.rstrip('/')}/api/states",
                    headers={"Authorization": f"Bearer {token}"},
                )
                response.raise_for_status()

                entities = []
                for entity in response.json():
                    entity_id = entity.get("entity_id", "")
                    if not entity_id.startswith("sensor.") or marker not in entity_id:
                        continue
                    prefix, _, number = entity_id.rpartition(marker)
                    if not number.isdigit():
                        continue
                    entities.append(
                        {
                            "entity_id": entity_id,
                            "friendly_name": entity.get("attributes", {}).get("friendly_name", entity_id),
                            "sensor": prefix,
                            "tray": int(number),
                        }
                    )

                return sorted(entities, key=lambda x: (x["sensor"], x["tray"]))
        except Exception as e:
            logger.warning(f"Failed to list HA tray sensors: {e}")
            return []
