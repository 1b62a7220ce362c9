from pydantic import BaseModel, Field

from backend.app.models.tray import TraySnapshot


class TrayPayload(BaseModel):
    """Single tray state pushed by a Home Assistant automation.

    Field names follow the tray sensor attributes of the Bambu Lab integration.
    """

    tag_uid: str = ""
    type: str = ""
    color: str = ""
    name: str = ""
    remain: float = 0
    empty: bool = False
    manufacturer: str = ""
    size: float | None = Field(None, gt=0)

    def to_snapshot(self) -> TraySnapshot:
        return TraySnapshot(
            tag_id=self.tag_uid,
            material_type=self.type,
            color_rgb=self.color,
            display_name=self.name,
            remaining_percent=self.remain,
            is_empty=self.empty,
            manufacturer=self.manufacturer,
            spool_size_grams=self.size,
        )


class ReconcileResponse(BaseModel):
    success: bool
    action: str
    tag_id: str | None = None
    message: str | None = None


class HassConnectionTest(BaseModel):
    url: str | None = None
    token: str | None = None
