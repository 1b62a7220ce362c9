from pydantic import BaseModel, Field


class FilamentBase(BaseModel):
    material_type: str | None = None
    manufacturer: str | None = None
    display_name: str | None = None
    variation: str | None = None
    color_name: str | None = None
    color_rgb: str | None = None
    spool_size_grams: float | None = Field(None, gt=0)
    remaining_percent: float | None = Field(None, ge=-1, le=100)
    is_empty: bool | None = None
    ean: str | None = None


class FilamentSave(FilamentBase):
    """Add a filament, or update it when ``tag_id`` is already stored."""

    tag_id: str | None = None


class FilamentResponse(BaseModel):
    tag_id: str
    owner_id: str
    username: str | None = None
    material_type: str
    manufacturer: str
    display_name: str
    variation: str
    color_name: str
    color_rgb: str
    spool_size_grams: float
    remaining_percent: float
    is_empty: bool
    is_sensor_tracked: bool
    serial_number: str | None = None
    created_at: str
    updated_at: str

    class Config:
        from_attributes = True
