from typing import Literal

from pydantic import BaseModel, Field

AMSType = Literal["ams", "ams2pro", "amsht", "amslite"]


class AMSConfigCreate(BaseModel):
    name: str = Field(..., min_length=1)
    type: AMSType
    sensor: str = Field(..., min_length=1)


class AMSConfigUpdate(BaseModel):
    name: str | None = None
    type: AMSType | None = None
    sensor: str | None = None
    enabled: bool | None = None


class AMSConfigResponse(BaseModel):
    id: str
    name: str
    type: str
    sensor: str
    enabled: bool
    tray_count: int
    created_at: str
    updated_at: str | None = None

    class Config:
        from_attributes = True
