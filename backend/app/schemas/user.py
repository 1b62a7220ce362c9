from typing import Literal

from pydantic import BaseModel, Field

HassMode = Literal["polling", "webhook", "disabled"]


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: str = ""
    role: Literal["user", "admin"] = "user"
    hass_url: str | None = None


class UserSettingsUpdate(BaseModel):
    email: str | None = None
    hass_url: str | None = None
    hass_token: str | None = None
    hass_mode: HassMode | None = None
    tray_name: str | None = Field(None, min_length=1)


class UserResponse(BaseModel):
    id: str
    username: str
    email: str
    role: str
    hass_url: str
    hass_mode: str
    tray_name: str
    created_at: str

    class Config:
        from_attributes = True
