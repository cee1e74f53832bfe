from typing import Literal

from pydantic import BaseModel

PhotoshootStatus = Literal["pending", "available", "archived"]
# "available" is reached only through a successful photo sync
EditablePhotoshootStatus = Literal["pending", "archived"]


class PhotoshootCreate(BaseModel):
    client_id: str
    title: str
    description: str | None = None
    google_drive_url: str | None = None
    shoot_date: str | None = None


class PhotoshootUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    google_drive_url: str | None = None
    shoot_date: str | None = None
    status: EditablePhotoshootStatus | None = None


class PhotoSyncRequest(BaseModel):
    google_drive_url: str


class PhotoshootResponse(BaseModel):
    id: str
    client_id: str
    title: str
    description: str | None = None
    google_drive_url: str | None = None
    shoot_date: str | None = None
    status: PhotoshootStatus
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


class PhotoResponse(BaseModel):
    id: str
    photoshoot_id: str
    filename: str
    original_url: str
    thumbnail_url: str | None = None
    watermarked_url: str | None = None
    file_order: int

    model_config = {"from_attributes": True}
