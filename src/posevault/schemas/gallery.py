from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class GalleryItem(BaseModel):
    uid: int | None = Field(None, description="Omit to create a new gallery")
    name: str = Field(..., min_length=1, max_length=255)
    notes: str = ""
    cover_image_uid: int | None = None


class GallerySyncRequest(BaseModel):
    galleries: list[GalleryItem]


class GalleryResponse(BaseModel):
    uid: int
    name: str
    notes: str | None = ""
    cover_image_uid: int | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
