from datetime import datetime
from typing import Literal

from pydantic import Field

from signage.schemas.common import APIModel, UpdateModel

ContentType = Literal["Image", "Video", "HTML", "URL", "PDF"]
ContentStatus = Literal["Processing", "Ready", "Failed"]


class ContentOut(APIModel):
    id: int
    customer_id: int
    name: str
    description: str | None = None
    content_type: str
    file_url: str | None = None
    thumbnail_url: str | None = None
    file_size: int | None = None
    duration: int | None = None
    width: int | None = None
    height: int | None = None
    mime_type: str | None = None
    checksum: str | None = None
    status: str
    tags: str | None = None
    uploaded_by: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ContentCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    content_type: ContentType
    file_url: str | None = Field(None, max_length=1024)
    thumbnail_url: str | None = Field(None, max_length=1024)
    duration: int | None = Field(None, gt=0)
    width: int | None = Field(None, gt=0)
    height: int | None = Field(None, gt=0)
    mime_type: str | None = Field(None, max_length=100)
    tags: str | None = Field(None, max_length=500)


class ContentUpdate(UpdateModel):
    not_nullable = ("name", "content_type", "status")

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    content_type: ContentType | None = None
    duration: int | None = Field(None, gt=0)
    status: ContentStatus | None = None
    tags: str | None = Field(None, max_length=500)
