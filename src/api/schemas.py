from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from src.components.access.models import AssetView

Category = Literal["built", "unbuilt", "secret"]


# --- Images ---
class ImageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    title: str
    description: str
    category: Category
    project_id: int | None = None
    content_type: str
    filename: str
    filepath: str
    upload_date: datetime | None = Field(default=None, alias="uploadDate")
    access_token: str | None = None


def serialize_image(view: AssetView) -> dict[str, Any]:
    """JSON body for one asset; the token key is present only when visible."""
    exclude = None if view.token_visible else {"access_token"}
    return ImageResponse.model_validate(view).model_dump(
        mode="json", by_alias=True, exclude=exclude
    )


class ImageUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    category: str | None = None
    project_id: int | str | None = None


class UploadResponse(BaseModel):
    message: str
    images: list[dict[str, Any]]


class ImageUpdateResponse(BaseModel):
    message: str
    image: dict[str, Any]


class ImageFileResponse(BaseModel):
    message: str
    image_id: int


class TokenResponse(BaseModel):
    message: str
    access_token: str


class MessageResponse(BaseModel):
    message: str


# --- Projects ---
class ProjectResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    project_id: int
    title: str
    images: list[dict[str, Any]]
    total_images: int = Field(alias="totalImages")
