# comics_api/features/stories/schemas.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from comics_api.models import as_utc


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    # timestamps always go out UTC-marked
    @field_validator("created_at", "updated_at", mode="after", check_fields=False)
    @classmethod
    def utc_timestamps(cls, v: datetime) -> datetime:
        return as_utc(v)


class CreateStoryRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    style: str = Field("", max_length=120, description="Art style, e.g. 'manga', 'noir', 'pixar 3D'")


class StoryOut(_CamelModel):
    id: str
    slug: str
    title: str
    style: str
    user_id: str = Field(..., alias="userId")
    created_at: datetime = Field(..., alias="createdAt")


class StorySummary(_CamelModel):
    id: str
    title: str
    slug: str
    created_at: datetime = Field(..., alias="createdAt")
    page_count: int = Field(0, alias="pageCount")
    cover_image: Optional[str] = Field(None, alias="coverImage")


class StoryList(BaseModel):
    stories: List[StorySummary]


class PageOut(_CamelModel):
    id: str
    page_number: int = Field(..., alias="pageNumber")
    prompt: str
    character_image_urls: List[str] = Field(default_factory=list, alias="characterImageUrls")
    generated_image_url: Optional[str] = Field(None, alias="generatedImageUrl")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")


class StoryWithPages(BaseModel):
    story: StoryOut
    pages: List[PageOut]


class CharacterGallery(BaseModel):
    characters: List[str]
