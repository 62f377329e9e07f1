# comics_api/features/pages/schemas.py
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class PageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # storyId and prompt are checked by the service so a missing one is a 400, not a 422
    story_id: Optional[str] = Field(None, alias="storyId", description="Story slug or id")
    page_id: Optional[str] = Field(None, alias="pageId", description="Existing page to redraw; omit to append")
    prompt: Optional[str] = None
    character_images: List[str] = Field(
        default_factory=list, alias="characterImages", description="Character reference image URLs, in order"
    )


class PageResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(..., alias="imageUrl")
    page_id: str = Field(..., alias="pageId")
    page_number: int = Field(..., alias="pageNumber")
