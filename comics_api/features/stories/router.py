# comics_api/features/stories/router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from comics_api.lib.auth import current_user_id
from comics_api.lib.db import get_db

from .schemas import (
    CharacterGallery,
    CreateStoryRequest,
    PageOut,
    StoryList,
    StoryOut,
    StoryWithPages,
)
from .service import create_story, get_owned_story, list_user_stories, story_character_images

router = APIRouter(prefix="/api/v1", tags=["stories"])


@router.get("/stories", response_model=StoryList)
def list_stories(user_id: str = Depends(current_user_id), db: Session = Depends(get_db)):
    return StoryList(stories=list_user_stories(db, user_id))


@router.post("/stories", response_model=StoryOut, status_code=201)
def create_story_endpoint(
    req: CreateStoryRequest,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    return StoryOut.model_validate(create_story(db, user_id, req))


@router.get("/stories/{slug}", response_model=StoryWithPages)
def get_story(slug: str, user_id: str = Depends(current_user_id), db: Session = Depends(get_db)):
    aggregate = get_owned_story(db, user_id, slug)
    return StoryWithPages(
        story=StoryOut.model_validate(aggregate.story),
        pages=[PageOut.model_validate(p) for p in aggregate.pages],
    )


@router.get("/stories/{slug}/characters", response_model=CharacterGallery)
def story_characters(slug: str, user_id: str = Depends(current_user_id), db: Session = Depends(get_db)):
    aggregate = get_owned_story(db, user_id, slug)
    return CharacterGallery(characters=sorted(story_character_images(aggregate)))
