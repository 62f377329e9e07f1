# comics_api/features/stories/service.py
from __future__ import annotations

from typing import List, Set

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from comics_api.config import config
from comics_api.errors import Conflict, NotFound
from comics_api.features.pages.lifecycle import ensure_owner
from comics_api.lib.slugs import pick_unique_slug
from comics_api.logger import get_logger
from comics_api.models import Story
from comics_api.repositories import PageRepository, StoryAggregate, StoryRepository

from .schemas import CreateStoryRequest, StorySummary

log = get_logger(__name__)


def create_story(db: Session, user_id: str, req: CreateStoryRequest) -> Story:
    stories = StoryRepository(db)
    slug = pick_unique_slug(stories.slug_taken, max_attempts=config.slug_max_attempts)
    story = Story(slug=slug, title=req.title.strip(), style=req.style.strip(), user_id=user_id)
    try:
        stories.add(story)
        db.commit()
    except IntegrityError:
        # slug claimed between our check and the insert
        db.rollback()
        raise Conflict("Could not reserve a unique slug; please retry.")
    log.info(f"created story {story.slug} for user {user_id}")
    return story


def list_user_stories(db: Session, user_id: str) -> List[StorySummary]:
    stories = StoryRepository(db).list_for_user(user_id)
    summaries = PageRepository(db).summaries_for_stories([s.id for s in stories])
    out: List[StorySummary] = []
    for s in stories:
        count, cover = summaries.get(s.id, (0, None))
        out.append(
            StorySummary(
                id=s.id,
                title=s.title,
                slug=s.slug,
                created_at=s.created_at,
                page_count=count,
                cover_image=cover,
            )
        )
    return out


def get_owned_story(db: Session, user_id: str, slug: str) -> StoryAggregate:
    aggregate = StoryRepository(db).load_aggregate(slug)
    if aggregate is None:
        raise NotFound("Story", slug)
    ensure_owner(aggregate.story, user_id)
    return aggregate


def story_character_images(aggregate: StoryAggregate) -> Set[str]:
    """Every character image used anywhere in the story. Order is not meaningful."""
    urls: Set[str] = set()
    for page in aggregate.pages:
        urls.update(page.character_image_urls or [])
    return urls
