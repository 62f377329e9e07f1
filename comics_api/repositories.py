# comics_api/repositories.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from comics_api.models import GenerationEvent, Page, Story

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    model: type

    def __init__(self, session: Session):
        self.session = session

    def get(self, **filters) -> Optional[ModelType]:
        return self.session.execute(select(self.model).filter_by(**filters)).scalars().first()

    def add(self, obj: ModelType) -> ModelType:
        self.session.add(obj)
        self.session.flush()
        return obj


@dataclass
class StoryAggregate:
    """A story and its pages as read at the start of one request."""
    story: Story
    pages: List[Page] = field(default_factory=list)

    def find_page(self, page_id: str) -> Optional[Page]:
        return next((p for p in self.pages if p.id == page_id), None)


class StoryRepository(BaseRepository[Story]):
    model = Story

    def by_slug(self, slug: str) -> Optional[Story]:
        return self.get(slug=slug)

    def by_slug_or_id(self, ref: str) -> Optional[Story]:
        return self.by_slug(ref) or self.get(id=ref)

    def slug_taken(self, slug: str) -> bool:
        stmt = select(Story.id).where(Story.slug == slug).limit(1)
        return self.session.execute(stmt).first() is not None

    def load_aggregate(self, ref: str) -> Optional[StoryAggregate]:
        story = self.by_slug_or_id(ref)
        if story is None:
            return None
        pages = PageRepository(self.session).list_for_story(story.id)
        return StoryAggregate(story=story, pages=pages)

    def list_for_user(self, user_id: str) -> List[Story]:
        stmt = select(Story).where(Story.user_id == user_id).order_by(Story.created_at)
        return list(self.session.execute(stmt).scalars().all())


class PageRepository(BaseRepository[Page]):
    model = Page

    def list_for_story(self, story_id: str) -> List[Page]:
        stmt = select(Page).where(Page.story_id == story_id).order_by(Page.page_number)
        return list(self.session.execute(stmt).scalars().all())

    def by_number(self, story_id: str, page_number: int) -> Optional[Page]:
        stmt = select(Page).where(Page.story_id == story_id, Page.page_number == page_number)
        page = self.session.execute(stmt).scalars().first()
        if page is not None:
            # drop whatever this session cached; another request may have redrawn it
            self.session.refresh(page)
        return page

    def max_page_number(self, story_id: str) -> int:
        stmt = select(func.max(Page.page_number)).where(Page.story_id == story_id)
        return self.session.execute(stmt).scalar() or 0

    def summaries_for_stories(self, story_ids: List[str]) -> dict:
        """story_id -> (max page number, page 1 image)"""
        if not story_ids:
            return {}
        stmt = (
            select(Page.story_id, Page.page_number, Page.generated_image_url)
            .where(Page.story_id.in_(story_ids))
        )
        out: dict = {}
        for story_id, number, image in self.session.execute(stmt):
            count, cover = out.get(story_id, (0, None))
            if number > count:
                count = number
            if number == 1 and image:
                cover = image
            out[story_id] = (count, cover)
        return out


class GenerationEventRepository(BaseRepository[GenerationEvent]):
    model = GenerationEvent

    def since(self, user_id: str, start: datetime) -> List[GenerationEvent]:
        stmt = (
            select(GenerationEvent)
            .where(GenerationEvent.user_id == user_id, GenerationEvent.created_at > start)
            .order_by(GenerationEvent.created_at)
        )
        return list(self.session.execute(stmt).scalars().all())
