# comics_api/features/pages/lifecycle.py
from __future__ import annotations

from typing import List

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError

from comics_api.errors import Conflict, Forbidden, NotFound
from comics_api.logger import get_logger
from comics_api.models import Page, Story, utcnow
from comics_api.repositories import PageRepository, StoryAggregate

log = get_logger(__name__)


def ensure_owner(story: Story, user_id: str) -> None:
    if story.user_id != user_id:
        log.warning(f"user {user_id} tried to modify story {story.slug} owned by {story.user_id}")
        raise Forbidden()


class PageLifecycle:
    """Page numbering, add-vs-redraw, and the single write of a page's image."""

    def __init__(self, pages: PageRepository):
        self.pages = pages
        self.session = pages.session

    def next_page_number(self, story_id: str) -> int:
        return self.pages.max_page_number(story_id) + 1

    def add_page(self, story: Story, prompt: str, character_images: List[str]) -> Page:
        """
        Inserts page max+1 with no image yet. Two requests racing for the same
        number are settled by the (story_id, page_number) unique constraint:
        the loser gets a retryable Conflict.
        """
        number = self.next_page_number(story.id)
        page = Page(
            story_id=story.id,
            page_number=number,
            prompt=prompt,
            character_image_urls=list(character_images),
            generated_image_url=None,
        )
        try:
            self.pages.add(page)
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            log.warning(f"page number {number} of story {story.slug} was taken concurrently")
            raise Conflict(f"Page {number} is already being created for this story; please retry.")
        log.info(f"created page {number} ({page.id}) for story {story.slug}")
        return page

    def redraw_page(self, aggregate: StoryAggregate, page_id: str) -> Page:
        page = aggregate.find_page(page_id)
        if page is None or page.story_id != aggregate.story.id:
            raise NotFound("Page", page_id)
        log.info(f"redrawing page {page.page_number} ({page.id}) of story {aggregate.story.slug}")
        return page

    def commit(self, page: Page, durable_image_url: str) -> Page:
        """The only place a page's image reference is written. Last writer wins."""
        page.generated_image_url = durable_image_url
        page.updated_at = utcnow()
        self.session.add(page)
        self.session.flush()
        return page

    def discard(self, page: Page) -> None:
        """
        Drops a page inserted by `add_page` whose generation failed, so the
        retry lands on the same number. Rows that already have an image are kept.
        """
        page_id, number = page.id, page.page_number
        self.session.rollback()
        self.session.execute(
            delete(Page).where(Page.id == page_id, Page.generated_image_url.is_(None))
        )
        self.session.commit()
        log.info(f"discarded unfinished page {number} ({page_id})")
