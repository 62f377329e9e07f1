# comics_api/features/pages/service.py
from __future__ import annotations

from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from comics_api.errors import NotFound, RateLimited, ValidationError
from comics_api.logger import get_logger
from comics_api.models import Page
from comics_api.repositories import GenerationEventRepository, PageRepository, StoryAggregate, StoryRepository

from .continuity import ContinuityContextBuilder
from .gateway import ImageGateway
from .lifecycle import PageLifecycle, ensure_owner
from .materializer import ResultMaterializer
from .prompt import build_page_prompt
from .quota import QuotaGate
from .schemas import PageRequest, PageResult

log = get_logger(__name__)


class PageGenerationService:
    """
    Add or redraw one page of a story.

    Order matters: every check that can reject the request (fields, story,
    ownership, quota) runs before a page row is touched, and the store
    transaction is closed before the slow image-service and bucket calls.
    """

    def __init__(
        self,
        session: Session,
        *,
        gateway: ImageGateway,
        materializer: ResultMaterializer,
        quota: QuotaGate,
    ):
        self.session = session
        self.stories = StoryRepository(session)
        self.pages = PageRepository(session)
        self.lifecycle = PageLifecycle(self.pages)
        self.continuity = ContinuityContextBuilder(self.pages)
        self.gateway = gateway
        self.materializer = materializer
        self.quota = quota

    def run(self, user_id: str, req: PageRequest, *, api_key: Optional[str] = None) -> PageResult:
        if not req.story_id or not (req.prompt or "").strip():
            raise ValidationError("Missing required fields: storyId and prompt")

        aggregate = self.stories.load_aggregate(req.story_id)
        if aggregate is None:
            raise NotFound("Story", req.story_id)
        story = aggregate.story
        ensure_owner(story, user_id)

        has_own_key = bool(api_key)
        decision = self.quota.check(user_id, has_own_key)
        if not decision.allowed:
            raise RateLimited(
                decision.reset_at,
                limit=self.quota.limit,
                window_days=self.quota.window.days,
                now=self.quota.clock(),
            )

        is_redraw = bool(req.page_id)
        if is_redraw:
            page = self.lifecycle.redraw_page(aggregate, req.page_id)
        else:
            page = self.lifecycle.add_page(story, req.prompt, req.character_images)
        # release the store before the slow calls
        self.session.commit()

        try:
            durable_url = self._render(aggregate, page, req, is_redraw, api_key)
            self.lifecycle.commit(page, durable_url)
            if not has_own_key:
                self.quota.record(user_id, story_id=story.id, page_id=page.id)
            self.session.commit()
        except Exception:
            # a redrawn page keeps its previous image; a fresh one must not linger
            if not is_redraw:
                self.lifecycle.discard(page)
            raise

        log.info(
            f"{'redrew' if is_redraw else 'added'} page {page.page_number} of story {story.slug}: {durable_url}"
        )
        return PageResult(image_url=durable_url, page_id=page.id, page_number=page.page_number)

    def _render(
        self, aggregate: StoryAggregate, page: Page, req: PageRequest, is_redraw: bool, api_key: Optional[str]
    ) -> str:
        story = aggregate.story
        ctx = self.continuity.build(aggregate, page.page_number, is_redraw, req.character_images)
        self.session.commit()

        full_prompt = build_page_prompt(
            prompt=req.prompt,
            style=story.style,
            character_count=len(req.character_images),
            previous_pages=[p for p in ctx.prompt_context if p.page_number < page.page_number],
            has_anchor=ctx.anchor_image is not None,
        )
        log.debug(f"page prompt for {story.slug}#{page.page_number}: {full_prompt}")

        remote_url = self.gateway.generate(full_prompt, ctx.reference_images, api_key=api_key)
        return self.materializer.persist(remote_url, story_id=story.id, page_number=page.page_number)


def make_quota_gate(session: Session, *, limit: int, window_days: int) -> QuotaGate:
    return QuotaGate(GenerationEventRepository(session), limit=limit, window=timedelta(days=window_days))
