# comics_api/features/pages/continuity.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from comics_api.errors import NotFound
from comics_api.logger import get_logger
from comics_api.repositories import PageRepository, StoryAggregate

log = get_logger(__name__)


@dataclass(frozen=True)
class PreviousPage:
    page_number: int
    prompt: str
    character_image_urls: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ContinuityContext:
    reference_images: List[str]
    prompt_context: List[PreviousPage]
    anchor_image: Optional[str] = None


class ContinuityContextBuilder:
    def __init__(self, pages: PageRepository):
        self.pages = pages

    def build(
        self,
        aggregate: Optional[StoryAggregate],
        target_page_number: int,
        is_redraw: bool,
        character_images: List[str],
    ) -> ContinuityContext:
        """
        Reference images go out as [previous page image?, *selected characters].

        The previous page is always read back from the store instead of the
        aggregate: it may have been redrawn since the aggregate was loaded.
        The user's current character selection is used as given, never merged
        with characters from earlier pages.
        """
        if aggregate is None:
            raise NotFound("Story")
        story = aggregate.story

        references: List[str] = []
        anchor = None
        if target_page_number > 1:
            previous = self.pages.by_number(story.id, target_page_number - 1)
            if previous is None:
                log.warning(
                    f"story {story.slug}: page {target_page_number - 1} missing, "
                    f"generating page {target_page_number} without continuity anchor"
                )
            elif previous.generated_image_url:
                anchor = previous.generated_image_url
                references.append(anchor)

        references.extend(character_images)

        history = [
            PreviousPage(
                page_number=p.page_number,
                prompt=p.prompt,
                character_image_urls=list(p.character_image_urls or []),
            )
            for p in sorted(aggregate.pages, key=lambda p: p.page_number)
        ]
        log.debug(
            f"continuity for {story.slug} page {target_page_number} (redraw={is_redraw}): "
            f"anchor={'yes' if anchor else 'no'} characters={len(character_images)} history={len(history)}"
        )
        return ContinuityContext(reference_images=references, prompt_context=history, anchor_image=anchor)
