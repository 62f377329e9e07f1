# comics_api/features/pages/quota.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from comics_api.models import GenerationEvent, as_utc, utcnow
from comics_api.repositories import GenerationEventRepository
from comics_api.logger import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class QuotaDecision:
    allowed: bool
    reset_at: Optional[datetime] = None
    remaining: Optional[int] = None


class QuotaGate:
    """
    Sliding-window free tier: at most `limit` successful generations in any
    `window` for users who did not bring their own image-service key.
    """

    def __init__(
        self,
        events: GenerationEventRepository,
        *,
        limit: int = 1,
        window: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = utcnow,
    ):
        if limit < 1:
            raise ValueError(f"free tier limit must be at least 1, got {limit}")
        self.events = events
        self.limit = limit
        self.window = window
        self.clock = clock

    def check(self, user_id: str, has_own_credential: bool) -> QuotaDecision:
        if has_own_credential:
            return QuotaDecision(allowed=True)

        now = self.clock()
        recent = self.events.since(user_id, now - self.window)
        if len(recent) < self.limit:
            return QuotaDecision(allowed=True, remaining=self.limit - len(recent))

        # the window frees up when the oldest event that still counts ages out
        oldest = as_utc(recent[-self.limit].created_at)
        reset_at = oldest + self.window
        log.info(f"free tier exhausted for user {user_id}; resets at {reset_at.isoformat()}")
        return QuotaDecision(allowed=False, reset_at=reset_at, remaining=0)

    def record(self, user_id: str, *, story_id: Optional[str] = None, page_id: Optional[str] = None) -> GenerationEvent:
        return self.events.add(
            GenerationEvent(user_id=user_id, story_id=story_id, page_id=page_id, created_at=self.clock())
        )
