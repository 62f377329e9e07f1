# comics_api/lib/slugs.py
from __future__ import annotations

import random
import string
import time
from typing import Callable, Optional

_ADJECTIVES = [
    "amazing", "brave", "cosmic", "daring", "electric", "fearless", "galactic",
    "heroic", "incredible", "jolly", "kinetic", "legendary", "mighty", "neon",
    "outrageous", "phantom", "quantum", "radiant", "sonic", "thunderous",
    "uncanny", "valiant", "wild", "zany",
]
_NOUNS = [
    "adventure", "blaster", "chronicle", "dynamo", "echo", "falcon", "guardian",
    "hero", "inferno", "journey", "knight", "legend", "meteor", "nebula",
    "odyssey", "paladin", "quest", "rocket", "saga", "titan", "voyage",
    "warrior", "vortex", "zephyr",
]
_BASE36 = string.digits + string.ascii_lowercase


def generate_comic_slug(rng: Optional[random.Random] = None) -> str:
    """A readable candidate like ``cosmic-falcon-482``. Uniqueness is not checked here."""
    rng = rng or random
    return f"{rng.choice(_ADJECTIVES)}-{rng.choice(_NOUNS)}-{rng.randint(100, 999)}"


def fallback_slug(now_ms: Optional[int] = None, rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(rng.choice(_BASE36) for _ in range(5))
    return f"story-{now_ms}-{suffix}"


def pick_unique_slug(
    is_taken: Callable[[str], bool],
    *,
    max_attempts: int = 10,
    generate: Optional[Callable[[], str]] = None,
) -> str:
    """
    Draw candidates until `is_taken` says one is free. After `max_attempts`
    collisions fall back to a timestamped slug that is not checked again.
    """
    generate = generate or generate_comic_slug
    for _ in range(max_attempts):
        slug = generate()
        if not is_taken(slug):
            return slug
    return fallback_slug()
