# tests/test_prompt.py
from datetime import datetime, timedelta, timezone

from comics_api.errors import RateLimited
from comics_api.features.pages.continuity import PreviousPage
from comics_api.features.pages.prompt import build_page_prompt


def test_opening_page_prompt():
    text = build_page_prompt(prompt="A hero rises", style="noir", character_count=1, previous_pages=[])
    assert "**ART STYLE:** noir" in text
    assert "opening page" in text
    assert "STORY SO FAR" not in text
    assert "Reference image(s) 1 show the MAIN CHARACTERS" in text


def test_continuation_prompt_lists_history_and_roles():
    history = [PreviousPage(1, "Hero wakes up"), PreviousPage(2, "Hero meets villain")]
    text = build_page_prompt(
        prompt="Final showdown", style="manga", character_count=2, previous_pages=history, has_anchor=True
    )
    assert "1. Hero wakes up\n2. Hero meets villain" in text
    assert "Reference image 1 is the PREVIOUS PAGE" in text
    assert "Reference image(s) 2-3 show the MAIN CHARACTERS" in text
    assert text.index("STORY SO FAR") < text.index("Final showdown")


def test_rate_limited_payload_has_reset_date():
    now = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)
    err = RateLimited(now + timedelta(days=6, hours=1), now=now)
    body = err.payload()
    assert err.status_code == 429
    assert body["isRateLimited"] is True
    assert body["resetDate"] == "2026-10-23T13:00:00Z"
    assert "Try again in 7 day(s)" in body["error"]
