# tests/test_lifecycle.py
import pytest

from comics_api.errors import Conflict, Forbidden, NotFound
from comics_api.features.pages.lifecycle import PageLifecycle, ensure_owner
from comics_api.models import as_utc
from comics_api.repositories import PageRepository, StoryRepository
from tests.conftest import make_page, make_story


def _lifecycle(db):
    return PageLifecycle(PageRepository(db))


def test_add_page_starts_at_one_without_image(db):
    story = make_story(db)
    page = _lifecycle(db).add_page(story, "opening", ["hero.png"])

    assert page.page_number == 1
    assert page.generated_image_url is None
    assert page.character_image_urls == ["hero.png"]


def test_add_page_numbers_stay_contiguous(db):
    story = make_story(db)
    lc = _lifecycle(db)
    numbers = [lc.add_page(story, f"p{i}", []).page_number for i in range(4)]
    assert numbers == [1, 2, 3, 4]


def test_concurrent_add_for_same_number_conflicts(db, session_factory, monkeypatch):
    story = make_story(db)
    first = _lifecycle(db).add_page(story, "first", [])
    assert first.page_number == 1

    # second request read max() before the first insert landed
    other = session_factory()
    lc = _lifecycle(other)
    monkeypatch.setattr(lc, "next_page_number", lambda story_id: 1)
    with pytest.raises(Conflict):
        lc.add_page(other.get(type(story), story.id), "second", [])
    other.close()

    assert [p.page_number for p in PageRepository(db).list_for_story(story.id)] == [1]


def test_redraw_returns_existing_row_unchanged(db):
    story = make_story(db)
    make_page(db, story, 1)
    p2 = make_page(db, story, 2)
    agg = StoryRepository(db).load_aggregate(story.slug)

    page = _lifecycle(db).redraw_page(agg, p2.id)

    assert page.id == p2.id
    assert page.page_number == 2
    assert len(PageRepository(db).list_for_story(story.id)) == 2


def test_redraw_of_page_from_other_story_is_not_found(db):
    story = make_story(db)
    other_story = make_story(db, slug="wild-saga-202")
    foreign = make_page(db, other_story, 1)
    agg = StoryRepository(db).load_aggregate(story.slug)

    with pytest.raises(NotFound):
        _lifecycle(db).redraw_page(agg, foreign.id)


def test_commit_sets_image_and_touches_updated_at(db):
    story = make_story(db)
    page = make_page(db, story, 1, image=None)
    before = page.updated_at

    _lifecycle(db).commit(page, "https://cdn.test/final.png")
    db.commit()

    stored = PageRepository(db).by_number(story.id, 1)
    assert stored.generated_image_url == "https://cdn.test/final.png"
    assert as_utc(stored.updated_at) >= as_utc(before)


def test_ensure_owner_rejects_other_users(db):
    story = make_story(db, user_id="owner")
    ensure_owner(story, "owner")
    with pytest.raises(Forbidden):
        ensure_owner(story, "intruder")


def test_discard_frees_the_number_of_an_unfinished_page(db):
    story = make_story(db)
    make_page(db, story, 1)
    lc = _lifecycle(db)
    page = lc.add_page(story, "second", [])

    lc.discard(page)

    assert [p.page_number for p in PageRepository(db).list_for_story(story.id)] == [1]
    assert lc.add_page(story, "second again", []).page_number == 2


def test_discard_keeps_a_page_that_has_an_image(db):
    story = make_story(db)
    page = make_page(db, story, 1)
    _lifecycle(db).discard(page)
    assert [p.id for p in PageRepository(db).list_for_story(story.id)] == [page.id]
