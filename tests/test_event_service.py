from __future__ import annotations

from datetime import date, datetime

import pytest

from app.models.event import Event, EventMode, EventTag, slugify
from app.schemas.event import EventCreate, EventUpdate
from app.services.event_service import EventService
from app.utils.exceptions import DuplicateEvent, EventNotFound, ImageUploadFailed, InvalidSlug
from conftest import FakeImageStore, event_fields


def _create(events: EventService, title: str = "React Summit 2026", **overrides) -> Event:
    data = EventCreate.model_validate(event_fields(title, **overrides))
    return events.create(data, b"\x89PNG", "poster.png")


def test_slugify() -> None:
    assert slugify("  React Summit 2026 ") == "react-summit-2026"
    assert slugify("Hello, World!") == "hello-world"
    assert slugify("a -- b") == "a-b"
    assert slugify("!!!") == ""


def test_create_event_stores_fields_and_poster(events, images) -> None:
    event = _create(events)

    assert event.slug == "react-summit-2026"
    assert event.tags == ["react", "frontend"]
    assert event.agenda == ["Keynote", "Workshops"]
    assert event.date == date(2026, 6, 12)
    assert event.mode == EventMode.offline
    assert event.image == images.uploads[0]


def test_form_values_are_normalized() -> None:
    data = EventCreate.model_validate(
        event_fields(mode="Hybrid (In-person & Online)", tags="react, vue ,, react", agenda="Intro,Q&A")
    )
    assert data.mode == EventMode.hybrid
    assert data.tags == ["react", "vue", "react"]
    assert data.agenda == ["Intro", "Q&A"]
    assert EventCreate.model_validate(event_fields(mode="in-person")).mode == EventMode.offline


def test_duplicate_tags_are_stored_once(events) -> None:
    event = _create(events, tags="react, vue, react")
    assert event.tags == ["react", "vue"]


def test_duplicate_title_is_rejected_before_upload(events, images, db) -> None:
    _create(events)
    with pytest.raises(DuplicateEvent):
        _create(events, title="react summit 2026!")
    assert len(images.uploads) == 1
    assert db.query(Event).count() == 1


def test_failed_upload_creates_nothing(db) -> None:
    events = EventService(db=db, images=FakeImageStore(fail=True))
    with pytest.raises(ImageUploadFailed):
        _create(events)
    assert db.query(Event).count() == 0


def test_get_by_slug(events) -> None:
    created = _create(events)
    assert events.get_by_slug("  React-Summit-2026 ").id == created.id

    with pytest.raises(InvalidSlug):
        events.get_by_slug("bad slug!")
    with pytest.raises(EventNotFound) as exc:
        events.get_by_slug("missing")
    assert exc.value.message == 'Event with slug "missing" not found'


def test_similar_events_share_a_tag_sorted_by_date(events) -> None:
    _create(events, "Base", tags="react, frontend")
    _create(events, "July", tags="react", date="2026-07-01")
    _create(events, "May", tags="frontend", date="2026-05-01")
    _create(events, "September", tags="react", date="2026-09-01")
    _create(events, "August", tags="react", date="2026-08-01")
    _create(events, "Backend", tags="backend", date="2026-01-01")

    similar = events.similar_by_slug("base")
    assert [event.slug for event in similar] == ["may", "july", "august"]
    assert events.similar_by_slug("unknown") == []


def test_update_changes_only_given_fields(events, images, db) -> None:
    event = _create(events)
    data = EventUpdate.model_validate({"title": "React Summit Berlin", "tags": '["react", "ssr"]'})

    updated = events.update(event.id, data)
    assert updated.slug == "react-summit-berlin"
    assert updated.tags == ["react", "ssr"]
    assert updated.venue == "Expo Hall"
    assert updated.image == images.uploads[0]
    assert db.query(EventTag).count() == 2
    assert images.destroyed == []


def test_update_with_new_image_removes_old_one(events, images) -> None:
    event = _create(events)
    old = event.image

    updated = events.update(event.id, EventUpdate(), b"\x89PNG", "new.png")
    assert updated.image == images.uploads[1]
    assert images.destroyed == [old]


def test_update_to_taken_title_conflicts(events, images) -> None:
    _create(events, "First")
    second = _create(events, "Second")

    with pytest.raises(DuplicateEvent):
        events.update(second.id, EventUpdate(title="first"), b"\x89PNG", "new.png")
    assert len(images.uploads) == 2
    assert events.get_by_slug("second").title == "Second"


def test_delete_removes_event_and_poster(events, images, db) -> None:
    event = _create(events)
    events.delete(event.id)

    assert db.query(Event).count() == 0
    assert db.query(EventTag).count() == 0
    assert images.destroyed == [event.image]
    with pytest.raises(EventNotFound):
        events.delete(event.id)


def test_list_events_newest_first_with_filters(events, db) -> None:
    older = _create(events, "Older", mode="online", tags="python")
    newer = _create(events, "Newer", description="All about Rust", tags="rust")
    older.created_at = datetime(2026, 1, 1)
    newer.created_at = datetime(2026, 2, 1)
    db.commit()

    assert [event.slug for event in events.list_events()] == ["newer", "older"]
    assert [event.slug for event in events.list_events(mode=EventMode.online)] == ["older"]
    assert [event.slug for event in events.list_events(tag="rust")] == ["newer"]
    assert [event.slug for event in events.list_events(search="rust")] == ["newer"]
