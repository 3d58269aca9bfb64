"""
Event catalogue: admin-side create, update and delete with a hosted poster
image, plus the public listing, slug lookup and "similar events" queries.
"""
from typing import List, Optional
import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.event import SLUG_PATTERN, Event, EventMode, EventTag
from app.schemas.event import EventCreate, EventUpdate
from app.utils.exceptions import DuplicateEvent, EventNotFound, InvalidEvent, InvalidSlug

logger = logging.getLogger(__name__)

SIMILAR_EVENTS_LIMIT = 3


def sanitize_slug(slug: str) -> str:
    cleaned = (slug or "").strip().lower()
    if not SLUG_PATTERN.match(cleaned):
        raise InvalidSlug()
    return cleaned


class EventService:
    def __init__(self, db: Session, images):
        self.db = db
        self.images = images

    # ------------------ Queries ------------------

    def list_events(
        self,
        mode: Optional[EventMode] = None,
        tag: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Event]:
        """Newest first, optionally narrowed by mode, a tag or a text search."""
        query = self.db.query(Event)
        if mode is not None:
            query = query.filter(Event.mode == mode)
        if tag:
            query = query.filter(Event.id.in_(select(EventTag.event_id).where(EventTag.tag == tag.strip())))
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(Event.title.ilike(pattern), Event.description.ilike(pattern), Event.location.ilike(pattern))
            )
        return query.order_by(Event.created_at.desc()).all()

    def get_by_slug(self, slug: str) -> Event:
        slug = sanitize_slug(slug)
        event = self.db.query(Event).filter(Event.slug == slug).first()
        if event is None:
            raise EventNotFound(f'Event with slug "{slug}" not found')
        return event

    def similar_by_slug(self, slug: str, limit: int = SIMILAR_EVENTS_LIMIT) -> List[Event]:
        """Events sharing at least one tag with ``slug``, soonest first; empty if ``slug`` is unknown."""
        slug = sanitize_slug(slug)
        event = self.db.query(Event).filter(Event.slug == slug).first()
        if event is None or not event.tags:
            return []

        shared = select(EventTag.event_id).where(EventTag.tag.in_(event.tags))
        return (
            self.db.query(Event)
            .filter(Event.id != event.id, Event.id.in_(shared))
            .order_by(Event.date.asc(), Event.created_at.asc())
            .limit(limit)
            .all()
        )

    def _get(self, event_id: str) -> Event:
        event = self.db.get(Event, event_id)
        if event is None:
            raise EventNotFound()
        return event

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateEvent()

    def _apply(self, event: Event, fields: dict) -> None:
        try:
            for key, value in fields.items():
                setattr(event, key, value)
        except ValueError as e:
            raise InvalidEvent(errors=[{"field": "title", "message": str(e)}])

    # ------------------ Mutations ------------------

    def _ensure_slug_free(self, event: Event) -> None:
        taken = self.db.query(Event.id).filter(Event.slug == event.slug, Event.id != event.id).first()
        if taken is not None:
            self.db.rollback()
            raise DuplicateEvent()

    def create(self, data: EventCreate, image: bytes, filename: str) -> Event:
        event = Event()
        self._apply(event, data.model_dump())
        self._ensure_slug_free(event)

        url = self.images.upload(image, filename)
        event.image = url
        self.db.add(event)
        try:
            self._commit()
        except DuplicateEvent:
            # Lost a race for the slug; the poster is orphaned
            self.images.destroy(url)
            raise
        logger.info(f"Event created: {event.slug}")
        return event

    def update(self, event_id: str, data: EventUpdate, image: Optional[bytes] = None, filename: str = "") -> Event:
        event = self._get(event_id)
        self._apply(event, data.model_dump(exclude_unset=True))
        self._ensure_slug_free(event)

        old_url = new_url = None
        if image:
            old_url = event.image
            new_url = self.images.upload(image, filename)
            event.image = new_url

        try:
            self._commit()
        except DuplicateEvent:
            if new_url:
                self.images.destroy(new_url)
            raise

        if old_url:
            self.images.destroy(old_url)
        self.db.refresh(event)
        logger.info(f"Event updated: {event.slug}")
        return event

    def delete(self, event_id: str) -> None:
        event = self._get(event_id)
        url = event.image
        self.db.delete(event)
        self.db.commit()
        self.images.destroy(url)
        logger.info(f"Event deleted: {event_id}")
