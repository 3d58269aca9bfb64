# app/models/event.py
import enum
import re
import uuid

from sqlalchemy import JSON, Column, Date, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship, validates

from app.database import Base
from app.utils.clock import utcnow

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


class EventMode(str, enum.Enum):
    online = "online"
    offline = "offline"
    hybrid = "hybrid"


def slugify(title: str) -> str:
    """URL slug for a title: lower-case words joined by single hyphens."""
    slug = re.sub(r"[^a-z0-9\s-]", "", (title or "").lower().strip())
    slug = re.sub(r"[\s-]+", "-", slug)
    return slug.strip("-")


class EventTag(Base):
    __tablename__ = "event_tags"

    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), primary_key=True)
    tag = Column(String, primary_key=True, index=True)
    position = Column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f"<EventTag {self.tag}>"


class Event(Base):
    __tablename__ = "events"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(100), nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    description = Column(Text, nullable=False)
    overview = Column(Text, nullable=False)
    image = Column(String, nullable=False)
    venue = Column(String, nullable=False)
    location = Column(String, nullable=False)
    date = Column(Date, index=True, nullable=False)
    time = Column(String, nullable=False)
    mode = Column(Enum(EventMode, name="event_mode"), nullable=False)
    audience = Column(String, nullable=False)
    agenda = Column(JSON, default=list, nullable=False)
    organizer = Column(String, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    tag_links = relationship(
        "EventTag",
        order_by=EventTag.position,
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    @validates("title")
    def validate_title(self, key, value):
        title = (value or "").strip()
        slug = slugify(title)
        if not slug:
            raise ValueError("Title must contain letters or digits")
        # The slug always follows the current title
        self.slug = slug
        return title

    @property
    def tags(self):
        return [link.tag for link in self.tag_links]

    @tags.setter
    def tags(self, values):
        wanted = []
        for value in values or []:
            tag = str(value).strip()
            if tag and tag not in wanted:
                wanted.append(tag)

        # Reuse surviving rows so a tag kept across an edit is never deleted and re-inserted
        existing = {link.tag: link for link in self.tag_links}
        self.tag_links = [existing.get(tag) or EventTag(tag=tag) for tag in wanted]
        for position, link in enumerate(self.tag_links):
            link.position = position

    def __repr__(self):
        return f"<Event slug={self.slug} date={self.date}>"
