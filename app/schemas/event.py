# app/schemas/event.py
import datetime as dt
from typing import List, Optional
import json

from pydantic import BaseModel, Field, field_validator

from app.models.event import EventMode

# Labels the admin form has used for the same three modes
MODE_ALIASES = {
    "hybrid (in-person & online)": "hybrid",
    "in-person": "offline",
}


def _as_list(value):
    """Accept a JSON array or a comma-separated string and return clean items."""
    if value is None:
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("["):
            try:
                value = json.loads(text)
            except ValueError:
                raise ValueError("Must be a JSON array or a comma-separated list")
        else:
            value = text.split(",")
    if not isinstance(value, list):
        raise ValueError("Must be a JSON array or a comma-separated list")
    return [str(item).strip() for item in value if str(item).strip()]


class EventUpdate(BaseModel):
    """Fields an admin may change; anything left out stays as stored."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1)
    overview: Optional[str] = Field(default=None, min_length=1)
    venue: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = Field(default=None, min_length=1)
    date: Optional[dt.date] = None
    time: Optional[str] = Field(default=None, min_length=1)
    mode: Optional[EventMode] = None
    audience: Optional[str] = Field(default=None, min_length=1)
    organizer: Optional[str] = Field(default=None, min_length=1)
    tags: Optional[List[str]] = Field(default=None, min_length=1)
    agenda: Optional[List[str]] = Field(default=None, min_length=1)

    class Config:
        str_strip_whitespace = True
        extra = "ignore"

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, value):
        if isinstance(value, str):
            label = value.strip().lower()
            return MODE_ALIASES.get(label, label)
        return value

    @field_validator("tags", "agenda", mode="before")
    @classmethod
    def split_list(cls, value):
        return _as_list(value)


class EventCreate(EventUpdate):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    overview: str = Field(..., min_length=1)
    venue: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    date: dt.date
    time: str = Field(..., min_length=1)
    mode: EventMode
    audience: str = Field(..., min_length=1)
    organizer: str = Field(..., min_length=1)
    tags: List[str] = Field(..., min_length=1)
    agenda: List[str] = Field(..., min_length=1)


class EventPublic(BaseModel):
    id: str
    title: str
    slug: str
    description: str
    overview: str
    image: str
    venue: str
    location: str
    date: dt.date
    time: str
    mode: EventMode
    audience: str
    agenda: List[str]
    organizer: str
    tags: List[str]
    created_at: dt.datetime
    updated_at: dt.datetime

    class Config:
        title = "EventPublic"
        from_attributes = True
