# app/models/__init__.py

from .admin import Admin, AdminRole
from .event import Event, EventMode, EventTag

__all__ = ["Admin", "AdminRole", "Event", "EventMode", "EventTag"]
