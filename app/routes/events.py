# app/routes/events.py
from typing import Optional, Tuple
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from app.auth.dependencies import require_admin
from app.database import get_db
from app.models.admin import Admin
from app.models.event import EventMode
from app.schemas.event import EventCreate, EventPublic, EventUpdate
from app.services.event_service import EventService
from app.utils.exceptions import ImageRequired, InvalidEvent

router = APIRouter(
    prefix="/api/events",
    tags=["Events"]
)

logger = logging.getLogger(__name__)


def get_event_service(request: Request, db: Session = Depends(get_db)) -> EventService:
    return EventService(db=db, images=request.app.state.image_store)


def _public(event) -> dict:
    return EventPublic.model_validate(event).model_dump(mode="json")


async def _read_form(request: Request, model) -> Tuple[object, Optional[UploadFile]]:
    """Validate the multipart fields against ``model`` and pull out the image part."""
    form = await request.form()
    image = form.get("image")
    fields = {key: value for key, value in form.items() if key != "image"}
    try:
        data = model.model_validate(fields)
    except ValidationError as e:
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]) or "body", "message": err["msg"]}
            for err in e.errors()
        ]
        raise InvalidEvent(errors=errors)
    return data, image if isinstance(image, UploadFile) else None


@router.get("")
def list_events(
    mode: Optional[EventMode] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
    service: EventService = Depends(get_event_service),
):
    events = service.list_events(mode=mode, tag=tag, search=search)
    return {
        "success": True,
        "message": "Events fetched successfully",
        "count": len(events),
        "events": [_public(event) for event in events],
    }


@router.post("", status_code=201)
async def create_event(
    request: Request,
    admin: Admin = Depends(require_admin),
    service: EventService = Depends(get_event_service),
):
    data, image = await _read_form(request, EventCreate)
    content = await image.read() if image is not None else b""
    if not content:
        raise ImageRequired()

    event = await run_in_threadpool(service.create, data, content, image.filename or "image")
    logger.info(f"Event {event.slug} created by {admin.email}")
    return {"success": True, "message": "Event created successfully", "event": _public(event)}


@router.get("/{slug}")
def get_event(slug: str, service: EventService = Depends(get_event_service)):
    event = service.get_by_slug(slug)
    return {"success": True, "message": "Event fetched successfully", "event": _public(event)}


@router.get("/{slug}/similar")
def similar_events(slug: str, service: EventService = Depends(get_event_service)):
    events = service.similar_by_slug(slug)
    return {"success": True, "events": [_public(event) for event in events]}


@router.put("/{event_id}")
async def update_event(
    event_id: str,
    request: Request,
    admin: Admin = Depends(require_admin),
    service: EventService = Depends(get_event_service),
):
    data, image = await _read_form(request, EventUpdate)
    content = await image.read() if image is not None else b""

    event = await run_in_threadpool(service.update, event_id, data, content or None, image.filename if image else "")
    logger.info(f"Event {event.slug} updated by {admin.email}")
    return {"success": True, "message": "Event updated successfully", "event": _public(event)}


@router.delete("/{event_id}")
def delete_event(
    event_id: str,
    admin: Admin = Depends(require_admin),
    service: EventService = Depends(get_event_service),
):
    service.delete(event_id)
    logger.info(f"Event {event_id} deleted by {admin.email}")
    return {"success": True, "message": "Event deleted successfully"}
