# app/auth/dependencies.py
from fastapi import Depends, Request
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.models.admin import Admin
from app.utils.exceptions import Unauthenticated

logger = logging.getLogger(__name__)


def require_admin(request: Request, db: Session = Depends(get_db)) -> Admin:
    """Admin behind the session cookie; anything else is answered with 401."""
    sessions = request.app.state.sessions
    token = request.cookies.get(sessions.cookie_name)
    if not token:
        raise Unauthenticated()

    payload = sessions.verify(token)
    admin = db.get(Admin, payload.id)
    if admin is None:
        logger.warning(f"Session for missing admin {payload.id} rejected")
        raise Unauthenticated("Admin not found")
    return admin
