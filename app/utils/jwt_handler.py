# app/utils/jwt_handler.py
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from fastapi import Response
from jose import JWTError, jwt
from pydantic import ValidationError

from app.config import Settings
from app.schemas.token import SessionPayload
from app.utils.exceptions import InvalidOrExpired

logger = logging.getLogger(__name__)


class SessionIssuer:
    """
    Mints and verifies admin session tokens and manages the session cookie.
    """

    def __init__(self, settings: Settings):
        self.secret_key = settings.SECRET_KEY
        self.algorithm = settings.ALGORITHM
        self.lifetime = timedelta(days=settings.SESSION_EXPIRE_DAYS)
        self.cookie_name = settings.SESSION_COOKIE_NAME
        self.cookie_secure = settings.is_production

    def mint(self, admin_id: str, email: str, role: str, now: Optional[datetime] = None) -> str:
        """
        Create a signed token embedding {id, email, role} valid for the session lifetime
        """
        issued_at = now or datetime.now(timezone.utc)
        to_encode = {
            "id": admin_id,
            "email": email,
            "role": role,
            "iat": issued_at,
            "exp": issued_at + self.lifetime,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> SessionPayload:
        """
        Verify signature and expiry, returning the embedded payload
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            return SessionPayload(**payload)
        except (JWTError, ValidationError) as e:
            logger.warning(f"Session token rejected: {str(e)}")
            raise InvalidOrExpired()

    # -------------------- COOKIE --------------------
    @property
    def max_age(self) -> int:
        return int(self.lifetime.total_seconds())

    def set_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=token,
            max_age=self.max_age,
            path="/",
            httponly=True,
            secure=self.cookie_secure,
            samesite="lax",
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(
            key=self.cookie_name,
            path="/",
            httponly=True,
            secure=self.cookie_secure,
            samesite="lax",
        )
