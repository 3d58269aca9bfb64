from pydantic import BaseModel, Field
from typing import Optional

from app.models.admin import AdminRole


class AdminPublic(BaseModel):
    """Subset of an admin record that is safe to hand to a client."""
    id: str
    email: str
    name: str
    role: AdminRole
    avatar: Optional[str] = None

    class Config:
        title = "AdminPublic"
        from_attributes = True


class AuthResult(BaseModel):
    success: bool
    message: str = ""
    admin: Optional[AdminPublic] = None
    requires_otp: Optional[bool] = Field(default=None, serialization_alias="requiresOTP")
    code: Optional[str] = None

    # Handed to the HTTP layer for the cookie, never serialized
    session_token: Optional[str] = Field(default=None, exclude=True)

    class Config:
        title = "AuthResult"

    def to_response(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
