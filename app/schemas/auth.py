"""Request payloads accepted by ``POST /auth``.

The body is ``{"action": ..., ...fields}``; ``action`` selects one member of
the ``AuthAction`` union, so an unknown action or a payload missing the fields
of its action is rejected before any operation runs.
"""
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, EmailStr, Field, TypeAdapter, field_validator

from app.models.admin import MIN_PASSWORD_LENGTH


class _ActionPayload(BaseModel):
    class Config:
        populate_by_name = True
        str_strip_whitespace = True


class SignUpRequest(_ActionPayload):
    action: Literal["signup"]
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    name: str = Field(min_length=1)


class SignInRequest(_ActionPayload):
    action: Literal["signin"]
    email: EmailStr
    password: str = Field(min_length=1)


class VerifyOTPRequest(_ActionPayload):
    action: Literal["verify-otp"]
    email: EmailStr
    otp: str = Field(min_length=1)


class GoogleSignInRequest(_ActionPayload):
    action: Literal["google-signin"]
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    google_id: Optional[str] = Field(default=None, alias="googleId")
    avatar: Optional[str] = None
    access_token: Optional[str] = Field(default=None, alias="accessToken")

    @field_validator("name", "google_id", "avatar", "access_token")
    @classmethod
    def blank_to_none(cls, v):
        return v or None


class SignOutRequest(_ActionPayload):
    action: Literal["signout"]


class ResendOTPRequest(_ActionPayload):
    action: Literal["resend-otp"]
    email: EmailStr


AuthAction = Annotated[
    Union[
        SignUpRequest,
        SignInRequest,
        VerifyOTPRequest,
        GoogleSignInRequest,
        SignOutRequest,
        ResendOTPRequest,
    ],
    Field(discriminator="action"),
]

auth_action_adapter = TypeAdapter(AuthAction)

# pydantic error types raised when the discriminator itself is missing or unknown
ACTION_ERROR_TYPES = {"union_tag_invalid", "union_tag_not_found"}
