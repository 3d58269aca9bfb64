# app/schemas/__init__.py
from .admin import AdminPublic, AuthResult
from .auth import (
    AuthAction,
    GoogleSignInRequest,
    ResendOTPRequest,
    SignInRequest,
    SignOutRequest,
    SignUpRequest,
    VerifyOTPRequest,
)
from .token import SessionPayload

__all__ = [
    "AdminPublic",
    "AuthResult",
    "AuthAction",
    "GoogleSignInRequest",
    "ResendOTPRequest",
    "SignInRequest",
    "SignOutRequest",
    "SignUpRequest",
    "VerifyOTPRequest",
    "SessionPayload",
]
