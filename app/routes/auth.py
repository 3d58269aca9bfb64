# app/routes/auth.py
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.schemas.admin import AuthResult
from app.schemas.auth import (
    ACTION_ERROR_TYPES,
    GoogleSignInRequest,
    ResendOTPRequest,
    SignInRequest,
    SignOutRequest,
    SignUpRequest,
    VerifyOTPRequest,
    auth_action_adapter,
)
from app.services.auth_service import AuthService
from app.services.email_service import EmailOutbox

router = APIRouter(
    prefix="/auth",
    tags=["Admin Authentication"]
)

logger = logging.getLogger(__name__)


def get_auth_service(
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
) -> AuthService:
    state = request.app.state
    return AuthService(
        db=db,
        sessions=state.sessions,
        outbox=EmailOutbox(state.email_service, background_tasks),
        google=state.google_verifier,
        otp_minutes=state.settings.OTP_EXPIRE_MINUTES,
    )


def _failure(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def dispatch(action, service: AuthService) -> AuthResult:
    if isinstance(action, SignUpRequest):
        return service.sign_up(action.email, action.password, action.name)
    if isinstance(action, SignInRequest):
        return service.sign_in(action.email, action.password)
    if isinstance(action, VerifyOTPRequest):
        return service.verify_otp(action.email, action.otp)
    if isinstance(action, GoogleSignInRequest):
        return service.sign_in_with_google(
            email=action.email,
            name=action.name,
            google_id=action.google_id,
            avatar=action.avatar,
            access_token=action.access_token,
        )
    if isinstance(action, SignOutRequest):
        return service.sign_out()
    if isinstance(action, ResendOTPRequest):
        return service.resend_otp(action.email)
    raise TypeError(f"Unhandled auth action: {type(action).__name__}")


@router.post("")
async def auth_action(request: Request, service: AuthService = Depends(get_auth_service)):
    """Run one authentication action selected by the body's ``action`` field"""
    try:
        body = await request.json()
    except ValueError:
        return _failure("Invalid request", 400)

    try:
        action = auth_action_adapter.validate_python(body)
    except ValidationError as e:
        if any(err["type"] in ACTION_ERROR_TYPES for err in e.errors()):
            return _failure("Invalid action", 400)
        logger.info(f"Rejected malformed auth payload: {e.error_count()} error(s)")
        return _failure("Invalid request", 400)

    try:
        result = await run_in_threadpool(dispatch, action, service)
    except Exception as e:
        service.db.rollback()
        logger.error(f"Auth API error: {str(e)}")
        return _failure("Authentication failed", 500)

    response = JSONResponse(status_code=200, content=result.to_response())
    sessions = request.app.state.sessions
    if result.session_token:
        sessions.set_cookie(response, result.session_token)
    elif isinstance(action, SignOutRequest):
        sessions.clear_cookie(response)
    return response


@router.get("")
def current_admin(request: Request, service: AuthService = Depends(get_auth_service)):
    """Return the admin identified by the session cookie"""
    token = request.cookies.get(request.app.state.sessions.cookie_name)
    try:
        result = service.get_current_admin(token)
    except Exception as e:
        logger.error(f"Failed to get admin: {str(e)}")
        return _failure("Failed to get admin", 500)

    return JSONResponse(status_code=200 if result.success else 401, content=result.to_response())
