"""
Admin authentication flow: sign-up, sign-in, OTP email verification,
Google sign-in, session lookup and sign-out.

Every public operation returns an ``AuthResult``. Expected failures are
raised internally as ``AuthError`` subclasses and reported through the result;
database errors propagate to the caller.
"""
from datetime import datetime
from typing import Callable, Optional
import functools
import logging
import secrets

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, undefer

from app.models.admin import Admin, AdminRole, normalize_email
from app.schemas.admin import AdminPublic, AuthResult
from app.services.email_service import EmailOutbox
from app.services.google_auth import GoogleIdentityVerifier
from app.utils.exceptions import (
    AlreadyVerified,
    AuthError,
    Conflict,
    Expired,
    InvalidCredentials,
    InvalidInput,
    Mismatch,
    NoOtpPending,
    NotFound,
    Unauthenticated,
)
from app.utils.hash import dummy_verify
from app.utils.jwt_handler import SessionIssuer
from app.utils.clock import utcnow
from app.utils.otp import OTP_EXPIRE_MINUTES, generate_otp, is_otp_expired, issue_otp

logger = logging.getLogger(__name__)


def _reported(operation):
    @functools.wraps(operation)
    def wrapper(self, *args, **kwargs):
        try:
            return operation(self, *args, **kwargs)
        except AuthError as e:
            logger.warning(f"{operation.__name__} rejected: {e.code} ({e.message})")
            return AuthResult(success=False, message=e.message, code=e.code)
    return wrapper


class AuthService:
    def __init__(
        self,
        db: Session,
        sessions: SessionIssuer,
        outbox: EmailOutbox,
        google: Optional[GoogleIdentityVerifier] = None,
        clock: Callable[[], datetime] = utcnow,
        otp_minutes: int = OTP_EXPIRE_MINUTES,
    ):
        self.db = db
        self.sessions = sessions
        self.outbox = outbox
        self.google = google
        self.clock = clock
        self.otp_minutes = otp_minutes

    # ------------------ Helpers ------------------

    def _find(self, email: str, *sensitive) -> Optional[Admin]:
        query = (
            self.db.query(Admin)
            .options(*[undefer(column) for column in sensitive])
            .execution_options(populate_existing=True)
        )
        return query.filter(Admin.email == normalize_email(email)).first()

    def _find_by_google_id(self, google_id: str) -> Optional[Admin]:
        return self.db.query(Admin).filter(Admin.google_id == google_id).first()

    def _commit(self, conflict_message: str = None) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise Conflict(conflict_message)

    def _issue_otp(self, admin: Admin) -> str:
        """Store a fresh code on the admin, never repeating the one it replaces."""
        previous = admin.otp
        code, expiry = issue_otp(self.clock(), self.otp_minutes)
        while code == previous:
            code = generate_otp()
        admin.set_otp(code, expiry)
        self.db.commit()
        return code

    def _session_result(self, admin: Admin, message: str) -> AuthResult:
        token = self.sessions.mint(admin.id, admin.email, AdminRole(admin.role).value)
        return AuthResult(
            success=True,
            message=message,
            admin=AdminPublic.model_validate(admin),
            session_token=token,
        )

    # ------------------ Operations ------------------

    @_reported
    def sign_up(self, email: str, password: str, name: str) -> AuthResult:
        if self._find(email) is not None:
            raise Conflict()

        try:
            admin = Admin(email=email, name=name, role=AdminRole.admin, is_email_verified=False)
            admin.password = password
        except ValueError as e:
            raise InvalidInput(str(e))

        code, expiry = issue_otp(self.clock(), self.otp_minutes)
        admin.set_otp(code, expiry)
        self.db.add(admin)
        # A concurrent sign-up for the same email loses on the unique index
        self._commit()
        logger.info(f"Admin created: {admin.id}")

        self.outbox.send_otp(admin.email, admin.name, code)
        return AuthResult(
            success=True,
            message="Admin created. Please check your email for the verification code.",
            requires_otp=True,
        )

    @_reported
    def sign_in(self, email: str, password: str) -> AuthResult:
        admin = self._find(email, Admin.hashed_password, Admin.otp)
        if admin is None or not admin.hashed_password:
            dummy_verify()
            raise InvalidCredentials()
        if not admin.check_password(password):
            raise InvalidCredentials()

        if not admin.is_email_verified:
            code = self._issue_otp(admin)
            self.outbox.send_otp(admin.email, admin.name, code)
            logger.info(f"Sign in for unverified admin {admin.email}, OTP reissued")
            return AuthResult(
                success=False,
                message="Please verify your email. Check your inbox for the verification code.",
                requires_otp=True,
            )

        logger.info(f"Admin signed in: {admin.email}")
        return self._session_result(admin, "Sign in successful")

    @_reported
    def verify_otp(self, email: str, otp: str) -> AuthResult:
        admin = self._find(email, Admin.otp, Admin.otp_expiry)
        if admin is None:
            raise NotFound()
        if not admin.otp or not admin.otp_expiry:
            raise NoOtpPending()
        if is_otp_expired(admin.otp_expiry, self.clock()):
            raise Expired()
        if not secrets.compare_digest(admin.otp.encode(), (otp or "").strip().encode()):
            raise Mismatch()

        # Consume only the code we just checked; a concurrent resend or verify wins otherwise
        consumed = (
            self.db.query(Admin)
            .filter(Admin.id == admin.id, Admin.otp == admin.otp)
            .update(
                {Admin.otp: None, Admin.otp_expiry: None, Admin.is_email_verified: True},
                synchronize_session=False,
            )
        )
        self.db.commit()
        if not consumed:
            current = self._find(email, Admin.otp)
            if current is None:
                raise NotFound()
            if not current.otp:
                raise NoOtpPending()
            raise Mismatch()

        self.db.refresh(admin)
        logger.info(f"Email verified for admin {admin.email}")
        self.outbox.send_welcome(admin.email, admin.name)
        return self._session_result(admin, "Email verified successfully")

    @_reported
    def sign_in_with_google(
        self,
        email: Optional[str] = None,
        name: Optional[str] = None,
        google_id: Optional[str] = None,
        avatar: Optional[str] = None,
        access_token: Optional[str] = None,
    ) -> AuthResult:
        if access_token:
            if self.google is None:
                raise InvalidCredentials("Google sign in failed")
            info = self.google.resolve(access_token)
            email, name, google_id, avatar = info.email, info.name, info.sub, info.picture
        elif self.google is not None and self.google.require_token:
            raise InvalidCredentials("Google sign in failed")

        if not email or not google_id:
            raise InvalidInput("Email and Google account id are required")

        admin = self._find(email)
        if admin is None:
            if self._find_by_google_id(google_id) is not None:
                raise Conflict("Google account already linked to another admin")
            try:
                admin = Admin(
                    email=email,
                    name=name or normalize_email(email).split("@")[0],
                    google_id=google_id,
                    avatar=avatar,
                    is_email_verified=True,
                    role=AdminRole.admin,
                )
            except ValueError as e:
                raise InvalidInput(str(e))
            self.db.add(admin)
            try:
                self.db.commit()
                logger.info(f"Admin created from Google sign in: {admin.id}")
            except IntegrityError:
                # Lost a race with another first sign-in for the same account
                self.db.rollback()
                admin = self._find(email)
                if admin is None or admin.google_id != google_id:
                    raise Conflict("Google account already linked to another admin")
        elif not admin.google_id:
            owner = self._find_by_google_id(google_id)
            if owner is not None and owner.id != admin.id:
                raise Conflict("Google account already linked to another admin")
            admin.google_id = google_id
            admin.is_email_verified = True
            admin.clear_otp()
            if avatar:
                admin.avatar = avatar
            self._commit("Google account already linked to another admin")
            logger.info(f"Google account linked to admin {admin.email}")
        elif admin.google_id != google_id:
            logger.warning(f"Google id mismatch for already linked admin {admin.email}")

        return self._session_result(admin, "Google sign in successful")

    @_reported
    def resend_otp(self, email: str) -> AuthResult:
        admin = self._find(email, Admin.otp)
        if admin is None:
            raise NotFound()
        if admin.is_email_verified:
            raise AlreadyVerified()

        code = self._issue_otp(admin)
        self.outbox.send_otp(admin.email, admin.name, code)
        return AuthResult(success=True, message="Verification code sent to your email", requires_otp=True)

    @_reported
    def get_current_admin(self, token: Optional[str]) -> AuthResult:
        if not token:
            raise Unauthenticated()

        payload = self.sessions.verify(token)
        admin = self.db.get(Admin, payload.id, populate_existing=True)
        if admin is None:
            raise NotFound()

        return AuthResult(success=True, message="Authenticated", admin=AdminPublic.model_validate(admin))

    def sign_out(self) -> AuthResult:
        return AuthResult(success=True, message="Signed out successfully")
