"""Failure kinds reported by the admin authentication flow and the event catalogue"""


class AuthError(Exception):
    """Base exception for authentication failures.

    Carries a stable ``code`` for clients and a human readable message.
    """

    code = "AUTH_ERROR"
    default_message = "Authentication failed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Conflict(AuthError):
    """Email or Google account already bound to an admin"""
    code = "CONFLICT"
    default_message = "Email already registered"


class InvalidCredentials(AuthError):
    """Unknown email, password-less account or wrong password"""
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


class NotFound(AuthError):
    code = "NOT_FOUND"
    default_message = "Admin not found"


class NoOtpPending(AuthError):
    code = "NO_OTP_PENDING"
    default_message = "No OTP found. Please request a new one."


class Expired(AuthError):
    code = "OTP_EXPIRED"
    default_message = "OTP expired. Please request a new one."


class Mismatch(AuthError):
    code = "OTP_MISMATCH"
    default_message = "Invalid OTP"


class AlreadyVerified(AuthError):
    code = "ALREADY_VERIFIED"
    default_message = "Email already verified"


class Unauthenticated(AuthError):
    code = "UNAUTHENTICATED"
    default_message = "Not authenticated"


class InvalidOrExpired(AuthError):
    """Session token failed signature or expiry checks"""
    code = "INVALID_OR_EXPIRED"
    default_message = "Invalid or expired token"


class InvalidInput(AuthError):
    """Payload rejected by the admin record's own validation"""
    code = "INVALID_INPUT"
    default_message = "Invalid request"


class EventError(Exception):
    """Base exception for event requests; carries the HTTP status to answer with."""

    status_code = 400
    default_message = "Invalid event request"

    def __init__(self, message: str = None, errors: list = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class EventNotFound(EventError):
    status_code = 404
    default_message = "Event not found"


class InvalidSlug(EventError):
    default_message = "Invalid slug format"


class InvalidEvent(EventError):
    """Form fields rejected; ``errors`` lists each field and its message"""
    default_message = "Validation failed"


class ImageRequired(EventError):
    default_message = "Image file is required"


class DuplicateEvent(EventError):
    status_code = 409
    default_message = "Event with this title already exists"


class ImageUploadFailed(EventError):
    status_code = 502
    default_message = "Image upload failed"
