# app/utils/otp.py
from datetime import datetime, timedelta
from typing import Optional, Tuple
import secrets

from app.utils.clock import utcnow

OTP_EXPIRE_MINUTES = 10
OTP_MIN = 100000
OTP_MAX = 999999


# -------------------- OTP GENERATOR --------------------
def generate_otp() -> str:
    """Uniformly random 6-digit code; the first digit is never zero."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


# -------------------- ISSUE --------------------
def issue_otp(now: Optional[datetime] = None, minutes: int = OTP_EXPIRE_MINUTES) -> Tuple[str, datetime]:
    """Return a fresh code and the instant it stops being accepted."""
    now = now or utcnow()
    return generate_otp(), now + timedelta(minutes=minutes)


# -------------------- EXPIRY --------------------
def is_otp_expired(expiry: datetime, now: Optional[datetime] = None) -> bool:
    # The expiry instant itself is still inside the window
    now = now or utcnow()
    return now > expiry
