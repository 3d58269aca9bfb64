# app/models/admin.py
from datetime import datetime
import enum
import re
import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Enum, String
from sqlalchemy.orm import deferred, validates

from app.database import Base
from app.utils.hash import hash_password, verify_password
from app.utils.clock import utcnow

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)
MIN_PASSWORD_LENGTH = 8


class AdminRole(str, enum.Enum):
    admin = "admin"
    superadmin = "superadmin"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class Admin(Base):
    __tablename__ = "admins"
    __table_args__ = (
        CheckConstraint(
            "(otp IS NULL AND otp_expiry IS NULL) OR (otp IS NOT NULL AND otp_expiry IS NOT NULL)",
            name="ck_admins_otp_pair",
        ),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    avatar = Column(String, nullable=True)
    role = Column(Enum(AdminRole, name="admin_role"), default=AdminRole.admin, nullable=False)
    google_id = Column(String, unique=True, index=True, nullable=True)
    is_email_verified = Column(Boolean, default=False, nullable=False)

    # Sensitive columns are only loaded when a query asks for them with undefer()
    hashed_password = deferred(Column(String, nullable=True))
    otp = deferred(Column(String(6), nullable=True))
    otp_expiry = deferred(Column(DateTime, nullable=True))

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    @validates("email")
    def validate_email(self, key, value):
        email = normalize_email(value)
        if not EMAIL_PATTERN.match(email):
            raise ValueError("Please provide a valid email address")
        return email

    @validates("name")
    def validate_name(self, key, value):
        name = (value or "").strip()
        if not name:
            raise ValueError("Name is required")
        return name

    @property
    def password(self):
        raise AttributeError("password is write-only")

    @password.setter
    def password(self, plain: str):
        if plain is None or len(plain) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        self.hashed_password = hash_password(plain)

    def check_password(self, candidate: str) -> bool:
        return verify_password(candidate, self.hashed_password)

    def set_otp(self, code: str, expiry: datetime) -> None:
        self.otp = code
        self.otp_expiry = expiry

    def clear_otp(self) -> None:
        self.otp = None
        self.otp_expiry = None

    def __repr__(self):
        return f"<Admin email={self.email} role={self.role}>"
