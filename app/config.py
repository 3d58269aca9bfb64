from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # === DATABASE ===
    DATABASE_URL: str = Field(default="sqlite:///./devsphere.db", description="SQLAlchemy database URL")

    # === JWT SESSION ===
    SECRET_KEY: str = Field(default="your-secret-key-change-in-production", description="Secret key for JWT token signing")
    ALGORITHM: str = Field(default="HS256", description="JWT algorithm")
    SESSION_EXPIRE_DAYS: int = Field(default=7, description="Session token lifetime in days")
    SESSION_COOKIE_NAME: str = Field(default="admin-token", description="Name of the session cookie")

    # === OTP ===
    OTP_EXPIRE_MINUTES: int = Field(default=10, description="OTP validity window in minutes")

    # === EMAIL ===
    EMAIL_HOST: str = Field(default="", description="SMTP host")
    EMAIL_PORT: int = Field(default=587, description="SMTP port")
    EMAIL_HOST_USER: str = Field(default="", description="SMTP username")
    EMAIL_HOST_PASSWORD: str = Field(default="", description="SMTP password")
    EMAIL_FROM: str = Field(default="onboarding@devsphere.dev", description="Email sender address")
    EMAIL_FROM_NAME: str = Field(default="DevSphere", description="Email sender display name")
    EMAIL_USE_SSL: bool = Field(default=False, description="Use implicit SSL instead of STARTTLS")

    # === GOOGLE ===
    GOOGLE_CLIENT_ID: str = Field(default="", description="OAuth client id used to check token audience")
    GOOGLE_REQUIRE_ACCESS_TOKEN: bool = Field(default=False, description="Reject Google sign-in without a verifiable access token")

    # === CLOUDINARY ===
    CLOUDINARY_CLOUD_NAME: str = Field(default="", description="Cloudinary cloud name for event images")
    CLOUDINARY_API_KEY: str = Field(default="", description="Cloudinary API key")
    CLOUDINARY_API_SECRET: str = Field(default="", description="Cloudinary API secret")
    CLOUDINARY_FOLDER: str = Field(default="dev-events", description="Folder that holds event images")

    # === APP ===
    APP_BASE_URL: str = Field(default="http://localhost:3000", description="Public URL of the admin frontend")
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Origins allowed to send credentialed requests",
    )
    ENVIRONMENT: str = Field(default="development", description="development | production")

    # === DEBUG MODE ===
    DEBUG: bool = Field(default=False, description="Debug mode")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Build the settings once per process."""
    return Settings()
