from pathlib import Path
import logging

from fastapi import BackgroundTasks
from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.config import Settings

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"

env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)


class EmailService:
    """Renders and sends transactional admin emails over SMTP. One attempt per message."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._conf = None

    def _connection(self) -> ConnectionConfig:
        # Built on first send so a missing SMTP setup only fails delivery, not startup
        if self._conf is None:
            s = self.settings
            self._conf = ConnectionConfig(
                MAIL_USERNAME=s.EMAIL_HOST_USER,
                MAIL_PASSWORD=s.EMAIL_HOST_PASSWORD,
                MAIL_FROM=s.EMAIL_FROM,
                MAIL_FROM_NAME=s.EMAIL_FROM_NAME,
                MAIL_PORT=s.EMAIL_PORT,
                MAIL_SERVER=s.EMAIL_HOST,
                MAIL_STARTTLS=not s.EMAIL_USE_SSL,
                MAIL_SSL_TLS=s.EMAIL_USE_SSL,
                USE_CREDENTIALS=bool(s.EMAIL_HOST_USER),
                VALIDATE_CERTS=True,
            )
        return self._conf

    async def _send(self, to_email: str, subject: str, html: str) -> None:
        message = MessageSchema(
            subject=subject,
            recipients=[to_email],
            body=html,
            subtype=MessageType.html,
        )
        await FastMail(self._connection()).send_message(message)
        logger.info(f"{subject} email sent to {to_email}")

    # 🔑 OTP email
    async def send_otp_email(self, to_email: str, name: str, otp: str) -> None:
        html = env.get_template("otp.html").render(
            name=name,
            otp=otp,
            expires_in=self.settings.OTP_EXPIRE_MINUTES,
            brand=self.settings.EMAIL_FROM_NAME,
        )
        await self._send(to_email, f"Verify Your {self.settings.EMAIL_FROM_NAME} Admin Account", html)

    # 🎉 Welcome email
    async def send_welcome_email(self, to_email: str, name: str) -> None:
        html = env.get_template("welcome.html").render(
            name=name,
            dashboard_url=f"{self.settings.APP_BASE_URL.rstrip('/')}/admin/dashboard",
            brand=self.settings.EMAIL_FROM_NAME,
        )
        await self._send(to_email, f"Welcome to {self.settings.EMAIL_FROM_NAME} Admin Panel!", html)


async def _deliver(send, purpose: str, to_email: str, *args) -> None:
    try:
        await send(to_email, *args)
    except Exception as e:
        logger.error(f"Failed to send {purpose} email to {to_email}: {str(e)}")


class EmailOutbox:
    """
    Fire-and-forget front of the email service for one request.

    Each method returns immediately after scheduling a background task;
    delivery failures only reach the log.
    """

    def __init__(self, service: EmailService, background_tasks: BackgroundTasks):
        self.service = service
        self.background_tasks = background_tasks

    def send_otp(self, to_email: str, name: str, otp: str) -> None:
        self.background_tasks.add_task(_deliver, self.service.send_otp_email, "OTP", to_email, name, otp)

    def send_welcome(self, to_email: str, name: str) -> None:
        self.background_tasks.add_task(_deliver, self.service.send_welcome_email, "welcome", to_email, name)
