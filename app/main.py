from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import Settings, get_settings
from app.database import build_session_factory, init_db
from app.routes import auth_router, events_router, health_router
from app.services.email_service import EmailService
from app.services.google_auth import GoogleIdentityVerifier
from app.services.image_store import CloudinaryImageStore
from app.utils.exceptions import AuthError, EventError
from app.utils.jwt_handler import SessionIssuer

# Enable logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around one explicit settings object."""
    settings = settings or get_settings()

    app = FastAPI(title="DevSphere Backend", debug=settings.DEBUG)

    # Collaborators shared by every request
    app.state.settings = settings
    app.state.session_factory = build_session_factory(settings.DATABASE_URL)
    app.state.sessions = SessionIssuer(settings)
    app.state.email_service = EmailService(settings)
    app.state.google_verifier = GoogleIdentityVerifier(settings)
    app.state.image_store = CloudinaryImageStore(settings)

    if not settings.is_production and settings.SECRET_KEY == Settings.model_fields["SECRET_KEY"].default:
        logger.warning("⚠️ Using the default SECRET_KEY; set SECRET_KEY before deploying")

    # Cookies are only sent cross-origin with credentials, so origins must be explicit
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=600
    )

    for router in (auth_router, events_router, health_router):
        app.include_router(router)
        logger.info(f"Included router: {router.prefix}")

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "status": "ok",
            "message": "Welcome to the DevSphere Backend API",
            "version": "1.0.0",
            "docs": "/docs",
            "endpoints": [
                "POST /auth - Admin authentication actions",
                "GET /auth - Current admin",
                "/api/events - Event catalogue",
                "/api/health - System health check"
            ]
        }

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        return JSONResponse(status_code=401, content={"success": False, "message": exc.message})

    @app.exception_handler(EventError)
    async def event_error_handler(request: Request, exc: EventError):
        content = {"success": False, "message": exc.message}
        if exc.errors:
            content["errors"] = exc.errors
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.error(f"Internal server error: {exc}")
        return JSONResponse(status_code=500, content={"success": False, "message": "Internal server error"})

    @app.on_event("startup")
    async def startup_event():
        logger.info("🚀 DevSphere Backend starting up...")
        init_db(app.state.session_factory)
        logger.info(f"🌐 CORS enabled for origins: {settings.CORS_ORIGINS}")
        logger.info("✅ Server is ready to handle requests")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("🛑 DevSphere Backend shutting down...")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
        log_level="info"
    )
