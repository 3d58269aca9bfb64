from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
import logging

# Set up logging
logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(database_url: str):
    """Create the engine for the configured database."""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # In-memory SQLite must share one connection or every session sees an empty db
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)

    # For Neon.tech, ensure SSL is configured
    if "neon.tech" in database_url and "sslmode" not in database_url:
        database_url += "&sslmode=require" if "?" in database_url else "?sslmode=require"
        logger.info("Added sslmode=require to Neon database URL")

    return create_engine(
        database_url,
        pool_pre_ping=True,  # Auto-reconnect on broken connections
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,
    )


def build_session_factory(database_url: str) -> sessionmaker:
    engine = build_engine(database_url)
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(session_factory: sessionmaker) -> None:
    # Models must be imported so their tables are registered on Base
    from app import models  # noqa: F401

    Base.metadata.create_all(bind=session_factory.kw["bind"])
    logger.info("✅ Database tables ready")


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
