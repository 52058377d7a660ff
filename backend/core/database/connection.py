"""
Database connection and session management.
"""
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.exc import OperationalError, DBAPIError
from typing import Generator, Optional
import logging
import time

from backend.core.config import get_settings

logger = logging.getLogger(__name__)

engine = None
SessionLocal = None


def _normalize_url(database_url: str) -> str:
    # Some hosts hand out postgres:// which SQLAlchemy no longer accepts
    if database_url.startswith('postgres://'):
        return database_url.replace('postgres://', 'postgresql://', 1)
    return database_url


def _engine_kwargs(database_url: str) -> dict:
    if database_url.startswith('sqlite'):
        return {
            'connect_args': {'check_same_thread': False},
            'echo': False,
        }

    settings = get_settings()
    return {
        'pool_pre_ping': True,  # Verify connections before using
        'pool_size': settings.database_pool_size,
        'max_overflow': settings.database_max_overflow,
        'pool_recycle': 3600,  # Recycle connections after 1 hour
        'echo': False,
        'connect_args': {'connect_timeout': 10},
    }


def init_db(database_url: Optional[str] = None, max_retries: int = 3, retry_delay: float = 1.0):
    """
    Initialize the database engine and session factory with retry logic.
    Call this once at application startup.

    Args:
        database_url: Override for settings.database_url
        max_retries: Number of connection attempts
        retry_delay: Seconds to wait between retries

    Raises:
        RuntimeError: If connection fails after all retries
    """
    global engine, SessionLocal

    database_url = _normalize_url(database_url or get_settings().database_url)

    for attempt in range(max_retries):
        try:
            engine = create_engine(database_url, **_engine_kwargs(database_url))

            # Test connection
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))

            SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

            logger.info(f"Database initialized: {database_url.split('@')[1] if '@' in database_url else 'local'}")
            return

        except (OperationalError, DBAPIError) as e:
            logger.warning(f"Database connection attempt {attempt + 1}/{max_retries} failed: {e}")
            if attempt < max_retries - 1:
                time.sleep(retry_delay * (attempt + 1))
            else:
                logger.error(f"Database initialization failed after {max_retries} attempts")
                raise RuntimeError(f"Failed to connect to database: {e}") from e


def get_db() -> Generator[Session, None, None]:
    """
    Get a database session (FastAPI dependency).

    Usage:
        from fastapi import Depends
        from backend.core.database import get_db

        @app.get("/messages")
        async def list_messages(db: Session = Depends(get_db)):
            return db.query(Message).all()
    """
    if not SessionLocal:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    db = SessionLocal()
    try:
        yield db
    except (OperationalError, DBAPIError) as e:
        logger.error(f"Database session error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def create_tables():
    """
    Create all tables in the database.
    """
    if not engine:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    from .models import Base
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")
