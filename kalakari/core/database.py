"""
Database connection (PostgreSQL in production, any SQLAlchemy URL accepted)

Centralizes engine, session factory, the FastAPI session dependency and the
retrying connectivity check used by /health.
"""
import logging
import time

from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import settings

logger = logging.getLogger(__name__)


# ============================================================================
# SQLAlchemy Configuration
# ============================================================================

def _engine_options(url: str) -> dict:
    """Pool options per backend (SQLite is used for local runs and tests)"""
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
        return options

    return {
        "pool_pre_ping": True,  # Verify connection before use
        "pool_size": 10,
        "max_overflow": 20,
    }


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

# Session Factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Declarative base for ORM models
Base = declarative_base()


def get_db():
    """
    FastAPI dependency yielding a SQLAlchemy session

    Usage:
        @router.get("/items")
        def read_items(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create all tables registered on Base (idempotent)"""
    # Importing the models registers their tables on Base.metadata
    from kalakari import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


# ============================================================================
# Connectivity check with retry
# ============================================================================

def check_database(max_retries: int = 3, retry_delay: float = 1.0) -> float:
    """
    Run `SELECT 1` with exponential backoff on connection failures

    Args:
        max_retries: Maximum number of attempts (default: 3)
        retry_delay: Initial delay between retries in seconds (default: 1.0)

    Returns:
        Query latency in milliseconds

    Raises:
        OperationalError: If all attempts fail
    """
    last_error = None

    for attempt in range(1, max_retries + 1):
        try:
            logger.debug(f"Database check attempt {attempt}/{max_retries}")
            start = time.time()
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return round((time.time() - start) * 1000, 2)

        except OperationalError as e:
            last_error = e
            logger.warning(f"Connection error on attempt {attempt}/{max_retries}: {e}")

            if attempt < max_retries:
                delay = retry_delay * (2 ** (attempt - 1))
                logger.info(f"Retrying in {delay:.2f} seconds...")
                time.sleep(delay)
            else:
                logger.error(f"All {max_retries} connection attempts failed")

    raise last_error
