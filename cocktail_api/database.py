"""
Cocktail Catalog Backend: Database Session Management
=======================================================

What:  Async SQLAlchemy engine, session factory, FastAPI session dependency,
       and the translation of driver failures into application errors.
How:   The engine is created on first use from settings.database_url, so
       importing this module never needs a reachable (or configured) store.
Who:   Route handlers (via Depends(get_db_session)), services, health check,
       lifespan.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20, max_overflow=10, pool_pre_ping, pool_recycle=3600.
    SQLite (tests) uses SQLAlchemy's default pool without these options.

Error translation (store_errors):
    OperationalError / InterfaceError  → UpstreamDependencyError (store unreachable)
    IntegrityError                     → ConflictError (unique/foreign key violated)
    any other SQLAlchemyError          → DatabaseError
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import lru_cache
from typing import AsyncGenerator, Iterator

from sqlalchemy import DateTime, text
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from cocktail_api.config import settings
from cocktail_api.exceptions import (
    CocktailCatalogError,
    ConflictError,
    DatabaseError,
    UpstreamDependencyError,
)

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Engine & Session Factory ──────────────────────────────────────────────

@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    """Create (once) the async engine for settings.database_url."""
    options = {"echo": settings.log_level == "DEBUG"}
    if not settings.database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(settings.database_url, **options)


@lru_cache(maxsize=1)
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: attributes stay readable after commit
    # without a lazy reload outside the session context
    return async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)


# ── Base Model ────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    """Base class for all ORM models; its metadata drives Alembic."""
    pass


class TimestampMixin:
    """created_at / updated_at columns shared by every table (UTC)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )


# ── Session Dependency ────────────────────────────────────────────────────

async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back, then re-raises for the global handlers
        5. Always: closes the session (returns connection to pool)
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Error Translation ─────────────────────────────────────────────────────

@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """
    Translate driver failures raised inside the block into application errors.

    Usage:
        with store_errors("listing cocktails"):
            result = await db.execute(select(Cocktail))

    Application errors raised inside the block pass through untouched.
    """
    try:
        yield
    except CocktailCatalogError:
        raise
    except (OperationalError, InterfaceError) as e:
        logger.error("Store unreachable while %s: %s", action, str(e))
        raise UpstreamDependencyError(context={"action": action}) from e
    except IntegrityError as e:
        logger.warning("Integrity violation while %s: %s", action, str(e.orig))
        raise ConflictError(
            message=f"The change conflicts with an existing record ({action}).",
            context={"action": action},
        ) from e
    except SQLAlchemyError as e:
        logger.error("Database error while %s: %s", action, str(e), exc_info=True)
        raise DatabaseError(
            message=f"A database error occurred while {action}. Please try again later.",
            context={"action": action, "error_type": type(e).__name__},
        ) from e


# ── Lifecycle Helpers ─────────────────────────────────────────────────────

async def ping_database() -> None:
    """Run SELECT 1 against the store. Raises the driver's error on failure."""
    async with get_engine().connect() as conn:
        await conn.execute(text("SELECT 1"))


@retry(
    retry=retry_if_exception_type((OperationalError, InterfaceError, OSError)),
    stop=stop_after_attempt(settings.db_connect_attempts),
    wait=wait_exponential_jitter(initial=1, max=10, jitter=1),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def wait_for_database() -> None:
    """
    Ping the store at startup, retrying while it comes up (the API container
    can start before PostgreSQL accepts connections).
    """
    await ping_database()
    logger.info("Database connection verified")


async def dispose_engine() -> None:
    """Close all pooled connections. Called on shutdown."""
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
