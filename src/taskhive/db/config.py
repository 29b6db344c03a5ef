"""Database configuration and session management."""

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from taskhive.config.settings import Settings, get_settings

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def create_engine_for(settings: Settings) -> AsyncEngine:
    """Create an async engine for the configured database.

    Pool sizing only applies to server databases; SQLite uses its own pool.
    """
    if settings.is_sqlite:
        engine = create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG)
        use_immediate_transactions(engine)
        return engine

    if settings.ENVIRONMENT == "test":
        return create_async_engine(
            settings.DATABASE_URL, echo=settings.DEBUG, poolclass=NullPool
        )

    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_pre_ping=True,
    )


def _disable_driver_transactions(dbapi_connection, connection_record) -> None:
    dbapi_connection.isolation_level = None


def _begin_immediate(conn) -> None:
    conn.exec_driver_sql("BEGIN IMMEDIATE")


def use_immediate_transactions(engine: AsyncEngine) -> None:
    """Start every transaction on a SQLite engine with ``BEGIN IMMEDIATE``.

    SQLite ignores ``FOR UPDATE``. Taking the write lock when the
    transaction begins serializes quota checks with the inserts they guard.
    The driver's own transaction handling is switched off so SQLAlchemy
    emits BEGIN itself.
    """
    event.listen(engine.sync_engine, "connect", _disable_driver_transactions)
    event.listen(engine.sync_engine, "begin", _begin_immediate)


def get_engine() -> AsyncEngine:
    """Get the process-wide engine, creating it on first use."""
    global _engine, _session_factory
    if _engine is None:
        _engine = create_engine_for(get_settings())
        _session_factory = async_sessionmaker(
            _engine, class_=AsyncSession, expire_on_commit=False
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    get_engine()
    assert _session_factory is not None
    return _session_factory


async def init_db(create_schema: bool = False) -> None:
    """Verify connectivity and optionally create tables from ORM metadata.

    Called during application startup so the pool is ready before
    accepting requests.
    """
    from taskhive.db.models import Base

    async with get_engine().begin() as conn:
        await conn.execute(text("SELECT 1"))
        if create_schema:
            await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections gracefully."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None

