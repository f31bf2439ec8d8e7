"""Async database engine and session management."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from usermgmt.config import settings


def enable_sqlite_transactions(engine: AsyncEngine) -> None:
    """Make SQLite honour SAVEPOINT and foreign keys.

    The sqlite3 driver normally decides on its own when to emit BEGIN,
    which breaks nested transactions. Here the driver's transaction
    handling is switched off and SQLAlchemy emits BEGIN itself.

    Transactions start with BEGIN IMMEDIATE, so writers queue on the busy
    timeout rather than failing to upgrade a read lock, and an existence
    check sees every row committed before it.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, _connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str, **kwargs: Any) -> AsyncEngine:
    """Create an async engine for ``url``.

    Pool sizing from settings only applies to server databases; SQLite
    gets its transaction hooks installed instead.

    Args:
        url: Driver-qualified database URL
        **kwargs: Extra arguments passed to ``create_async_engine``

    Returns:
        The configured engine
    """
    # Bound values include credential hashes; keep them out of error text
    options: dict[str, Any] = {
        "echo": settings.database_echo,
        "hide_parameters": True,
    }
    is_sqlite = make_url(url).get_backend_name() == "sqlite"

    if is_sqlite:
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,  # Verify connections before use
        )
    options.update(kwargs)

    engine = create_async_engine(url, **options)
    if is_sqlite:
        enable_sqlite_transactions(engine)
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory used for request and script sessions."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async_engine = build_engine(settings.async_database_url)
async_session_factory = build_session_factory(async_engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session.

    The session is committed when the request succeeds and rolled back on
    error. A cancelled request never reaches the commit; closing the
    session discards its open transaction.

    Usage:
        @router.get("/items")
        async def list_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
