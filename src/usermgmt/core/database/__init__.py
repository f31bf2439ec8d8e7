"""Database layer - session management, base models, and mixins."""

from usermgmt.core.database.base import Base, IntegerIDMixin, TenantMixin, TimestampMixin
from usermgmt.core.database.session import (
    async_engine,
    async_session_factory,
    build_engine,
    build_session_factory,
    get_db,
)


__all__ = [
    "Base",
    "IntegerIDMixin",
    "TenantMixin",
    "TimestampMixin",
    "async_engine",
    "async_session_factory",
    "build_engine",
    "build_session_factory",
    "get_db",
]
