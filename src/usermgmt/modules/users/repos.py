"""User repository for database operations.

Every query is scoped to a tenant. Writes run inside a savepoint so that a
unique-constraint violation only undoes the failed statement; it is then
reported as ``DuplicateUserError`` for the colliding field. The constraints
are the authoritative uniqueness guarantee, the service's existence checks
only decide which message the caller sees first.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Annotated, Any

from fastapi import Depends
from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from usermgmt.api.dependencies import DBSession
from usermgmt.core.errors import DuplicateUserError, InternalFailureError
from usermgmt.modules.users.models import User


# How each unique field shows up in a violation message: the constraint
# name (PostgreSQL) or the table-qualified column (SQLite)
_UNIQUE_MARKERS = {
    "username": ("uq_users_tenant_id_username", "users.username"),
    "email": ("uq_users_tenant_id_email", "users.email"),
}


def _duplicate_field(exc: IntegrityError) -> str | None:
    """Return which unique field an integrity error collided on, if any.

    Only the first line of the driver message is inspected; PostgreSQL puts
    the offending values on a DETAIL line, and those may contain any text.
    """
    lines = str(exc.orig).splitlines()
    headline = lines[0] if lines else ""
    for field, markers in _UNIQUE_MARKERS.items():
        if any(marker in headline for marker in markers):
            return field
    return None


@asynccontextmanager
async def _store_failures() -> AsyncIterator[None]:
    """Translate database errors into domain errors."""
    try:
        yield
    except IntegrityError as exc:
        field = _duplicate_field(exc)
        if field is None:
            raise InternalFailureError("User could not be saved") from exc
        raise DuplicateUserError(field) from exc
    except SQLAlchemyError as exc:
        raise InternalFailureError("User store is unavailable") from exc


class UserRepository:
    """Repository for User database operations.

    Handles all database interactions for the User model.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, user: User) -> User:
        """Insert a new user.

        Args:
            user: User instance to create

        Returns:
            The created user with ID populated

        Raises:
            DuplicateUserError: If username or email is taken in the tenant
            InternalFailureError: If the store fails
        """
        async with _store_failures():
            async with self.session.begin_nested():
                self.session.add(user)
        return user

    async def get_by_id(self, user_id: int, tenant_id: int) -> User | None:
        """Get a user by ID within a tenant.

        Args:
            user_id: The user's ID
            tenant_id: The owning tenant's ID

        Returns:
            User if found in that tenant, None otherwise
        """
        stmt = select(User).where(User.id == user_id, User.tenant_id == tenant_id)
        async with _store_failures():
            result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def exists_by_username(self, username: str, tenant_id: int) -> bool:
        """Check whether a username is taken within a tenant."""
        stmt = select(
            exists().where(User.tenant_id == tenant_id, User.username == username)
        )
        async with _store_failures():
            result = await self.session.execute(stmt)
        return bool(result.scalar())

    async def exists_by_email(
        self,
        email: str,
        tenant_id: int,
        exclude_id: int | None = None,
    ) -> bool:
        """Check whether an email is taken within a tenant.

        Args:
            email: Email address to look for
            tenant_id: The tenant's ID
            exclude_id: A user ID to ignore, used when updating that user

        Returns:
            True if another user in the tenant has this email
        """
        condition = exists().where(User.tenant_id == tenant_id, User.email == email)
        if exclude_id is not None:
            condition = condition.where(User.id != exclude_id)
        async with _store_failures():
            result = await self.session.execute(select(condition))
        return bool(result.scalar())

    async def list_by_tenant(self, tenant_id: int) -> list[User]:
        """List all users of a tenant in insertion order.

        Args:
            tenant_id: The tenant's ID

        Returns:
            The tenant's users ordered by ID, possibly empty
        """
        stmt = select(User).where(User.tenant_id == tenant_id).order_by(User.id)
        async with _store_failures():
            result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(
        self,
        user: User,
        changes: dict[str, Any],
        updated_at: datetime,
    ) -> User:
        """Apply field changes to a user and stamp the update time.

        Args:
            user: Persistent user to change
            changes: Column values to set
            updated_at: New modification timestamp

        Returns:
            The updated user

        Raises:
            DuplicateUserError: If the new email is taken in the tenant
            InternalFailureError: If the store fails
        """
        async with _store_failures():
            async with self.session.begin_nested():
                for key, value in changes.items():
                    setattr(user, key, value)
                user.updated_at = updated_at
        return user

    async def delete(self, user: User) -> None:
        """Delete a user.

        Args:
            user: User instance to delete
        """
        async with _store_failures():
            async with self.session.begin_nested():
                await self.session.delete(user)


# Type alias for dependency injection
UserRepo = Annotated[UserRepository, Depends(UserRepository)]
