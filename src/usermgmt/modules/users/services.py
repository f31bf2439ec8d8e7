"""User service for business logic.

All operations take the ID of an already-authenticated tenant and only
ever see that tenant's users; a user of another tenant is reported as not
found, exactly like a missing one.
"""

import asyncio
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Annotated, Any, TypeVar

import structlog
from fastapi import Depends
from pydantic import ValidationError as PydanticValidationError

from usermgmt.core.auth.backend import PasswordHasher, get_password_hasher
from usermgmt.core.errors import DuplicateUserError, NotFoundError, ValidationError
from usermgmt.modules.users.models import User
from usermgmt.modules.users.repos import UserRepo
from usermgmt.modules.users.schemas import UserCreate, UserResponse, UserUpdate, as_utc


logger = structlog.get_logger()

# Smallest step the stored timestamps can represent
_TIMESTAMP_RESOLUTION = timedelta(microseconds=1)

SchemaT = TypeVar("SchemaT", UserCreate, UserUpdate)


def _parse(schema: type[SchemaT], data: SchemaT | Mapping[str, Any]) -> SchemaT:
    """Coerce raw input to ``schema``, raising the domain validation error."""
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc


class UserService:
    """Service for user management operations.

    Contains business logic for user CRUD operations and password checks.
    Password hashing is CPU-bound and runs in a worker thread.
    """

    def __init__(self, repo: UserRepo, hasher: PasswordHasher | None = None) -> None:
        self.repo = repo
        self.hasher = hasher or get_password_hasher()

    async def _get_owned(self, user_id: int, tenant_id: int) -> User:
        user = await self.repo.get_by_id(user_id, tenant_id)
        if user is None:
            logger.info("user_not_found", user_id=user_id, tenant_id=tenant_id)
            raise NotFoundError(
                f"User with ID {user_id} not found",
                resource="user",
                resource_id=str(user_id),
            )
        return user

    async def get_user(self, user_id: int, tenant_id: int) -> UserResponse:
        """Get a user by ID.

        Args:
            user_id: The user's ID
            tenant_id: The calling tenant's ID

        Returns:
            The user's view

        Raises:
            NotFoundError: If the tenant has no user with this ID
        """
        user = await self._get_owned(user_id, tenant_id)
        logger.info("user_retrieved", user_id=user.id, tenant_id=tenant_id)
        return UserResponse.model_validate(user)

    async def list_users(self, tenant_id: int) -> list[UserResponse]:
        """List every user of a tenant, oldest first."""
        users = await self.repo.list_by_tenant(tenant_id)
        logger.info("users_listed", tenant_id=tenant_id, count=len(users))
        return [UserResponse.model_validate(user) for user in users]

    async def create_user(
        self,
        data: UserCreate | Mapping[str, Any],
        tenant_id: int,
    ) -> UserResponse:
        """Create a new user.

        Username is checked before email, so when both are taken the
        username is reported.

        Args:
            data: User creation data, as a schema or a plain mapping
            tenant_id: The tenant this user belongs to

        Returns:
            The created user's view

        Raises:
            ValidationError: If the input is malformed
            DuplicateUserError: If username or email is taken in the tenant
            InternalFailureError: If hashing or the store fails
        """
        data = _parse(UserCreate, data)

        if await self.repo.exists_by_username(data.username, tenant_id):
            logger.info("duplicate_user", field="username", tenant_id=tenant_id)
            raise DuplicateUserError("username")
        if await self.repo.exists_by_email(data.email, tenant_id):
            logger.info("duplicate_user", field="email", tenant_id=tenant_id)
            raise DuplicateUserError("email")

        hashed = await asyncio.to_thread(self.hasher.hash, data.password)

        now = datetime.now(UTC)
        user = User(
            tenant_id=tenant_id,
            username=data.username,
            full_name=data.full_name,
            email=data.email,
            mobile_number=data.mobile_number,
            language=data.language,
            culture=data.culture,
            password_hash=hashed.hash,
            password_salt=hashed.salt,
            created_at=now,
            updated_at=now,
        )
        try:
            user = await self.repo.create(user)
        except DuplicateUserError as exc:
            # Lost a race with a concurrent insert
            logger.info("duplicate_user", field=exc.field, tenant_id=tenant_id)
            raise

        logger.info("user_created", user_id=user.id, tenant_id=tenant_id)
        return UserResponse.model_validate(user)

    async def update_user(
        self,
        user_id: int,
        data: UserUpdate | Mapping[str, Any],
        tenant_id: int,
    ) -> UserResponse:
        """Apply a partial update to a user.

        Only fields given with a non-empty value change. ``updated_at``
        advances on every successful call, including one that changes no
        field.

        Args:
            user_id: The user's ID
            data: Fields to change, as a schema or a plain mapping
            tenant_id: The calling tenant's ID

        Returns:
            The updated user's view

        Raises:
            ValidationError: If the input is malformed
            NotFoundError: If the tenant has no user with this ID
            DuplicateUserError: If the new email is taken in the tenant
            InternalFailureError: If the store fails
        """
        data = _parse(UserUpdate, data)
        user = await self._get_owned(user_id, tenant_id)
        changes = data.changes()

        email = changes.get("email")
        if email is not None and email != user.email:
            if await self.repo.exists_by_email(email, tenant_id, exclude_id=user.id):
                logger.info("duplicate_user", field="email", tenant_id=tenant_id)
                raise DuplicateUserError("email")

        # Stay strictly after the previous stamp even if the clock hasn't moved
        updated_at = max(
            datetime.now(UTC),
            as_utc(user.updated_at) + _TIMESTAMP_RESOLUTION,
        )
        try:
            user = await self.repo.update(user, changes, updated_at)
        except DuplicateUserError as exc:
            logger.info("duplicate_user", field=exc.field, tenant_id=tenant_id)
            raise

        logger.info(
            "user_updated",
            user_id=user.id,
            tenant_id=tenant_id,
            fields=sorted(changes),
        )
        return UserResponse.model_validate(user)

    async def delete_user(self, user_id: int, tenant_id: int) -> None:
        """Delete a user.

        Raises:
            NotFoundError: If the tenant has no user with this ID, including
                when it was already deleted
        """
        user = await self._get_owned(user_id, tenant_id)
        await self.repo.delete(user)
        logger.info("user_deleted", user_id=user_id, tenant_id=tenant_id)

    async def validate_password(
        self,
        user_id: int,
        password: str,
        tenant_id: int,
    ) -> bool:
        """Check a candidate password against the user's stored hash.

        A wrong password is a normal ``False`` result, not an error.

        Raises:
            NotFoundError: If the tenant has no user with this ID
            InternalFailureError: If the hashing library fails
        """
        user = await self._get_owned(user_id, tenant_id)
        is_valid = await asyncio.to_thread(
            self.hasher.verify,
            password,
            user.password_hash,
            user.password_salt,
        )
        logger.info(
            "password_validated",
            user_id=user_id,
            tenant_id=tenant_id,
            is_valid=is_valid,
        )
        return is_valid


def get_user_service(repo: UserRepo) -> UserService:
    """Build the request-scoped user service."""
    return UserService(repo, get_password_hasher())


# Type alias for dependency injection
UserSvc = Annotated[UserService, Depends(get_user_service)]
