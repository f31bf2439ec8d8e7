"""Integration tests for UserService against a real database."""

import asyncio
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tests.factories.user import UserCreateFactory
from usermgmt.core.auth import PasswordHasher
from usermgmt.core.database import Base, build_engine, build_session_factory
from usermgmt.core.errors import DuplicateUserError, ErrorKind, NotFoundError
from usermgmt.modules.api_clients.models import ApiClient
from usermgmt.modules.api_clients.repos import ApiClientRepository
from usermgmt.modules.users.models import User
from usermgmt.modules.users.repos import UserRepository
from usermgmt.modules.users.schemas import UserCreate, UserResponse
from usermgmt.modules.users.services import UserService


pytestmark = pytest.mark.integration


def _alice(email: str = "alice@x.com"):
    return UserCreateFactory.build(username="alice", email=email, password="Pass1234!")


class TestSignupScenario:
    """The end-to-end signup and password check flow across two tenants."""

    async def test_scenario(
        self, user_service: UserService, tenant: ApiClient, other_tenant: ApiClient
    ):
        """Duplicates are rejected per tenant and passwords verify."""
        alice = await user_service.create_user(_alice(), tenant.id)
        dumped = alice.model_dump()
        assert "password" not in dumped
        assert "password_hash" not in dumped
        assert "password_salt" not in dumped

        with pytest.raises(DuplicateUserError) as exc_info:
            await user_service.create_user(_alice(email="bob@x.com"), tenant.id)
        assert exc_info.value.field == "username"
        assert exc_info.value.kind is ErrorKind.DUPLICATE

        other_alice = await user_service.create_user(_alice(email="alice2@x.com"), other_tenant.id)
        assert other_alice.id != alice.id

        assert await user_service.validate_password(alice.id, "Pass1234!", tenant.id) is True
        assert await user_service.validate_password(alice.id, "wrong", tenant.id) is False

    async def test_same_email_other_username(self, user_service: UserService, tenant: ApiClient):
        """A taken email is reported when the username is new."""
        await user_service.create_user(_alice(), tenant.id)

        with pytest.raises(DuplicateUserError) as exc_info:
            await user_service.create_user(
                UserCreateFactory.build(username="alicia", email="alice@x.com"), tenant.id
            )

        assert exc_info.value.field == "email"

    async def test_credentials_are_stored_hashed(
        self, db: AsyncSession, user_service: UserService, tenant: ApiClient
    ):
        """The row holds a hash and salt, never the password."""
        alice = await user_service.create_user(_alice(), tenant.id)

        row = (await db.execute(select(User).where(User.id == alice.id))).scalar_one()

        assert row.password_hash
        assert row.password_salt
        assert "Pass1234!" not in (row.password_hash, row.password_salt)
        assert "Pass1234!" not in repr(row)


class TestConstraintBackstop:
    """The store constraints reject duplicates the existence checks miss."""

    async def test_username_collision_past_check(
        self, user_service: UserService, tenant: ApiClient
    ):
        """A duplicate that slips past the check is still rejected."""
        await user_service.create_user(_alice(), tenant.id)
        # Checks that ran before the first insert landed
        user_service.repo.exists_by_username = AsyncMock(return_value=False)
        user_service.repo.exists_by_email = AsyncMock(return_value=False)

        with pytest.raises(DuplicateUserError) as exc_info:
            await user_service.create_user(_alice(email="other@x.com"), tenant.id)

        assert exc_info.value.field == "username"
        assert len(await user_service.list_users(tenant.id)) == 1

    async def test_email_collision_past_check(self, user_service: UserService, tenant: ApiClient):
        """An email collision that slips past the check is still rejected."""
        await user_service.create_user(_alice(), tenant.id)
        user_service.repo.exists_by_username = AsyncMock(return_value=False)
        user_service.repo.exists_by_email = AsyncMock(return_value=False)

        with pytest.raises(DuplicateUserError) as exc_info:
            await user_service.create_user(
                UserCreateFactory.build(username="alicia", email="alice@x.com"), tenant.id
            )

        assert exc_info.value.field == "email"


class TestConcurrentSignup:
    """Simultaneous signups on separate sessions against a shared database file."""

    @pytest.fixture
    async def file_sessions(self, tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
        """Session factory for a file database that several connections share."""
        engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'signup.db'}")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        yield build_session_factory(engine)

        await engine.dispose()

    @pytest.fixture
    async def file_tenant_id(self, file_sessions: async_sessionmaker) -> int:
        async with file_sessions() as session:
            client = await ApiClientRepository(session).create("Signup", "signup-key")
            await session.commit()
            return client.id

    async def _signup(
        self,
        sessions: async_sessionmaker,
        hasher: PasswordHasher,
        data: UserCreate,
        tenant_id: int,
    ) -> UserResponse:
        async with sessions() as session:
            service = UserService(UserRepository(session), hasher)
            user = await service.create_user(data, tenant_id)
            await session.commit()
            return user

    async def _race(self, sessions, hasher, tenant_id, *payloads) -> tuple[list, list]:
        results = await asyncio.gather(
            *(self._signup(sessions, hasher, data, tenant_id) for data in payloads),
            return_exceptions=True,
        )
        created = [r for r in results if isinstance(r, UserResponse)]
        rejected = [r for r in results if isinstance(r, BaseException)]
        return created, rejected

    async def test_same_username(
        self, file_sessions: async_sessionmaker, file_tenant_id: int, hasher: PasswordHasher
    ):
        """One signup wins; the other gets a username duplicate, not a failure."""
        created, rejected = await self._race(
            file_sessions,
            hasher,
            file_tenant_id,
            _alice(email="first@x.com"),
            _alice(email="second@x.com"),
        )

        assert len(created) == 1
        assert [type(exc) for exc in rejected] == [DuplicateUserError]
        assert rejected[0].field == "username"

    async def test_same_email(
        self, file_sessions: async_sessionmaker, file_tenant_id: int, hasher: PasswordHasher
    ):
        """Two usernames racing for one email yield one user and one email duplicate."""
        created, rejected = await self._race(
            file_sessions,
            hasher,
            file_tenant_id,
            UserCreateFactory.build(username="alice", email="shared@x.com"),
            UserCreateFactory.build(username="alicia", email="shared@x.com"),
        )

        assert len(created) == 1
        assert [type(exc) for exc in rejected] == [DuplicateUserError]
        assert rejected[0].field == "email"

    async def test_winner_is_persisted(
        self, file_sessions: async_sessionmaker, file_tenant_id: int, hasher: PasswordHasher
    ):
        """Exactly one row remains after several concurrent attempts."""
        created, rejected = await self._race(
            file_sessions,
            hasher,
            file_tenant_id,
            *(_alice(email=f"alice{n}@x.com") for n in range(4)),
        )

        async with file_sessions() as session:
            service = UserService(UserRepository(session), hasher)
            listed = await service.list_users(file_tenant_id)

        assert [user.id for user in listed] == [created[0].id]
        assert len(rejected) == 3
        assert all(isinstance(exc, DuplicateUserError) for exc in rejected)


class TestUpdate:
    """Tests for partial updates."""

    async def test_full_name_only(self, user_service: UserService, tenant: ApiClient):
        """Updating full_name leaves every other field unchanged."""
        before = await user_service.create_user(_alice(), tenant.id)

        after = await user_service.update_user(before.id, {"full_name": "Alice Cooper"}, tenant.id)

        assert after.full_name == "Alice Cooper"
        assert after.email == before.email
        assert after.mobile_number == before.mobile_number
        assert after.language == before.language
        assert after.culture == before.culture
        assert after.username == before.username
        assert after.created_at == before.created_at
        assert after.updated_at > before.updated_at

    async def test_noop_update_advances_timestamp(
        self, user_service: UserService, tenant: ApiClient
    ):
        """An update without field changes still refreshes updated_at."""
        before = await user_service.create_user(_alice(), tenant.id)

        first = await user_service.update_user(before.id, {}, tenant.id)
        second = await user_service.update_user(before.id, {"full_name": ""}, tenant.id)

        assert before.updated_at < first.updated_at < second.updated_at
        assert second.full_name == before.full_name

    async def test_update_persists(self, user_service: UserService, tenant: ApiClient):
        """Changes are visible on the next read."""
        created = await user_service.create_user(_alice(), tenant.id)

        await user_service.update_user(
            created.id, {"language": "de", "culture": "de-DE"}, tenant.id
        )
        fetched = await user_service.get_user(created.id, tenant.id)

        assert (fetched.language, fetched.culture) == ("de", "de-DE")

    async def test_email_taken_by_other_user(self, user_service: UserService, tenant: ApiClient):
        """Changing to another user's email is a duplicate."""
        await user_service.create_user(_alice(), tenant.id)
        bob = await user_service.create_user(
            UserCreateFactory.build(username="bob", email="bob@x.com"), tenant.id
        )

        with pytest.raises(DuplicateUserError) as exc_info:
            await user_service.update_user(bob.id, {"email": "alice@x.com"}, tenant.id)

        assert exc_info.value.field == "email"
        assert (await user_service.get_user(bob.id, tenant.id)).email == "bob@x.com"

    async def test_email_kept_and_changed(self, user_service: UserService, tenant: ApiClient):
        """Re-sending the own email or a free one succeeds."""
        alice = await user_service.create_user(_alice(), tenant.id)

        same = await user_service.update_user(alice.id, {"email": "alice@x.com"}, tenant.id)
        changed = await user_service.update_user(alice.id, {"email": "new@x.com"}, tenant.id)

        assert same.email == "alice@x.com"
        assert changed.email == "new@x.com"

    async def test_email_used_in_other_tenant(
        self, user_service: UserService, tenant: ApiClient, other_tenant: ApiClient
    ):
        """An email taken only in another tenant is free here."""
        await user_service.create_user(_alice(email="shared@x.com"), other_tenant.id)
        alice = await user_service.create_user(_alice(), tenant.id)

        updated = await user_service.update_user(alice.id, {"email": "shared@x.com"}, tenant.id)

        assert updated.email == "shared@x.com"


class TestDeleteAndList:
    """Tests for delete and list."""

    async def test_delete_twice(self, user_service: UserService, tenant: ApiClient):
        """The first delete succeeds, the second reports not found."""
        alice = await user_service.create_user(_alice(), tenant.id)

        await user_service.delete_user(alice.id, tenant.id)

        with pytest.raises(NotFoundError):
            await user_service.delete_user(alice.id, tenant.id)
        with pytest.raises(NotFoundError):
            await user_service.get_user(alice.id, tenant.id)

    async def test_list_in_insertion_order(self, user_service: UserService, tenant: ApiClient):
        """Users are listed oldest first."""
        created = [
            await user_service.create_user(UserCreateFactory.build(), tenant.id)
            for _ in range(3)
        ]

        listed = await user_service.list_users(tenant.id)

        assert [user.id for user in listed] == [user.id for user in created]

    async def test_deleted_username_can_be_reused(
        self, user_service: UserService, tenant: ApiClient
    ):
        """Hard delete frees the username and email."""
        alice = await user_service.create_user(_alice(), tenant.id)
        await user_service.delete_user(alice.id, tenant.id)

        again = await user_service.create_user(_alice(), tenant.id)

        assert again.username == "alice"
