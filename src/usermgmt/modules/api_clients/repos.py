"""API client repository for database operations."""

from sqlalchemy import select

from usermgmt.api.dependencies import DBSession
from usermgmt.core.auth.backend import hash_api_key
from usermgmt.modules.api_clients.models import ApiClient


class ApiClientRepository:
    """Repository for ApiClient database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def get_active_by_key(self, api_key: str) -> ApiClient | None:
        """Resolve a raw API key to its active client.

        Args:
            api_key: The key as presented by the caller

        Returns:
            The client if the key is known and the client active, None otherwise
        """
        stmt = select(ApiClient).where(
            ApiClient.api_key_hash == hash_api_key(api_key),
            ApiClient.is_active.is_(True),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> ApiClient | None:
        """Get a client by its display name."""
        result = await self.session.execute(select(ApiClient).where(ApiClient.name == name))
        return result.scalars().first()

    async def create(self, name: str, api_key: str, is_active: bool = True) -> ApiClient:
        """Provision a client for ``api_key``.

        Args:
            name: Display name
            api_key: Raw key; only its hash is stored
            is_active: Whether the key is accepted

        Returns:
            The created client with ID populated
        """
        client = ApiClient(
            name=name,
            api_key_hash=hash_api_key(api_key),
            is_active=is_active,
        )
        self.session.add(client)
        await self.session.flush()
        await self.session.refresh(client)
        return client
