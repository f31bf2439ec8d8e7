"""API client model.

Each API client is one tenant: every user row belongs to exactly one
client, and a request acts as the client whose key it presents.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from usermgmt.core.constants import MAX_CLIENT_NAME_LENGTH, SHA256_HEX_LENGTH
from usermgmt.core.database import Base, IntegerIDMixin


class ApiClient(Base, IntegerIDMixin):
    """Tenant model, identified by an API key.

    Only the SHA-256 hash of the key is stored.

    Attributes:
        id: Tenant identifier
        name: Display name, used in logs
        is_active: Inactive clients are rejected like unknown keys
        api_key_hash: SHA-256 hex digest of the client's key
        created_at: When the client was provisioned
    """

    __tablename__ = "api_clients"

    name: Mapped[str] = mapped_column(String(MAX_CLIENT_NAME_LENGTH), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    api_key_hash: Mapped[str] = mapped_column(
        String(SHA256_HEX_LENGTH),
        unique=True,
        index=True,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<ApiClient {self.id} {self.name!r}>"
