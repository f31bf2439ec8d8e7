"""Authentication module for API keys and password hashing."""

from usermgmt.core.auth.backend import (
    HashedPassword,
    PasswordHasher,
    generate_api_key,
    get_password_hasher,
    hash_api_key,
)
from usermgmt.core.auth.dependencies import TenantId, get_tenant_id


__all__ = [
    "HashedPassword",
    "PasswordHasher",
    "TenantId",
    "generate_api_key",
    "get_password_hasher",
    "get_tenant_id",
    "hash_api_key",
]
