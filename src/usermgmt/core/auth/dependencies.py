"""FastAPI dependencies for authentication.

This module provides FastAPI dependency injection functions for:
- Resolving the X-API-Key header to an active API client
- Getting the current tenant context
"""

from typing import Annotated

import structlog
from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from usermgmt.api.dependencies import DBSession
from usermgmt.core.constants import API_KEY_HEADER
from usermgmt.core.errors import UnauthorizedError


logger = structlog.get_logger()

# API key security scheme
api_key_scheme = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


async def get_tenant_id(
    request: Request,
    api_key: Annotated[str | None, Depends(api_key_scheme)],
    db: DBSession,
) -> int:
    """Resolve the caller's API key to its tenant ID.

    The resolved client is recorded on ``request.state`` and bound to the
    log context together with the name of the route handler, so every
    later log line carries them.

    Args:
        request: The current request
        api_key: Value of the X-API-Key header
        db: Database session

    Returns:
        The ID of the active API client owning the key

    Raises:
        UnauthorizedError: If the key is missing, unknown or inactive
    """
    from usermgmt.modules.api_clients.repos import ApiClientRepository  # noqa: PLC0415

    endpoint = request.scope.get("endpoint")
    if endpoint is not None:
        structlog.contextvars.bind_contextvars(method_name=endpoint.__name__)

    if not api_key:
        logger.info("api_key_missing", path=str(request.url.path))
        raise UnauthorizedError("API Key is missing", error_code="missing_api_key")

    client = await ApiClientRepository(db).get_active_by_key(api_key)
    if client is None:
        logger.info("api_key_invalid", path=str(request.url.path))
        raise UnauthorizedError("Invalid API Key", error_code="invalid_api_key")

    request.state.tenant_id = client.id
    request.state.client_name = client.name
    structlog.contextvars.bind_contextvars(
        tenant_id=client.id,
        client_name=client.name,
    )
    return client.id


# Type alias for dependency injection
TenantId = Annotated[int, Depends(get_tenant_id)]
