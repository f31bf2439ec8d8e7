"""User API routes.

Every route acts on behalf of the tenant resolved from the X-API-Key
header and only ever sees that tenant's users.
"""

from fastapi import Request, Response, status

from usermgmt.core.auth.dependencies import TenantId
from usermgmt.modules.users import router
from usermgmt.modules.users.schemas import (
    UserCreate,
    UserResponse,
    UserUpdate,
    ValidatePasswordRequest,
    ValidatePasswordResponse,
)
from usermgmt.modules.users.services import UserSvc


# ============================================================
# User Management Routes
# ============================================================


@router.get(
    "",
    response_model=list[UserResponse],
    summary="List users",
    description="List all users of the calling API client, oldest first.",
)
async def list_users(
    service: UserSvc,
    tenant_id: TenantId,
) -> list[UserResponse]:
    """List users in tenant."""
    return await service.list_users(tenant_id)


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    description="Create a user. Username and email must be unique within the API client.",
)
async def create_user(
    data: UserCreate,
    request: Request,
    response: Response,
    service: UserSvc,
    tenant_id: TenantId,
) -> UserResponse:
    """Create a user and point Location at it."""
    user = await service.create_user(data, tenant_id)
    response.headers["Location"] = str(request.url_for("get_user", user_id=user.id))
    return user


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get user",
    description="Get a specific user by ID.",
)
async def get_user(
    user_id: int,
    service: UserSvc,
    tenant_id: TenantId,
) -> UserResponse:
    """Get user by ID."""
    return await service.get_user(user_id, tenant_id)


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update user",
    description=(
        "Update a user's profile. Only fields sent with a non-empty value change; "
        "username cannot be changed."
    ),
)
async def update_user(
    user_id: int,
    data: UserUpdate,
    service: UserSvc,
    tenant_id: TenantId,
) -> UserResponse:
    """Update user by ID."""
    return await service.update_user(user_id, data, tenant_id)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete user",
    description="Permanently delete a user.",
)
async def delete_user(
    user_id: int,
    service: UserSvc,
    tenant_id: TenantId,
) -> None:
    """Delete user by ID."""
    await service.delete_user(user_id, tenant_id)


@router.post(
    "/{user_id}/validate-password",
    response_model=ValidatePasswordResponse,
    summary="Validate password",
    description="Check a candidate password against the user's stored credentials.",
)
async def validate_password(
    user_id: int,
    data: ValidatePasswordRequest,
    service: UserSvc,
    tenant_id: TenantId,
) -> ValidatePasswordResponse:
    """Check a user's password."""
    is_valid = await service.validate_password(user_id, data.password, tenant_id)
    return ValidatePasswordResponse(is_valid=is_valid)
