"""Users module for tenant-scoped user management."""

from fastapi import APIRouter


router = APIRouter(prefix="/users", tags=["users"])

# Import routes to register them (must be after router is defined)
from usermgmt.modules.users import routes  # noqa: F401, E402
