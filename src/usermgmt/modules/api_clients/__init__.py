"""API clients module - tenants identified by API key.

This module exposes no routes; clients are provisioned with the seed
script.
"""

from usermgmt.modules.api_clients.models import ApiClient
from usermgmt.modules.api_clients.repos import ApiClientRepository


__all__ = ["ApiClient", "ApiClientRepository"]
