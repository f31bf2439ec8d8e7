"""Multi-tenant user management service."""

__version__ = "0.1.0"
