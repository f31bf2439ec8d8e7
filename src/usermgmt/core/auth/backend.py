"""Password and API key hashing.

This module provides core credential utilities including:
- Salted PBKDF2-HMAC-SHA512 password hashing
- Constant-time password verification
- API key generation and hashing for storage
"""

import base64
import binascii
import hashlib
import secrets
from functools import lru_cache
from typing import NamedTuple

import structlog
from passlib.crypto.digest import pbkdf2_hmac
from passlib.utils import consteq

from usermgmt.core.constants import (
    API_KEY_BYTES,
    PASSWORD_HASH_BYTES,
    PASSWORD_SALT_BYTES,
    PBKDF2_DIGEST,
    PBKDF2_ITERATIONS,
    REDACTED,
)
from usermgmt.core.errors import InternalFailureError


logger = structlog.get_logger()


class HashedPassword(NamedTuple):
    """A derived password hash and the salt it was derived with.

    Both values are standard base64 text, ready for storage.
    """

    hash: str
    salt: str

    def __repr__(self) -> str:
        return f"HashedPassword(hash={REDACTED!r}, salt={REDACTED!r})"


# ============================================================
# Password Utilities
# ============================================================


class PasswordHasher:
    """Derives and verifies salted PBKDF2 password hashes.

    Every call to ``hash`` draws a fresh random salt, so hashing the same
    password twice yields different results. The parameters are fixed:
    existing stored hashes only verify with the values they were made with.
    """

    def __init__(
        self,
        iterations: int = PBKDF2_ITERATIONS,
        salt_bytes: int = PASSWORD_SALT_BYTES,
        hash_bytes: int = PASSWORD_HASH_BYTES,
        digest: str = PBKDF2_DIGEST,
    ) -> None:
        self.iterations = iterations
        self.salt_bytes = salt_bytes
        self.hash_bytes = hash_bytes
        self.digest = digest

    def hash(self, password: str) -> HashedPassword:
        """Hash a password with a new random salt.

        Args:
            password: Plain text password

        Returns:
            The base64 hash and salt

        Raises:
            InternalFailureError: If the key derivation fails
        """
        salt = secrets.token_bytes(self.salt_bytes)
        derived = self._derive(password, salt)
        return HashedPassword(
            hash=base64.b64encode(derived).decode("ascii"),
            salt=base64.b64encode(salt).decode("ascii"),
        )

    def verify(self, password: str, password_hash: str, salt: str) -> bool:
        """Verify a password against a stored hash and salt.

        Stored values that are empty or decode to the wrong length never
        match. A stored value that is not valid base64 is a configuration
        fault and raises.

        Args:
            password: Plain text password to verify
            password_hash: Stored base64 hash
            salt: Stored base64 salt

        Returns:
            True if password matches, False otherwise

        Raises:
            InternalFailureError: If a stored value cannot be decoded or
                the key derivation fails
        """
        if not password_hash or not salt:
            logger.warning("stored_credentials_missing")
            return False

        try:
            expected = base64.b64decode(password_hash, validate=True)
            salt_raw = base64.b64decode(salt, validate=True)
        except (binascii.Error, ValueError) as exc:
            logger.error("stored_credentials_undecodable")
            raise InternalFailureError("Stored credentials could not be decoded") from exc

        if len(expected) != self.hash_bytes or len(salt_raw) != self.salt_bytes:
            logger.warning("stored_credentials_malformed")
            return False

        return consteq(self._derive(password, salt_raw), expected)

    def _derive(self, password: str, salt: bytes) -> bytes:
        try:
            return pbkdf2_hmac(
                self.digest,
                password.encode("utf-8"),
                salt,
                self.iterations,
                self.hash_bytes,
            )
        except (TypeError, ValueError) as exc:
            raise InternalFailureError("Password hashing failed") from exc


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Get the shared password hasher."""
    return PasswordHasher()


# ============================================================
# API Key Utilities
# ============================================================


def generate_api_key() -> str:
    """Generate a new random API key.

    The raw key is shown once to whoever provisions the client; only its
    hash is stored.
    """
    return secrets.token_urlsafe(API_KEY_BYTES)


def hash_api_key(api_key: str) -> str:
    """Hash an API key for secure storage.

    Uses SHA-256 so a key can be looked up by its hash. This prevents key
    theft if the database is compromised.

    Args:
        api_key: The raw API key

    Returns:
        SHA-256 hex digest of the key
    """
    return hashlib.sha256(api_key.encode()).hexdigest()
