"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# String field lengths
MAX_USERNAME_LENGTH = 32
MAX_FULL_NAME_LENGTH = 256
MAX_EMAIL_LENGTH = 256
MAX_MOBILE_NUMBER_LENGTH = 16
MAX_LANGUAGE_LENGTH = 16
MAX_CULTURE_LENGTH = 16
MAX_CLIENT_NAME_LENGTH = 100

# Hash lengths
SHA256_HEX_LENGTH = 64

# Password requirements
MIN_PASSWORD_LENGTH = 8
PASSWORD_SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

# Password hashing (PBKDF2-HMAC-SHA512).
# Stored hashes are only verifiable with these exact values.
PBKDF2_DIGEST = "sha512"
PBKDF2_ITERATIONS = 100_000
PASSWORD_SALT_BYTES = 16
PASSWORD_HASH_BYTES = 32

# API keys
API_KEY_HEADER = "X-API-Key"
API_KEY_BYTES = 32

# Request tracing
REQUEST_ID_HEADER = "X-Request-ID"

# Log redaction
REDACTED = "***"
SENSITIVE_LOG_KEYS = frozenset({"password", "password_hash", "password_salt", "api_key"})
