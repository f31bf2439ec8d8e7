"""User database models."""

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from usermgmt.core.constants import (
    MAX_CULTURE_LENGTH,
    MAX_EMAIL_LENGTH,
    MAX_FULL_NAME_LENGTH,
    MAX_LANGUAGE_LENGTH,
    MAX_MOBILE_NUMBER_LENGTH,
    MAX_USERNAME_LENGTH,
)
from usermgmt.core.database.base import Base, IntegerIDMixin, TenantMixin, TimestampMixin


class User(Base, IntegerIDMixin, TimestampMixin, TenantMixin):
    """User model representing one identity owned by an API client.

    Username and email are unique within the owning tenant only; the same
    username may exist under several tenants.

    Attributes:
        username: Login name, immutable after creation
        full_name: User's full name
        email: Email address, unique within the tenant
        mobile_number: Phone number
        language: Preferred language code
        culture: Preferred culture code
        password_hash: Base64 PBKDF2 digest
        password_salt: Base64 salt the digest was derived with
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("tenant_id", "username"),
        UniqueConstraint("tenant_id", "email"),
    )

    username: Mapped[str] = mapped_column(String(MAX_USERNAME_LENGTH), nullable=False)
    full_name: Mapped[str] = mapped_column(String(MAX_FULL_NAME_LENGTH), nullable=False)
    email: Mapped[str] = mapped_column(String(MAX_EMAIL_LENGTH), nullable=False)
    mobile_number: Mapped[str] = mapped_column(
        String(MAX_MOBILE_NUMBER_LENGTH),
        nullable=False,
    )
    language: Mapped[str] = mapped_column(String(MAX_LANGUAGE_LENGTH), nullable=False)
    culture: Mapped[str] = mapped_column(String(MAX_CULTURE_LENGTH), nullable=False)

    # Credentials
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    password_salt: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<User {self.id} {self.username!r} tenant={self.tenant_id}>"
