"""Test factories for generating test data."""

from tests.factories.user import UserCreateFactory, UserUpdateFactory, build_user


__all__ = [
    "UserCreateFactory",
    "UserUpdateFactory",
    "build_user",
]
