"""Unit tests for mapping store integrity errors to duplicate fields."""

import pytest
from sqlalchemy.exc import IntegrityError

from usermgmt.modules.users.repos import _duplicate_field


def _integrity_error(message: str) -> IntegrityError:
    return IntegrityError("INSERT INTO users ...", None, Exception(message))


class TestDuplicateField:
    """Tests for _duplicate_field."""

    @pytest.mark.parametrize(
        ("message", "field"),
        [
            ("UNIQUE constraint failed: users.tenant_id, users.username", "username"),
            ("UNIQUE constraint failed: users.tenant_id, users.email", "email"),
            (
                'duplicate key value violates unique constraint "uq_users_tenant_id_username"\n'
                "DETAIL:  Key (tenant_id, username)=(1, alice) already exists.",
                "username",
            ),
            (
                'duplicate key value violates unique constraint "uq_users_tenant_id_email"\n'
                "DETAIL:  Key (tenant_id, email)=(1, alice@x.com) already exists.",
                "email",
            ),
        ],
    )
    def test_known_constraints(self, message: str, field: str):
        """SQLite and PostgreSQL messages both name the colliding field."""
        assert _duplicate_field(_integrity_error(message)) == field

    def test_values_do_not_decide_the_field(self):
        """An email containing 'username' is still an email collision."""
        message = (
            'duplicate key value violates unique constraint "uq_users_tenant_id_email"\n'
            "DETAIL:  Key (tenant_id, email)=(1, username@x.com) already exists."
        )

        assert _duplicate_field(_integrity_error(message)) == "email"

    def test_values_alone_do_not_match(self):
        """Field names appearing only in the values line are ignored."""
        message = (
            'insert or update on table "users" violates foreign key constraint '
            '"fk_users_tenant_id_api_clients"\n'
            "DETAIL:  Key (tenant_id)=(7) is not present. username email"
        )

        assert _duplicate_field(_integrity_error(message)) is None

    @pytest.mark.parametrize("message", ["FOREIGN KEY constraint failed", ""])
    def test_other_integrity_errors(self, message: str):
        """Errors from other constraints are not duplicates."""
        assert _duplicate_field(_integrity_error(message)) is None
