"""
Unit tests for domain entities.
"""

from datetime import datetime

import pytest
from pydantic import ValidationError as PydanticValidationError

from accessport.domain.entities import User
from accessport.domain.exceptions import ValidationException
from accessport.schemas import UserDTO


class TestUser:
    """Tests for the User entity."""

    def test_new_user_has_no_identity(self):
        """Test identity is absent before creation."""
        user = User(username="ann", email="ann@x.com")
        assert user.id is None
        assert user.identity is None
        assert not user.is_persisted
        assert user.is_active is True

    def test_identity_can_be_assigned_once(self):
        user = User(username="ann", email="ann@x.com")
        user.id = 1
        assert user.is_persisted
        assert user.identity == 1

    def test_identity_is_immutable_after_assignment(self):
        """Test reassigning identity raises."""
        user = User(username="ann", email="ann@x.com", id=1)
        with pytest.raises(ValidationException, match="identity already assigned"):
            user.id = 2

    def test_reassigning_same_identity_is_allowed(self):
        user = User(username="ann", email="ann@x.com", id=1)
        user.id = 1
        assert user.id == 1

    def test_empty_username_rejected(self):
        with pytest.raises(ValidationException, match="username"):
            User(username="  ", email="ann@x.com")

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationException, match="email"):
            User(username="ann", email="not-an-email")

    @pytest.mark.parametrize("email", ["a@b", "ann@", "@x.com", "ann@@x.com"])
    def test_email_checked_like_transfer_object(self, email):
        """The entity accepts exactly what UserDTO's EmailStr accepts."""
        with pytest.raises(PydanticValidationError):
            UserDTO(username="ann", email=email)
        with pytest.raises(ValidationException, match="email"):
            User(username="ann", email=email)

    @pytest.mark.parametrize(
        "field, value, expected",
        [
            ("username", 123, "must be str"),
            ("full_name", 5, "must be str or None"),
            ("is_active", None, "must be bool"),
            ("is_active", "nope", "must be bool"),
            ("is_active", 0, "must be bool"),
            ("id", True, "must be int or None"),
            ("id", "1", "must be int or None"),
            ("created_at", "2024-01-01", "must be datetime or None"),
        ],
    )
    def test_field_types_enforced(self, field, value, expected):
        values = {"username": "ann", "email": "ann@x.com", field: value}
        with pytest.raises(ValidationException, match=expected) as exc_info:
            User(**values)
        assert exc_info.value.details["field"] == field

    def test_field_order(self):
        assert User.field_names() == [
            "username",
            "email",
            "full_name",
            "is_active",
            "id",
            "created_at",
            "updated_at",
        ]

    def test_domain_fields_exclude_store_managed(self):
        assert User.domain_fields() == ["username", "email", "full_name", "is_active"]

    def test_to_dict(self):
        created = datetime(2024, 1, 1, 12, 0)
        user = User(username="ann", email="ann@x.com", id=3, created_at=created)
        data = user.to_dict()
        assert data["id"] == 3
        assert data["username"] == "ann"
        assert data["created_at"] == created
        assert data["updated_at"] is None

    def test_equality_compares_all_fields(self):
        assert User(username="ann", email="ann@x.com", id=1) == User(
            username="ann", email="ann@x.com", id=1
        )
        assert User(username="ann", email="ann@x.com", id=1) != User(
            username="ann", email="ann@x.com", id=2
        )
