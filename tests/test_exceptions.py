"""
Tests for domain exceptions.

Simple tests to ensure exceptions work correctly.
"""

from accessport.domain.exceptions import (
    AccessPortException,
    ConstraintViolationException,
    MappingConfigurationException,
    NotFoundException,
    StoreUnavailableException,
    ValidationException,
)


class TestExceptions:
    """Test custom exceptions."""

    def test_not_found_exception(self):
        """Test NotFoundException."""
        exc = NotFoundException("User", 42)
        assert "User" in str(exc)
        assert "42" in str(exc)
        assert exc.details == {"entity": "User", "identity": 42}

    def test_constraint_violation_exception(self):
        """Test ConstraintViolationException."""
        exc = ConstraintViolationException("User", "username 'ann' already exists")
        assert "User" in str(exc)
        assert "already exists" in str(exc)

    def test_constraint_violation_without_reason(self):
        exc = ConstraintViolationException("User")
        assert str(exc) == "Constraint violated for User"

    def test_store_unavailable_exception(self):
        """Test StoreUnavailableException."""
        exc = StoreUnavailableException("users", "connection refused")
        assert "users" in str(exc)
        assert "connection refused" in str(exc)

    def test_validation_exception(self):
        """Test ValidationException."""
        exc = ValidationException("email", "nope", "must be an email address")
        assert "email" in str(exc)
        assert "must be an email address" in str(exc)
        assert exc.details["value"] == "nope"

    def test_mapping_configuration_exception(self):
        """Test MappingConfigurationException."""
        exc = MappingConfigurationException("Widget", "users", ["name", "size"])
        assert "users" in str(exc)
        assert "name, size" in str(exc)

    def test_all_share_base_class(self):
        for exc in (
            NotFoundException("User", 1),
            ConstraintViolationException("User"),
            StoreUnavailableException("users"),
            ValidationException("f", 1, "bad"),
        ):
            assert isinstance(exc, AccessPortException)
            assert exc.message == str(exc)
