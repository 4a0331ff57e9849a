"""
Custom exceptions for the data access layer.

These exceptions are the typed outcomes every Access Port and Mapper
surfaces to its caller. They are independent of the record store in use;
store-specific errors are translated into one of these before leaving a
repository.
"""

from typing import Any, Optional


class AccessPortException(Exception):
    """Base exception for all data access errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class NotFoundException(AccessPortException):
    """Raised when the requested identity is absent from the store."""

    def __init__(self, entity: str, identity: Any):
        message = f"{entity} not found: {identity}"
        super().__init__(
            message=message, details={"entity": entity, "identity": identity}
        )


class ConstraintViolationException(AccessPortException):
    """Raised when a store-level integrity rule is broken."""

    def __init__(self, entity: str, reason: Optional[str] = None):
        message = f"Constraint violated for {entity}"
        if reason:
            message += f": {reason}"
        super().__init__(message=message, details={"entity": entity, "reason": reason})


class StoreUnavailableException(AccessPortException):
    """Raised when the record store cannot be reached."""

    def __init__(self, store: str, reason: Optional[str] = None):
        message = f"Record store '{store}' unavailable"
        if reason:
            message += f": {reason}"
        super().__init__(message=message, details={"store": store, "reason": reason})


class ValidationException(AccessPortException):
    """Raised when input is malformed or refers to fields that cannot be written."""

    def __init__(self, field: str, value: Any, reason: str):
        message = f"Validation failed for {field}: {reason}"
        super().__init__(
            message=message,
            details={"field": field, "value": str(value), "reason": reason},
        )


class MappingConfigurationException(AccessPortException):
    """Raised at startup when an entity does not line up with its storage schema."""

    def __init__(self, entity: str, table: str, missing: list):
        message = (
            f"Entity {entity} cannot be mapped to table '{table}': "
            f"missing columns {', '.join(missing)}"
        )
        super().__init__(
            message=message,
            details={"entity": entity, "table": table, "missing": missing},
        )
