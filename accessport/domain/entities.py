"""
Domain entities for persisted records.

Plain data records with a store-assigned identity. These entities carry
no persistence behavior of their own; they are created, changed and
removed only through a repository.
"""

import types
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, ClassVar, Optional, Union, get_args, get_origin, get_type_hints

from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from .exceptions import ValidationException


def _allowed_types(annotation: Any) -> tuple:
    """Flatten ``Optional[X]`` / ``X | None`` into a tuple of classes."""
    if get_origin(annotation) in (Union, types.UnionType):
        return tuple(t for arg in get_args(annotation) for t in _allowed_types(arg))
    return (annotation,)


def _matches(value: Any, allowed: tuple) -> bool:
    for expected in allowed:
        if expected is type(None):
            if value is None:
                return True
        elif isinstance(value, bool) and expected is not bool:
            # bool is an int subclass; True is not an identity
            continue
        elif isinstance(value, expected):
            return True
    return False


class Entity:
    """
    Base for persisted domain records.

    Subclasses are dataclasses that declare ``id`` plus their own fields.
    Identity is absent until the store assigns it and is immutable after
    that.
    """

    IDENTITY_FIELD: ClassVar[str] = "id"
    STORE_MANAGED_FIELDS: ClassVar[tuple[str, ...]] = ("id",)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == self.IDENTITY_FIELD:
            current = self.__dict__.get(name)
            if current is not None and value != current:
                raise ValidationException(
                    name, value, f"identity already assigned ({current})"
                )
        super().__setattr__(name, value)

    def __post_init__(self):
        self._check_field_types()

    def _check_field_types(self) -> None:
        """Raise ValidationException for any value not matching its annotation."""
        hints = get_type_hints(type(self))
        for name in self.field_names():
            allowed = _allowed_types(hints[name])
            value = getattr(self, name)
            if not _matches(value, allowed):
                expected = " or ".join(
                    "None" if t is type(None) else t.__name__ for t in allowed
                )
                raise ValidationException(name, value, f"must be {expected}")

    @property
    def identity(self) -> Optional[Any]:
        return getattr(self, self.IDENTITY_FIELD)

    @property
    def is_persisted(self) -> bool:
        return self.identity is not None

    @classmethod
    def field_names(cls) -> list[str]:
        """All declared field names in declaration order."""
        return [f.name for f in fields(cls)]

    @classmethod
    def domain_fields(cls) -> list[str]:
        """Field names a caller may write, in declaration order."""
        return [name for name in cls.field_names() if name not in cls.STORE_MANAGED_FIELDS]

    def to_dict(self) -> dict:
        """Convert entity to a plain dictionary."""
        return {name: getattr(self, name) for name in self.field_names()}


@dataclass
class User(Entity):
    """
    Registered account.

    ``id``, ``created_at`` and ``updated_at`` are assigned by the store.
    """

    STORE_MANAGED_FIELDS: ClassVar[tuple[str, ...]] = ("id", "created_at", "updated_at")

    username: str
    email: str
    full_name: Optional[str] = None
    is_active: bool = True
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate field types, then required fields."""
        super().__post_init__()
        if not self.username.strip():
            raise ValidationException("username", self.username, "must not be empty")
        try:
            validate_email(self.email)
        except PydanticCustomError as exc:
            raise ValidationException("email", self.email, "must be an email address") from exc
