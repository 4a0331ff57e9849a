"""
Repository interface (Abstract Base Class).

Defines the CRUD contract every record store implementation satisfies.
Callers depend on this interface only; "DAO" and "repository" name the
same abstraction here.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Generic,
    Iterator,
    List,
    Mapping,
    Optional,
    Type,
    TypeVar,
)

from ..config import Settings, get_settings
from ..domain.entities import Entity
from ..domain.exceptions import NotFoundException, ValidationException

E = TypeVar("E", bound=Entity)


@dataclass(frozen=True)
class Pagination:
    """
    Offset/limit window over an identity-ordered result.

    A ``None`` limit means the configured default page size.
    """

    offset: int = 0
    limit: Optional[int] = None


class RecordSequence(Generic[E]):
    """
    Lazy, finite, restartable sequence of entities.

    Nothing is read from the store until iteration starts, and every new
    iteration reads again.
    """

    def __init__(self, fetch: Callable[[], Iterator[E]]):
        self._fetch = fetch

    def __iter__(self) -> Iterator[E]:
        return iter(self._fetch())

    def first(self) -> Optional[E]:
        """Return the first entity, or None when the sequence is empty."""
        iterator = iter(self)
        try:
            return next(iterator, None)
        finally:
            # Release the underlying cursor without draining it
            close = getattr(iterator, "close", None)
            if close is not None:
                close()

    def to_list(self) -> List[E]:
        return list(self)


class Repository(ABC, Generic[E]):
    """
    Abstract repository for one entity type.

    Every failure is raised as an ``AccessPortException`` subclass:
    ``NotFoundException``, ``ConstraintViolationException``,
    ``StoreUnavailableException`` or ``ValidationException``. Nothing is
    retried here.
    """

    def __init__(self, entity_type: Type[E], settings: Optional[Settings] = None):
        self.entity_type = entity_type
        self.settings = settings or get_settings()

    @property
    def entity_name(self) -> str:
        return self.entity_type.__name__

    @abstractmethod
    def create(self, entity: E) -> E:
        """
        Persist a new entity.

        Args:
            entity: Entity without identity

        Returns:
            The stored entity with identity and store-managed fields set

        Raises:
            ValidationException: If the entity already has an identity
            ConstraintViolationException: If a uniqueness rule is broken
            StoreUnavailableException: If the store cannot be reached
        """

    @abstractmethod
    def read_one(self, identity: Any) -> E:
        """
        Fetch one entity by identity.

        Raises:
            NotFoundException: If no entity has this identity
        """

    @abstractmethod
    def read_all(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        pagination: Optional[Pagination] = None,
    ) -> RecordSequence[E]:
        """
        Fetch entities ordered by identity.

        Args:
            filters: Exact-match values keyed by domain field name
            pagination: Window to return; all matches when omitted

        Returns:
            Lazy sequence that re-reads the store on each iteration
        """

    @abstractmethod
    def update(self, identity: Any, fields: Mapping[str, Any]) -> E:
        """
        Apply a partial change to an existing entity.

        Args:
            identity: Identity of the entity to change
            fields: New values keyed by domain field name

        Returns:
            The updated entity

        Raises:
            NotFoundException: If no entity has this identity
            ValidationException: If a field is unknown or store-managed
            ConstraintViolationException: If a uniqueness rule is broken
        """

    @abstractmethod
    def delete(self, identity: Any) -> None:
        """
        Remove an entity.

        Raises:
            NotFoundException: If no entity has this identity
        """

    @abstractmethod
    def count(self, filters: Optional[Mapping[str, Any]] = None) -> int:
        """Count entities matching the filters."""

    def exists(self, identity: Any) -> bool:
        """Check whether an entity with this identity is stored."""
        try:
            self.read_one(identity)
        except NotFoundException:
            return False
        return True

    def _check_new(self, entity: E) -> None:
        if entity.is_persisted:
            raise ValidationException(
                entity.IDENTITY_FIELD,
                entity.identity,
                "new entities must not carry an identity",
            )

    def _check_fields(self, fields: Mapping[str, Any]) -> None:
        writable = self.entity_type.domain_fields()
        for name in fields:
            if name in self.entity_type.STORE_MANAGED_FIELDS:
                raise ValidationException(name, fields[name], "field is managed by the store")
            if name not in writable:
                raise ValidationException(
                    name, fields[name], f"unknown field for {self.entity_name}"
                )

    def _check_filters(self, filters: Optional[Mapping[str, Any]]) -> dict:
        filters = dict(filters or {})
        known = self.entity_type.field_names()
        for name, value in filters.items():
            if name not in known:
                raise ValidationException(
                    name, value, f"unknown filter field for {self.entity_name}"
                )
        return filters

    def _resolve_limit(self, pagination: Optional[Pagination]) -> tuple[int, Optional[int]]:
        """Validate a pagination window and return (offset, limit)."""
        if pagination is None:
            return 0, None

        for name, value in (("offset", pagination.offset), ("limit", pagination.limit)):
            if name == "limit" and value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationException(name, value, "must be an integer")

        if pagination.offset < 0:
            raise ValidationException("offset", pagination.offset, "must not be negative")

        limit = pagination.limit
        if limit is None:
            limit = self.settings.DEFAULT_PAGE_SIZE
        if limit <= 0:
            raise ValidationException("limit", limit, "must be positive")
        if limit > self.settings.MAX_PAGE_SIZE:
            raise ValidationException(
                "limit", limit, f"must not exceed {self.settings.MAX_PAGE_SIZE}"
            )
        return pagination.offset, limit
