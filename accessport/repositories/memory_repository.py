"""
In-memory implementation of the repository interface.

Keeps entities in a dictionary keyed by identity. Useful as a test double
and for short-lived processes that need no durable store.
"""

import copy
import dataclasses
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence, Type

import structlog

from ..config import Settings
from ..domain.entities import Entity
from ..domain.exceptions import (
    ConstraintViolationException,
    NotFoundException,
    StoreUnavailableException,
)
from .base import E, Pagination, RecordSequence, Repository

logger = structlog.get_logger(__name__)


class InMemoryRepository(Repository[E]):
    """
    Dictionary-backed repository.

    Identities are increasing integers starting at 1 and are never reused.
    Entities are copied on the way in and out, so callers never hold a
    reference to stored state.

    Attributes:
        unique_fields: Field names whose values must be unique across entities
    """

    def __init__(
        self,
        entity_type: Type[E],
        unique_fields: Sequence[str] = (),
        settings: Optional[Settings] = None,
    ):
        """
        Initialize repository.

        Args:
            entity_type: Entity dataclass this repository stores
            unique_fields: Fields with a uniqueness constraint
            settings: Pagination settings
        """
        super().__init__(entity_type, settings)
        self.unique_fields = tuple(unique_fields)
        self._records: Dict[int, E] = {}
        self._next_id = 1
        self._lock = threading.RLock()
        self._closed = False

    def close(self) -> None:
        """Close the store; every later call raises StoreUnavailableException."""
        with self._lock:
            self._closed = True
            self._records.clear()

    def create(self, entity: E) -> E:
        self._check_new(entity)
        with self._lock:
            self._ensure_open()
            self._check_unique(entity.to_dict())

            stored = copy.deepcopy(entity)
            stored.id = self._next_id
            self._next_id += 1
            self._stamp(stored, created=True)

            self._records[stored.id] = stored
            logger.info("Record created", entity=self.entity_name, identity=stored.id)
            return copy.deepcopy(stored)

    def read_one(self, identity: Any) -> E:
        with self._lock:
            self._ensure_open()
            stored = self._records.get(identity)
            if stored is None:
                logger.debug("Record not found", entity=self.entity_name, identity=identity)
                raise NotFoundException(self.entity_name, identity)
            return copy.deepcopy(stored)

    def read_all(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        pagination: Optional[Pagination] = None,
    ) -> RecordSequence[E]:
        filters = self._check_filters(filters)
        offset, limit = self._resolve_limit(pagination)

        def fetch() -> Iterator[E]:
            with self._lock:
                self._ensure_open()
                matches = [
                    copy.deepcopy(self._records[key])
                    for key in sorted(self._records)
                    if self._matches(self._records[key], filters)
                ]
            end = None if limit is None else offset + limit
            return iter(matches[offset:end])

        return RecordSequence(fetch)

    def update(self, identity: Any, fields: Mapping[str, Any]) -> E:
        self._check_fields(fields)
        with self._lock:
            self._ensure_open()
            stored = self._records.get(identity)
            if stored is None:
                logger.debug("Record not found", entity=self.entity_name, identity=identity)
                raise NotFoundException(self.entity_name, identity)

            candidate = dataclasses.replace(stored, **fields)
            self._check_unique(candidate.to_dict(), exclude=identity)

            self._stamp(candidate, created=False)
            self._records[identity] = candidate
            logger.info(
                "Record updated",
                entity=self.entity_name,
                identity=identity,
                fields=sorted(fields),
            )
            return copy.deepcopy(candidate)

    def delete(self, identity: Any) -> None:
        with self._lock:
            self._ensure_open()
            if identity not in self._records:
                logger.debug("Record not found", entity=self.entity_name, identity=identity)
                raise NotFoundException(self.entity_name, identity)
            del self._records[identity]
            logger.info("Record deleted", entity=self.entity_name, identity=identity)

    def count(self, filters: Optional[Mapping[str, Any]] = None) -> int:
        filters = self._check_filters(filters)
        with self._lock:
            self._ensure_open()
            return sum(1 for entity in self._records.values() if self._matches(entity, filters))

    def _ensure_open(self) -> None:
        if self._closed:
            raise StoreUnavailableException("memory", "store is closed")

    def _check_unique(self, values: dict, exclude: Optional[int] = None) -> None:
        for name in self.unique_fields:
            value = values.get(name)
            if value is None:
                continue
            for key, other in self._records.items():
                if key != exclude and getattr(other, name) == value:
                    raise ConstraintViolationException(
                        self.entity_name, f"{name} '{value}' already exists"
                    )

    @staticmethod
    def _matches(entity: Entity, filters: dict) -> bool:
        return all(getattr(entity, name) == value for name, value in filters.items())

    @staticmethod
    def _stamp(entity: Entity, created: bool) -> None:
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        names = entity.field_names()
        if created and "created_at" in names:
            entity.created_at = now
        if "updated_at" in names:
            entity.updated_at = now
