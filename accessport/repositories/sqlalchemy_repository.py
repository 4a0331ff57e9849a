"""
SQLAlchemy implementation of the repository interface.

Implements persistent storage for any entity whose fields are declared
as columns on an ORM model. Each call opens its own session, so one call
is one transaction with one outcome.
"""

import dataclasses
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Generator, Iterator, Mapping, Optional, Type

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.orm import sessionmaker

from ..config import Settings
from ..domain.exceptions import (
    ConstraintViolationException,
    MappingConfigurationException,
    NotFoundException,
    StoreUnavailableException,
)
from .base import E, Pagination, RecordSequence, Repository

logger = structlog.get_logger(__name__)


class SqlAlchemyRepository(Repository[E]):
    """
    Relational repository for one entity type and one ORM model.

    The model's table must have a column named after every entity field.
    This is checked when the repository is built, not on first use.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        model: Type[Any],
        entity_type: Type[E],
        settings: Optional[Settings] = None,
    ):
        """
        Initialize repository.

        Args:
            session_factory: SQLAlchemy session factory
            model: ORM model class storing the entity
            entity_type: Entity dataclass mapped onto the model
            settings: Pagination settings

        Raises:
            MappingConfigurationException: If an entity field has no column
        """
        super().__init__(entity_type, settings)
        self.session_factory = session_factory
        self.model = model
        self.table_name = model.__tablename__
        self._columns = set(model.__table__.columns.keys())
        self._validate_mapping()

    def _validate_mapping(self) -> None:
        missing = [name for name in self.entity_type.field_names() if name not in self._columns]
        if missing:
            raise MappingConfigurationException(self.entity_name, self.table_name, missing)

    @property
    def _identity_column(self):
        return getattr(self.model, self.entity_type.IDENTITY_FIELD)

    def create(self, entity: E) -> E:
        self._check_new(entity)
        values = {name: getattr(entity, name) for name in self.entity_type.domain_fields()}
        self._stamp(values, created=True)

        with self._translate_errors("create"), self.session_factory() as session:
            record = self.model(**values)
            session.add(record)
            session.commit()
            created = self._map_to_entity(record)

        logger.info("Record created", entity=self.entity_name, identity=created.identity)
        return created

    def read_one(self, identity: Any) -> E:
        with self._translate_errors("read_one"), self.session_factory() as session:
            record = session.get(self.model, identity)
            if record is None:
                logger.debug("Record not found", entity=self.entity_name, identity=identity)
                raise NotFoundException(self.entity_name, identity)
            return self._map_to_entity(record)

    def read_all(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        pagination: Optional[Pagination] = None,
    ) -> RecordSequence[E]:
        filters = self._check_filters(filters)
        offset, limit = self._resolve_limit(pagination)

        stmt = select(self.model).filter_by(**filters).order_by(self._identity_column)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        return RecordSequence(lambda: self._stream(stmt))

    def _stream(self, stmt) -> Iterator[E]:
        with self._translate_errors("read_all"), self.session_factory() as session:
            for record in session.execute(stmt).scalars():
                yield self._map_to_entity(record)

    def update(self, identity: Any, fields: Mapping[str, Any]) -> E:
        self._check_fields(fields)

        with self._translate_errors("update"), self.session_factory() as session:
            record = session.get(self.model, identity)
            if record is None:
                logger.debug("Record not found", entity=self.entity_name, identity=identity)
                raise NotFoundException(self.entity_name, identity)

            # Rebuild through the entity so field validation runs on the new values
            changed = dataclasses.replace(self._map_to_entity(record), **fields)
            values = {name: getattr(changed, name) for name in fields}
            self._stamp(values, created=False)
            for name, value in values.items():
                setattr(record, name, value)

            session.commit()
            updated = self._map_to_entity(record)

        logger.info(
            "Record updated",
            entity=self.entity_name,
            identity=identity,
            fields=sorted(fields),
        )
        return updated

    def delete(self, identity: Any) -> None:
        with self._translate_errors("delete"), self.session_factory() as session:
            record = session.get(self.model, identity)
            if record is None:
                logger.debug("Record not found", entity=self.entity_name, identity=identity)
                raise NotFoundException(self.entity_name, identity)
            session.delete(record)
            session.commit()

        logger.info("Record deleted", entity=self.entity_name, identity=identity)

    def count(self, filters: Optional[Mapping[str, Any]] = None) -> int:
        filters = self._check_filters(filters)
        stmt = select(func.count()).select_from(self.model).filter_by(**filters)
        with self._translate_errors("count"), self.session_factory() as session:
            return session.execute(stmt).scalar_one()

    @contextmanager
    def _translate_errors(self, operation: str) -> Generator[None, None, None]:
        """Convert driver errors into the data access error taxonomy."""
        try:
            yield
        except IntegrityError as e:
            logger.warning(
                "Constraint violated",
                entity=self.entity_name,
                operation=operation,
                error=str(e.orig),
            )
            raise ConstraintViolationException(self.entity_name, str(e.orig)) from e
        except (OperationalError, InterfaceError) as e:
            logger.error(
                "Record store unavailable",
                table=self.table_name,
                operation=operation,
                error=str(e.orig),
            )
            raise StoreUnavailableException(self.table_name, str(e.orig)) from e
        except DBAPIError as e:
            if not e.connection_invalidated:
                raise
            logger.error(
                "Record store connection lost",
                table=self.table_name,
                operation=operation,
            )
            raise StoreUnavailableException(self.table_name, "connection invalidated") from e

    def _map_to_entity(self, record: Any) -> E:
        """Map database model to domain entity."""
        return self.entity_type(
            **{name: getattr(record, name) for name in self.entity_type.field_names()}
        )

    def _stamp(self, values: dict, created: bool) -> None:
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        if created and "created_at" in self._columns:
            values["created_at"] = now
        if "updated_at" in self._columns:
            values["updated_at"] = now
