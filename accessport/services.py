"""
Service layer composing repository and mapper.

Takes transfer objects in, hands transfer objects out, and keeps entities
on the inside. Collaborators are passed to the constructor explicitly.
"""

from typing import Any, List, Mapping, Optional, Union

import structlog

from .config import Settings, get_settings
from .database import create_db_engine, create_session_factory, init_db
from .domain.entities import User
from .logging_config import setup_logging
from .mappers.user_mapper import UserMapper
from .repositories.base import Pagination, Repository
from .repositories.user_repository import SqlAlchemyUserRepository
from .schemas import UserDTO, UserPatchDTO

logger = structlog.get_logger(__name__)


class UserService:
    """
    Service class for user record operations.

    Coordinates between a user repository and the user mapper. Errors
    from either propagate unchanged.
    """

    def __init__(self, repository: Repository[User], mapper: UserMapper):
        """
        Initialize user service.

        Args:
            repository: Any user repository implementation
            mapper: Mapper for user transfer objects
        """
        self.repository = repository
        self.mapper = mapper

    def register(self, data: Union[UserDTO, Mapping[str, Any]]) -> UserDTO:
        """Create a user from transfer data."""
        entity = self.repository.create(self.mapper.to_entity(data))
        return self.mapper.to_transfer_object(entity)

    def get(self, user_id: int) -> UserDTO:
        return self.mapper.to_transfer_object(self.repository.read_one(user_id))

    def list(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        pagination: Optional[Pagination] = None,
    ) -> List[UserDTO]:
        return self.mapper.to_transfer_objects(self.repository.read_all(filters, pagination))

    def change(self, user_id: int, patch: Union[UserPatchDTO, Mapping[str, Any]]) -> UserDTO:
        """
        Apply the fields set on a patch to a stored user.

        An empty patch still checks that the user exists.
        """
        fields = self.mapper.to_update_fields(patch)
        if not fields:
            return self.get(user_id)
        entity = self.repository.update(user_id, fields)
        return self.mapper.to_transfer_object(entity)

    def remove(self, user_id: int) -> None:
        self.repository.delete(user_id)


def build_user_service(settings: Optional[Settings] = None) -> UserService:
    """
    Wire a user service against the configured database.

    Creates tables that do not exist yet.
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL, settings.APP_NAME, settings.LOG_JSON)

    engine = create_db_engine(settings=settings)
    init_db(engine)

    repository = SqlAlchemyUserRepository(create_session_factory(engine), settings)
    logger.info("User service ready", app=settings.APP_NAME)
    return UserService(repository, UserMapper())
