"""
User repository bound to the ``users`` table.
"""

from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import sessionmaker

from ..config import Settings
from ..domain.entities import User
from ..models import UserRecord
from .base import Pagination, RecordSequence
from .memory_repository import InMemoryRepository
from .sqlalchemy_repository import SqlAlchemyRepository

USER_UNIQUE_FIELDS = ("username", "email")


class SqlAlchemyUserRepository(SqlAlchemyRepository[User]):
    """Relational user storage with lookups by username and email."""

    def __init__(self, session_factory: sessionmaker, settings: Optional[Settings] = None):
        super().__init__(session_factory, UserRecord, User, settings)

    def find_by_username(self, username: str) -> Optional[User]:
        """Get user by username, or None."""
        return self.read_all({"username": username}).first()

    def find_by_email(self, email: str) -> Optional[User]:
        """Get user by email, or None."""
        return self.read_all({"email": email}).first()

    def search(
        self, search_term: str, pagination: Optional[Pagination] = None
    ) -> RecordSequence[User]:
        """Search users by username, email, or full name (case-insensitive)."""
        offset, limit = self._resolve_limit(pagination or Pagination())
        search_pattern = f"%{search_term}%"

        stmt = (
            select(UserRecord)
            .where(
                or_(
                    UserRecord.username.ilike(search_pattern),
                    UserRecord.email.ilike(search_pattern),
                    UserRecord.full_name.ilike(search_pattern),
                )
            )
            .order_by(UserRecord.id)
            .offset(offset)
            .limit(limit)
        )
        return RecordSequence(lambda: self._stream(stmt))


class InMemoryUserRepository(InMemoryRepository[User]):
    """Dictionary-backed user storage enforcing unique usernames and emails."""

    def __init__(self, settings: Optional[Settings] = None):
        super().__init__(User, unique_fields=USER_UNIQUE_FIELDS, settings=settings)

    def find_by_username(self, username: str) -> Optional[User]:
        return self.read_all({"username": username}).first()

    def find_by_email(self, email: str) -> Optional[User]:
        return self.read_all({"email": email}).first()
