"""
Repository layer - Data access abstractions.

This layer provides interfaces for data persistence and retrieval,
hiding implementation details from the business logic.
"""

from .base import Pagination, RecordSequence, Repository
from .memory_repository import InMemoryRepository
from .sqlalchemy_repository import SqlAlchemyRepository
from .user_repository import InMemoryUserRepository, SqlAlchemyUserRepository

__all__ = [
    "InMemoryRepository",
    "InMemoryUserRepository",
    "Pagination",
    "RecordSequence",
    "Repository",
    "SqlAlchemyRepository",
    "SqlAlchemyUserRepository",
]
