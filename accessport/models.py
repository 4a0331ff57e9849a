"""
Database models for the record store.

This module declares the storage schema explicitly: one SQLAlchemy table
per entity, with a column for every entity field. Repositories validate
the entity/table correspondence when they are constructed.
"""

from typing import Any

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String
from sqlalchemy.orm import declarative_base

Base: Any = declarative_base()


class UserRecord(Base):
    """
    Stored row for a ``User`` entity.

    Attributes:
        id: Primary key identifier, assigned on insert
        username: Unique login name
        email: Unique email address
        full_name: Display name
        is_active: Whether the account is enabled
        created_at: Timestamp of row creation (naive UTC)
        updated_at: Timestamp of last row update (naive UTC)
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)

    username = Column(String(50), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index("idx_users_is_active", "is_active"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<UserRecord(id={self.id}, username='{self.username}')>"
