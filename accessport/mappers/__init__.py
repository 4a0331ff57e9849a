"""
Mapper layer - Pure translation between entities and transfer objects.
"""

from .base import Mapper
from .user_mapper import UserMapper

__all__ = ["Mapper", "UserMapper"]
