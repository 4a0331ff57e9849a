"""
Mapper between ``User`` entities and user transfer objects.
"""

from ..domain.entities import User
from ..schemas import UserDTO, UserPatchDTO
from .base import Mapper


class UserMapper(Mapper[User, UserDTO]):
    """
    User translation.

    ``id``, ``is_active`` and the timestamps stay inside the data access
    layer; only username, email and full name cross the boundary.
    """

    entity_type = User
    dto_type = UserDTO
    patch_type = UserPatchDTO
