"""
Tests for the user service facade.
"""

import pytest

from accessport.config import Settings
from accessport.domain.exceptions import (
    ConstraintViolationException,
    NotFoundException,
    ValidationException,
)
from accessport.repositories.base import Pagination
from accessport.repositories.user_repository import SqlAlchemyUserRepository
from accessport.schemas import UserDTO, UserPatchDTO
from accessport.services import UserService, build_user_service


@pytest.fixture
def service(user_repo, mapper):
    """User service over each repository implementation"""
    return UserService(user_repo, mapper)


class TestUserService:
    """Test the service flow: transfer data in, transfer objects out."""

    def test_register(self, service):
        dto = service.register({"username": "ann", "email": "ann@x.com"})

        assert isinstance(dto, UserDTO)
        assert dto.model_dump() == {"username": "ann", "email": "ann@x.com", "full_name": None}
        assert service.repository.read_one(1).username == "ann"

    def test_register_invalid_data(self, service):
        with pytest.raises(ValidationException):
            service.register({"username": "ann"})
        assert service.repository.count() == 0

    def test_register_duplicate(self, service, sample_user_data):
        service.register(sample_user_data)
        with pytest.raises(ConstraintViolationException):
            service.register(sample_user_data)

    def test_get(self, service, sample_user_data):
        service.register(sample_user_data)
        assert service.get(1).full_name == "Bob Builder"

    def test_get_missing(self, service):
        with pytest.raises(NotFoundException):
            service.get(1)

    def test_list(self, service):
        for name in ("ann", "bob", "cy"):
            service.register({"username": name, "email": f"{name}@x.com"})

        page = service.list(pagination=Pagination(offset=1, limit=5))
        assert [dto.username for dto in page] == ["bob", "cy"]

    def test_list_filtered(self, service):
        service.register({"username": "ann", "email": "ann@x.com"})
        service.register({"username": "bob", "email": "bob@x.com"})
        assert [dto.username for dto in service.list({"username": "bob"})] == ["bob"]

    def test_change(self, service, sample_user_data):
        service.register(sample_user_data)
        dto = service.change(1, UserPatchDTO(full_name="Robert Builder"))

        assert dto.full_name == "Robert Builder"
        assert dto.username == "bob"

    def test_change_empty_patch(self, service, sample_user_data):
        service.register(sample_user_data)
        assert service.change(1, {}).username == "bob"

    def test_change_missing(self, service):
        with pytest.raises(NotFoundException):
            service.change(1, {"full_name": "Nobody"})

    def test_change_empty_patch_missing(self, service):
        with pytest.raises(NotFoundException):
            service.change(1, {})

    def test_remove(self, service, sample_user_data):
        service.register(sample_user_data)
        service.remove(1)

        with pytest.raises(NotFoundException):
            service.get(1)


class TestBuildUserService:
    """Test explicit wiring from settings."""

    def test_builds_sql_backed_service(self):
        service = build_user_service(Settings(DATABASE_URL="sqlite://"))

        assert isinstance(service.repository, SqlAlchemyUserRepository)
        dto = service.register({"username": "ann", "email": "ann@x.com"})
        assert service.get(1).model_dump() == dto.model_dump()
