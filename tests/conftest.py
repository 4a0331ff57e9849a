"""
Test configuration and fixtures
"""

import pytest

from accessport.config import Settings
from accessport.database import create_db_engine, create_session_factory, init_db
from accessport.domain.entities import User
from accessport.mappers.user_mapper import UserMapper
from accessport.repositories.user_repository import (
    InMemoryUserRepository,
    SqlAlchemyUserRepository,
)

# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite://"


@pytest.fixture
def settings():
    """Settings with small pages so pagination is easy to exercise"""
    return Settings(
        DATABASE_URL=SQLALCHEMY_DATABASE_URL,
        DEFAULT_PAGE_SIZE=2,
        MAX_PAGE_SIZE=10,
    )


@pytest.fixture(scope="function")
def engine(settings):
    """Fresh in-memory database for each test"""
    engine = create_db_engine(settings=settings)
    init_db(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def sql_repo(session_factory, settings):
    return SqlAlchemyUserRepository(session_factory, settings)


@pytest.fixture
def memory_repo(settings):
    return InMemoryUserRepository(settings)


@pytest.fixture(params=["memory", "sql"])
def user_repo(request):
    """Each user repository implementation in turn"""
    return request.getfixturevalue(f"{request.param}_repo")


@pytest.fixture
def mapper():
    return UserMapper()


@pytest.fixture
def new_user():
    """User that has not been stored yet"""
    return User(username="ann", email="ann@x.com")


@pytest.fixture
def sample_user_data():
    """Sample user transfer data for testing"""
    return {
        "username": "bob",
        "email": "bob@y.org",
        "full_name": "Bob Builder",
    }
