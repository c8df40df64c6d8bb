"""Fixtures for route tests against an in-memory MongoDB"""

import pytest
from beanie import init_beanie
from mongomock_motor import AsyncMongoMockClient

from awinja.db import DOCUMENT_MODELS
from awinja.models.user import User, UserRole


@pytest.fixture
async def db():
    client = AsyncMongoMockClient()
    database = client["awinja_test"]
    await init_beanie(database=database, document_models=DOCUMENT_MODELS)
    yield database


@pytest.fixture
def admin(db) -> User:
    """Authenticated admin as the route dependency would inject it"""
    return User(
        email="bursar@awinja.ac.ke",
        hashed_password="not-used",
        role=UserRole.ADMIN,
        full_name="Mary Bursar",
    )
