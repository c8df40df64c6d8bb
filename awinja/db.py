"""MongoDB connection and Beanie document registration."""
from typing import TypeVar

from beanie import Document, PydanticObjectId, init_beanie
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient

from awinja.config import settings
from awinja.models import (
    User,
    Student,
    Teacher,
    NonTeachingStaff,
    FeeStructure,
    FeePayment,
)

DocT = TypeVar("DocT", bound=Document)

DOCUMENT_MODELS = [
    User,
    Student,
    Teacher,
    NonTeachingStaff,
    FeeStructure,
    FeePayment,
]

_client = None


async def db_startup():
    """Connect to MongoDB and initialize Beanie ODM."""
    global _client
    _client = AsyncIOMotorClient(settings.mongodb_url)
    await init_beanie(
        database=_client[settings.mongodb_db_name],
        document_models=DOCUMENT_MODELS,
    )


async def db_shutdown():
    """Close MongoDB connection."""
    global _client
    if _client:
        _client.close()
        _client = None


async def find_document(model: type[DocT], doc_id: str) -> DocT | None:
    """Fetch by id string; a malformed id is treated as not found."""
    try:
        return await model.get(PydanticObjectId(doc_id))
    except InvalidId:
        return None
