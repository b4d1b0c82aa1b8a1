# address_verification/services/db.py
# Database client access and Beanie initialization, shared by the app
# lifespan and the test fixtures.
from pymongo import AsyncMongoClient
from typing import Optional
from beanie import init_beanie

from address_verification.configs import env
from address_verification.models.change_request import ChangeRequest
from address_verification.models.geo_node import GeoNode
from address_verification.models.person import Person

DOCUMENT_MODELS = [GeoNode, Person, ChangeRequest]

db_client: Optional[AsyncMongoClient] = None


async def get_database_client() -> AsyncMongoClient:
    """Returns the MongoDB async client."""
    global db_client
    if db_client is None:
        db_client = AsyncMongoClient(env.get("MONGO_URI"))
    return db_client


async def init_database(database) -> None:
    """Registers every document model with Beanie on the given database."""
    await init_beanie(database=database, document_models=DOCUMENT_MODELS)


async def close_database_client() -> None:
    global db_client
    if db_client is not None:
        await db_client.close()
        db_client = None
