# db.py
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from config import settings

logger = logging.getLogger(__name__)


async def create_client() -> AsyncIOMotorClient:
    client = AsyncIOMotorClient(
        settings.MONGO_URI,
        serverSelectionTimeoutMS=2000,
        connectTimeoutMS=2000,
        socketTimeoutMS=5000,
        retryWrites=True,
    )
    await client.admin.command("ping")
    logger.info(f"Connected to MongoDB at {settings.MONGO_URI}")
    return client


def get_db(client) -> AsyncIOMotorDatabase:
    return client[settings.DB_NAME]


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    await db["users"].create_index("email", unique=True)
    await db["users"].create_index("username", unique=True)

    await db["products"].create_index("sku", unique=True)
    await db["products"].create_index("owner_id")
    logger.info(f"Indexes ensured on database '{db.name}'")
