import logging
import os

from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

load_dotenv()

logger = logging.getLogger(__name__)

client: AsyncIOMotorClient | None = None
db: AsyncIOMotorDatabase | None = None

# collection -> list of (keys, options)
INDEXES = {
    "mentor_profiles": [
        ([("profile_id", ASCENDING)], {"unique": True}),
        ([("is_accepting", ASCENDING), ("avg_rating", DESCENDING)], {}),
    ],
    "candidate_profiles": [
        ([("profile_id", ASCENDING)], {"unique": True}),
    ],
    "mentor_assignments": [
        ([("assignment_id", ASCENDING)], {"unique": True}),
        ([("candidate_id", ASCENDING), ("created_at", DESCENDING)], {}),
        ([("mentor_id", ASCENDING), ("created_at", DESCENDING)], {}),
    ],
    "notifications": [
        ([("notification_id", ASCENDING)], {"unique": True}),
        ([("user_id", ASCENDING), ("created_at", DESCENDING)], {}),
    ],
}


async def connect_db(mongo_url: str | None = None, db_name: str | None = None) -> AsyncIOMotorDatabase:
    global client, db
    mongo_url = mongo_url or os.getenv("MONGODB_URL", "mongodb://localhost:27017")
    db_name = db_name or os.getenv("MONGODB_DB_NAME", "third_academy")
    client = AsyncIOMotorClient(mongo_url)
    db = client[db_name]

    for collection, indexes in INDEXES.items():
        for keys, options in indexes:
            await db[collection].create_index(keys, **options)

    logger.info("Connected to MongoDB database %s", db_name)
    return db


async def close_db() -> None:
    global client, db
    if client:
        client.close()
    client = None
    db = None


def get_db() -> AsyncIOMotorDatabase:
    assert db is not None, "Database not connected. Call connect_db() first."
    return db
