import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from app.core.config import settings

logger = logging.getLogger(__name__)

class MongoDatabase:
    """MongoDB connection manager."""
    
    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URL, tz_aware=True)
    mongodb.db = mongodb.client[settings.DATABASE_NAME]
    
    # Create indexes
    await create_indexes(mongodb.db)
    logger.info("Connected to MongoDB: %s", settings.DATABASE_NAME)

async def close_mongo_connection():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
    logger.info("Disconnected from MongoDB")

async def create_indexes(db: AsyncIOMotorDatabase):
    """Create database indexes."""
    sessions = db[settings.SESSIONS_COLLECTION]

    # Human-facing code must be unique; insert_unique relies on it
    await sessions.create_index("numeric_id", unique=True)
    await sessions.create_index("status")
    await sessions.create_index("players.user_id")
    logger.info("Ensured indexes on %s", settings.SESSIONS_COLLECTION)

def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return mongodb.db
