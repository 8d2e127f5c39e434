from app.services.mongo_service import MongoService, mongo_service


async def connect_to_mongo():
    """Create database connection and indexes"""
    await mongo_service.connect()
    await mongo_service.ensure_indexes()


async def close_mongo_connection():
    """Close database connection"""
    await mongo_service.close()


def get_store() -> MongoService:
    return mongo_service
