"""
MongoDB service for catalog queries and user-owned persistence
"""
import logging
import re
from typing import Any, Dict, List, Optional
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING, ReplaceOne, ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..config import settings

logger = logging.getLogger(__name__)

NATIONAL_REGION_NAMES = ["National", "national"]


class MongoService:
    """Service for MongoDB operations"""

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.db = None

    async def connect(self):
        """Connect to MongoDB"""
        try:
            self.client = AsyncIOMotorClient(settings.mongodb_url)
            self.db = self.client[settings.mongodb_db_name]

            # Test connection
            await self.client.admin.command('ping')
            logger.info("Connected to MongoDB successfully")

        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    async def close(self):
        """Close MongoDB connection"""
        if self.client:
            self.client.close()
            logger.info("MongoDB connection closed")

    async def health_check(self) -> bool:
        """Check MongoDB connection health"""
        try:
            await self.client.admin.command('ping')
            return True
        except Exception:
            return False

    async def ensure_indexes(self):
        """Create the indexes the pipeline relies on"""
        await self.catalog.create_index(
            [("aide_id", ASCENDING), ("region_id", ASCENDING),
             ("profile_type", ASCENDING), ("profile_subtype", ASCENDING)],
            unique=True,
            name="catalog_identity"
        )
        await self.catalog.create_index([("region_name", ASCENDING)], name="catalog_region_name")
        await self.simulations.create_index(
            [("user_id", ASCENDING), ("simulated_at", DESCENDING)],
            name="simulations_by_user"
        )
        # One bookmark per (user, program)
        await self.saved_aides.create_index(
            [("user_id", ASCENDING), ("aide_id", ASCENDING)],
            unique=True,
            name="saved_aide_per_user"
        )
        logger.info("MongoDB indexes ensured")

    @property
    def catalog(self):
        return self.db[settings.catalog_collection]

    @property
    def simulations(self):
        return self.db[settings.simulations_collection]

    @property
    def saved_aides(self):
        return self.db[settings.saved_aides_collection]

    # Catalog operations
    async def find_programs_by_region(self, region_slug: str) -> List[Dict[str, Any]]:
        """Programs whose region slug equals or starts with the given slug, plus nationwide ones"""
        prefix = f"^{re.escape(region_slug)}"
        cursor = self.catalog.find({
            "$or": [
                {"region_id": region_slug},
                {"region_id": {"$regex": prefix}},
                {"region_name": {"$in": NATIONAL_REGION_NAMES}},
            ]
        })
        return [doc async for doc in cursor]

    async def find_national_programs(self) -> List[Dict[str, Any]]:
        """Programs in the nationwide partition"""
        cursor = self.catalog.find({
            "$or": [
                {"region_name": {"$in": NATIONAL_REGION_NAMES}},
                {"region_name": None},
            ]
        })
        return [doc async for doc in cursor]

    async def upsert_programs(self, documents: List[Dict[str, Any]]) -> int:
        """Insert or replace catalog documents on their identity key"""
        if not documents:
            return 0
        try:
            operations = [
                ReplaceOne(
                    {
                        "aide_id": doc["aide_id"],
                        "region_id": doc.get("region_id"),
                        "profile_type": doc.get("profile_type"),
                        "profile_subtype": doc.get("profile_subtype"),
                    },
                    doc,
                    upsert=True
                )
                for doc in documents
            ]
            result = await self.catalog.bulk_write(operations, ordered=False)
            written = result.upserted_count + result.modified_count
            logger.info(f"Catalog upsert: {written} documents written")
            return written
        except Exception as e:
            logger.error(f"Failed to upsert catalog documents: {e}")
            raise

    # Simulation operations (append-only)
    async def insert_simulation(self, document: Dict[str, Any]) -> str:
        """Append a simulation result"""
        try:
            result = await self.simulations.insert_one(document)
            return str(result.inserted_id)
        except Exception as e:
            logger.error(f"Failed to insert simulation: {e}")
            raise

    async def find_simulations(self, user_id: str, limit: int) -> List[Dict[str, Any]]:
        """Most recent simulations first"""
        cursor = (
            self.simulations.find({"user_id": user_id})
            .sort("simulated_at", DESCENDING)
            .limit(limit)
        )
        return [doc async for doc in cursor]

    async def find_simulation(self, user_id: str, simulation_id: str) -> Optional[Dict[str, Any]]:
        return await self.simulations.find_one({"_id": simulation_id, "user_id": user_id})

    async def delete_simulation(self, user_id: str, simulation_id: str) -> bool:
        result = await self.simulations.delete_one({"_id": simulation_id, "user_id": user_id})
        return result.deleted_count > 0

    # Saved aide operations
    async def insert_saved_aide(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a bookmark. Raises DuplicateKeyError when the user already saved the program."""
        try:
            await self.saved_aides.insert_one(document)
            return document
        except DuplicateKeyError:
            raise
        except Exception as e:
            logger.error(f"Failed to insert saved aide: {e}")
            raise

    async def find_saved_aides(self, user_id: str) -> List[Dict[str, Any]]:
        cursor = self.saved_aides.find({"user_id": user_id}).sort("created_at", DESCENDING)
        return [doc async for doc in cursor]

    async def find_saved_aide(self, user_id: str, saved_id: str) -> Optional[Dict[str, Any]]:
        return await self.saved_aides.find_one({"_id": saved_id, "user_id": user_id})

    async def find_saved_aide_by_program(self, user_id: str, aide_id: str) -> Optional[Dict[str, Any]]:
        return await self.saved_aides.find_one({"user_id": user_id, "aide_id": aide_id})

    async def update_saved_aide(
        self,
        user_id: str,
        saved_id: str,
        update: Dict[str, Any],
        expected_status: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Apply an update to a bookmark

        Args:
            user_id: Owner of the bookmark
            saved_id: Bookmark identifier
            update: Fields to set
            expected_status: When given, the update only applies if the stored status still matches

        Returns:
            The updated document, or None if nothing matched
        """
        query = {"_id": saved_id, "user_id": user_id}
        if expected_status is not None:
            query["status"] = expected_status
        return await self.saved_aides.find_one_and_update(
            query,
            {"$set": update},
            return_document=ReturnDocument.AFTER
        )

    async def delete_saved_aide(self, user_id: str, saved_id: str) -> bool:
        result = await self.saved_aides.delete_one({"_id": saved_id, "user_id": user_id})
        return result.deleted_count > 0


# Global MongoDB service instance
mongo_service = MongoService()
