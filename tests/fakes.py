"""In-memory doubles shared by the test suite."""

import copy
from typing import Any, Dict, List, Optional

from pymongo.errors import DuplicateKeyError

NATIONAL_NAMES = ("National", "national")


class FakeStore:
    """In-memory stand-in for MongoService with the same method surface."""

    def __init__(self, catalog: Optional[List[Dict[str, Any]]] = None):
        self.catalog_docs: List[Dict[str, Any]] = list(catalog or [])
        self.simulations: Dict[str, Dict[str, Any]] = {}
        self.saved: Dict[str, Dict[str, Any]] = {}
        self.fail_catalog = False
        self.fail_inserts = False

    async def health_check(self) -> bool:
        return True

    # Catalog
    async def find_programs_by_region(self, region_slug: str) -> List[Dict[str, Any]]:
        if self.fail_catalog:
            raise ConnectionError("catalog unavailable")
        return [
            copy.deepcopy(doc) for doc in self.catalog_docs
            if (doc.get("region_id") or "").startswith(region_slug)
            or doc.get("region_name") in NATIONAL_NAMES
        ]

    async def find_national_programs(self) -> List[Dict[str, Any]]:
        if self.fail_catalog:
            raise ConnectionError("catalog unavailable")
        return [
            copy.deepcopy(doc) for doc in self.catalog_docs
            if doc.get("region_name") in NATIONAL_NAMES or doc.get("region_name") is None
        ]

    async def upsert_programs(self, documents: List[Dict[str, Any]]) -> int:
        for doc in documents:
            key = (doc["aide_id"], doc.get("region_id"), doc.get("profile_type"), doc.get("profile_subtype"))
            self.catalog_docs = [
                existing for existing in self.catalog_docs
                if (existing["aide_id"], existing.get("region_id"),
                    existing.get("profile_type"), existing.get("profile_subtype")) != key
            ]
            self.catalog_docs.append(copy.deepcopy(doc))
        return len(documents)

    # Simulations
    async def insert_simulation(self, document: Dict[str, Any]) -> str:
        if self.fail_inserts:
            raise ConnectionError("write failed")
        self.simulations[document["_id"]] = copy.deepcopy(document)
        return document["_id"]

    async def find_simulations(self, user_id: str, limit: int) -> List[Dict[str, Any]]:
        owned = [doc for doc in self.simulations.values() if doc["user_id"] == user_id]
        owned.sort(key=lambda doc: doc["simulated_at"], reverse=True)
        return copy.deepcopy(owned[:limit])

    async def find_simulation(self, user_id: str, simulation_id: str) -> Optional[Dict[str, Any]]:
        doc = self.simulations.get(simulation_id)
        if doc and doc["user_id"] == user_id:
            return copy.deepcopy(doc)
        return None

    async def delete_simulation(self, user_id: str, simulation_id: str) -> bool:
        doc = self.simulations.get(simulation_id)
        if doc and doc["user_id"] == user_id:
            del self.simulations[simulation_id]
            return True
        return False

    # Saved aides
    async def insert_saved_aide(self, document: Dict[str, Any]) -> Dict[str, Any]:
        for existing in self.saved.values():
            if existing["user_id"] == document["user_id"] and existing["aide_id"] == document["aide_id"]:
                raise DuplicateKeyError("E11000 duplicate key error collection: saved_aides")
        self.saved[document["_id"]] = copy.deepcopy(document)
        return document

    async def find_saved_aides(self, user_id: str) -> List[Dict[str, Any]]:
        owned = [doc for doc in self.saved.values() if doc["user_id"] == user_id]
        owned.sort(key=lambda doc: doc["created_at"], reverse=True)
        return copy.deepcopy(owned)

    async def find_saved_aide(self, user_id: str, saved_id: str) -> Optional[Dict[str, Any]]:
        doc = self.saved.get(saved_id)
        if doc and doc["user_id"] == user_id:
            return copy.deepcopy(doc)
        return None

    async def find_saved_aide_by_program(self, user_id: str, aide_id: str) -> Optional[Dict[str, Any]]:
        for doc in self.saved.values():
            if doc["user_id"] == user_id and doc["aide_id"] == aide_id:
                return copy.deepcopy(doc)
        return None

    async def update_saved_aide(
        self,
        user_id: str,
        saved_id: str,
        update: Dict[str, Any],
        expected_status: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        doc = self.saved.get(saved_id)
        if not doc or doc["user_id"] != user_id:
            return None
        if expected_status is not None and doc["status"] != expected_status:
            return None
        doc.update(copy.deepcopy(update))
        return copy.deepcopy(doc)

    async def delete_saved_aide(self, user_id: str, saved_id: str) -> bool:
        doc = self.saved.get(saved_id)
        if doc and doc["user_id"] == user_id:
            del self.saved[saved_id]
            return True
        return False


def catalog_document(
    aide_id: str,
    name: str,
    description: str = "",
    category: str = "social",
    region_id: Optional[str] = "ile-de-france",
    region_name: str = "Île-de-France",
    profile_type: Optional[str] = "all",
    eligibility: Optional[Dict[str, Any]] = None,
    amount: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Catalog document shaped like the loader's output."""
    return {
        "_id": f"{aide_id}-{region_id}-{profile_type}",
        "region_id": region_id,
        "region_name": region_name,
        "profile_type": profile_type,
        "profile_subtype": None,
        "aide_id": aide_id,
        "aide_name": name,
        "aide_description": description,
        "aide_category": category,
        "aide_data": {
            "id": aide_id,
            "name": name,
            "description": description,
            "category": category,
            "eligibility": eligibility or {},
            "amount": amount or {},
            "source": {"url": f"https://www.service-public.fr/{aide_id}"},
        },
        "content_text": f"{name} {description}",
    }


