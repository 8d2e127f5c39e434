"""
Candidate retriever: loads catalog partitions for a declared geography
"""
import logging
from typing import Any, Dict, List, Optional

from ..models.program import ProgramFamily, ProgramRecord
from ..utils.validators import normalize_region_slug
from .amount_estimator import classify_program_family
from .mongo_service import MongoService, mongo_service

logger = logging.getLogger(__name__)

FAMILY_VALUES = frozenset(family.value for family in ProgramFamily)
AMOUNT_FIELDS = ("min", "max", "base", "monthly")


def _numeric_amounts(raw: Any) -> Dict[str, float]:
    """Keep only usable numeric amount figures; free-text figures are dropped"""
    if not isinstance(raw, dict):
        return {}
    amounts = {}
    for key in AMOUNT_FIELDS:
        value = raw.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 0:
            amounts[key] = value
    return amounts


def map_catalog_document(doc: Dict[str, Any]) -> ProgramRecord:
    """
    Build a ProgramRecord from a stored catalog document

    Top-level columns win over the nested ``aide_data`` payload kept by the loader.
    """
    aide_data = doc.get("aide_data") or {}
    source = aide_data.get("source") or {}
    online = (aide_data.get("applicationProcess") or {}).get("online") or {}
    eligibility = aide_data.get("eligibility") or {}

    name = doc.get("aide_name") or aide_data.get("name") or ""
    category = doc.get("aide_category") or aide_data.get("category") or "social"

    family = doc.get("family")
    if family not in FAMILY_VALUES:
        family = classify_program_family(name, category)

    return ProgramRecord(
        id=str(doc.get("aide_id") or aide_data.get("id") or doc.get("_id")),
        name=name,
        description=doc.get("aide_description") or aide_data.get("description") or "",
        category=category,
        region=doc.get("region_name") or "National",
        region_id=doc.get("region_id"),
        profile_type=doc.get("profile_type"),
        profile_subtype=doc.get("profile_subtype"),
        eligibility={
            "nationality": eligibility.get("nationality"),
            "age_range": eligibility.get("ageRange") or eligibility.get("age_range") or {},
            "min_age": eligibility.get("minAge", eligibility.get("min_age")),
            "max_age": eligibility.get("maxAge", eligibility.get("max_age")),
            "requires_children": bool(
                eligibility.get("requiresChildren", eligibility.get("requires_children", False))
            ),
        },
        amount=_numeric_amounts(aide_data.get("amount")),
        organism=aide_data.get("organism") or "CAF",
        source_url=source.get("url") or doc.get("source_url"),
        application_url=online.get("url"),
        content_text=doc.get("content_text"),
        family=family,
    )


class CatalogService:
    """Resolves a geography to catalog candidates"""

    def __init__(self, store: Optional[MongoService] = None):
        self.store = store or mongo_service

    async def fetch_candidates(self, region: Optional[str]) -> List[ProgramRecord]:
        """
        Load candidate programs for a geography

        Args:
            region: Raw geography code as declared by the user

        Returns:
            Deduplicated records in catalog order; empty on data-store errors
        """
        region_slug = normalize_region_slug(region)
        logger.info(f"Fetching aides for region {region!r} (slug {region_slug!r})")

        try:
            documents = []
            if region_slug:
                documents = await self.store.find_programs_by_region(region_slug)

            if not documents:
                logger.info("No region-specific aides found, fetching national aides")
                documents = await self.store.find_national_programs()

        except Exception as e:
            logger.error(f"Failed to fetch aides from catalog for region {region!r}: {e}")
            return []

        records = self._deduplicate(self._map_documents(documents))
        logger.info(f"Found {len(records)} aides for region: {region}")
        return records

    def _map_documents(self, documents: List[Dict[str, Any]]) -> List[ProgramRecord]:
        records = []
        for doc in documents:
            try:
                records.append(map_catalog_document(doc))
            except ValueError as e:
                # Malformed ingestion rows are skipped, not fatal
                logger.warning(f"Skipping malformed catalog document {doc.get('_id')}: {e}")
        return records

    @staticmethod
    def _deduplicate(records: List[ProgramRecord]) -> List[ProgramRecord]:
        seen = set()
        unique = []
        for record in records:
            key = record.dedup_key()
            if key in seen:
                continue
            seen.add(key)
            unique.append(record)
        return unique


# Global catalog service instance
catalog_service = CatalogService()
