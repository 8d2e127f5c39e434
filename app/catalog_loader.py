"""
Knowledge base loader: turns the regions -> profiles -> aides JSON into catalog documents

Usage:
    python -m app.catalog_loader knowledge_base/data.json
"""
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models.program import ProgramFamily
from .services.amount_estimator import classify_program_family
from .services.errors import ExternalServiceError
from .services.mongo_service import MongoService
from .utils.validators import normalize_region_slug

logger = logging.getLogger(__name__)

UPSERT_CHUNK_SIZE = 100


def flatten_to_text(value: Any) -> str:
    """
    Flatten nested JSON into searchable text

    Args:
        value: Any JSON value

    Returns:
        "key: value" pairs and list items joined by spaces
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return ' '.join(flatten_to_text(item) for item in value)
    if isinstance(value, dict):
        return ' '.join(f"{key}: {flatten_to_text(item)}" for key, item in value.items())
    return ""


def transform_aide(
    aide: Dict[str, Any],
    region: Dict[str, Any],
    profile_type: str,
    profile_subtype: Optional[str] = None
) -> Dict[str, Any]:
    """Build one catalog document with its searchable text and estimation family"""
    region_name = region.get("name") or "National"
    content_parts = [
        aide.get("name"),
        aide.get("description"),
        flatten_to_text(aide.get("eligibility")),
        flatten_to_text(aide.get("amount")),
        flatten_to_text(aide.get("applicationProcess")),
        flatten_to_text(aide.get("requiredDocuments")),
        region_name,
        profile_type,
        profile_subtype,
    ]
    family: ProgramFamily = classify_program_family(aide.get("name"), aide.get("category"))

    return {
        "region_id": normalize_region_slug(region.get("id")) or None,
        "region_name": region_name,
        "region_code": region.get("code"),
        "departments": region.get("departments"),
        "profile_type": profile_type,
        "profile_subtype": profile_subtype,
        "aide_id": aide["id"],
        "aide_name": aide.get("name"),
        "aide_description": aide.get("description"),
        "aide_category": aide.get("category"),
        "aide_data": aide,
        "content_text": ' '.join(part for part in content_parts if part),
        "source_url": (aide.get("source") or {}).get("url"),
        "family": family.value,
    }


def extract_aides(knowledge_base: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Walk regions -> profiles -> aides, including nationality sub-groups of a profile

    Aides without an id are skipped.
    """
    documents = []
    for region in knowledge_base.get("regions") or []:
        for profile_type, profile_data in (region.get("profiles") or {}).items():
            if not isinstance(profile_data, dict):
                continue

            groups = [(None, profile_data)]
            groups += [
                (subtype, data) for subtype, data in profile_data.items()
                if isinstance(data, dict)
            ]

            for subtype, group in groups:
                aides = group.get("aides")
                if not isinstance(aides, list):
                    continue
                for aide in aides:
                    if not isinstance(aide, dict) or not aide.get("id"):
                        logger.warning(f"Skipping aide without id in {region.get('name')}/{profile_type}")
                        continue
                    documents.append(transform_aide(aide, region, profile_type, subtype))

    return documents


async def load_catalog(path: str, store: MongoService) -> int:
    """
    Load a knowledge base file into the catalog collection

    Args:
        path: Path to the knowledge base JSON
        store: Connected MongoDB service

    Returns:
        Number of documents written

    Raises:
        ExternalServiceError: the catalog could not be written
    """
    knowledge_base = json.loads(Path(path).read_text(encoding="utf-8"))
    logger.info(f"Loaded {len(knowledge_base.get('regions') or [])} regions from {path}")

    documents = extract_aides(knowledge_base)
    logger.info(f"Extracted {len(documents)} aides")

    written = 0
    for start in range(0, len(documents), UPSERT_CHUNK_SIZE):
        chunk = documents[start:start + UPSERT_CHUNK_SIZE]
        try:
            written += await store.upsert_programs(chunk)
        except Exception as e:
            raise ExternalServiceError("MongoDB", f"catalog upsert failed at document {start}: {e}")

    logger.info(f"Catalog load complete: {written} documents written")
    return written


async def _main(path: str):
    store = MongoService()
    await store.connect()
    try:
        await store.ensure_indexes()
        await load_catalog(path, store)
    finally:
        await store.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) != 2:
        print("Usage: python -m app.catalog_loader <knowledge_base.json>")
        sys.exit(1)
    asyncio.run(_main(sys.argv[1]))
