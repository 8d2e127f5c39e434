"""Pytest configuration and shared fixtures."""

from typing import Any, Dict, List
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.situation import UserSituation
from app.services.catalog_service import CatalogService
from app.services.localization_service import LocalizationService
from app.services.relevance_cache import RelevanceCache
from app.services.relevance_service import RelevanceService
from app.services.saved_aide_service import SavedAideService
from app.services.simulation_service import SimulationService

from tests.fakes import FakeStore, catalog_document


@pytest.fixture
def housing_doc() -> Dict[str, Any]:
    return catalog_document(
        "apl",
        "APL - Aide personnalisée au logement",
        "Aide au paiement du loyer pour les locataires",
        category="housing",
        profile_type="students",
        eligibility={"nationality": ["all"], "ageRange": {"min": 16}},
        amount={"min": 50, "max": 500},
    )


@pytest.fixture
def child_allowance_doc() -> Dict[str, Any]:
    return catalog_document(
        "allocations-familiales",
        "Allocations familiales",
        "Versées aux familles ayant au moins deux enfants à charge",
        category="family",
        eligibility={"nationality": ["all"], "requiresChildren": True},
    )


@pytest.fixture
def catalog_docs(housing_doc, child_allowance_doc) -> List[Dict[str, Any]]:
    return [
        housing_doc,
        child_allowance_doc,
        catalog_document(
            "cvec",
            "CVEC - Contribution vie étudiante et de campus",
            "Contribution obligatoire pour l'inscription dans l'enseignement supérieur",
            category="education",
            profile_type="students",
        ),
        catalog_document(
            "aah",
            "AAH - Allocation aux adultes handicapés",
            "Revenu minimum pour les personnes en situation de handicap",
            category="health",
            region_id=None,
            region_name="National",
            amount={"monthly": 1016},
        ),
        catalog_document(
            "complementaire-sante",
            "Complémentaire santé solidaire",
            "Prise en charge des dépenses de santé",
            category="health",
            region_id=None,
            region_name="National",
        ),
    ]


@pytest.fixture
def store(catalog_docs) -> FakeStore:
    return FakeStore(catalog_docs)


@pytest.fixture
def student_situation() -> UserSituation:
    return UserSituation(
        age=22,
        nationality="non-eu",
        region="ile-de-france",
        housing_status="renter",
        rent=600,
        income_bracket=400,
        has_children=False,
        employment_status="student",
    )


@pytest.fixture
def failing_llm() -> AsyncMock:
    """LLM stub whose calls always report failure."""
    llm = AsyncMock()
    llm.classify_relevance.return_value = {"success": False, "error": "upstream error"}
    llm.translate_texts.return_value = {"success": False, "error": "upstream error"}
    return llm


@pytest.fixture
def relevance_cache() -> RelevanceCache:
    return RelevanceCache(ttl_seconds=60, max_entries=16)


@pytest.fixture
def build_simulation_service(store, relevance_cache):
    """Factory wiring a SimulationService over the fake store and a given LLM stub."""

    def build(llm) -> SimulationService:
        return SimulationService(
            store=store,
            catalog=CatalogService(store),
            relevance=RelevanceService(llm=llm, cache=relevance_cache),
            localizer=LocalizationService(llm=llm),
        )

    return build


@pytest.fixture
def saved_aide_service(store) -> SavedAideService:
    return SavedAideService(store)


@pytest.fixture
def test_client() -> TestClient:
    """Create FastAPI test client without running the MongoDB lifespan."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Ensure FastAPI dependency overrides are reset between tests."""
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}
