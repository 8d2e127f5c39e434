"""
Simulation pipeline orchestration, result aggregation and simulation history
"""
import logging
from typing import Any, Dict, List, Optional

from ..config import settings
from ..models.situation import UserSituation
from ..models.simulation import EstimatedAide, SimulationResult
from ..utils.validators import generate_record_id
from .amount_estimator import AmountEstimator, amount_estimator
from .catalog_service import CatalogService, catalog_service
from .eligibility_service import EligibilityService, eligibility_service
from .errors import NotFoundError
from .localization_service import LocalizationService, localization_service
from .mongo_service import MongoService, mongo_service
from .relevance_service import RelevanceService, fallback_outcome, relevance_service

logger = logging.getLogger(__name__)


def _first_by_id(items: List[Any]) -> List[Any]:
    """Keep the first occurrence of each id, in input order"""
    seen = set()
    unique = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        unique.append(item)
    return unique


def _result_from_document(doc: Dict[str, Any]) -> SimulationResult:
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    data.pop("user_id", None)
    return SimulationResult(**data)


class SimulationService:
    """Runs the eligibility pipeline and manages stored simulation results"""

    def __init__(
        self,
        store: Optional[MongoService] = None,
        catalog: Optional[CatalogService] = None,
        eligibility: Optional[EligibilityService] = None,
        relevance: Optional[RelevanceService] = None,
        estimator: Optional[AmountEstimator] = None,
        localizer: Optional[LocalizationService] = None,
    ):
        self.store = store or mongo_service
        self.catalog = catalog or catalog_service
        self.eligibility = eligibility or eligibility_service
        self.relevance = relevance or relevance_service
        self.estimator = estimator or amount_estimator
        self.localizer = localizer or localization_service

    async def run_simulation(self, situation: UserSituation, language: str = "fr") -> SimulationResult:
        """
        Run the full pipeline for one situation

        Retriever -> hard rules -> relevance -> amounts -> localization -> aggregation.
        Catalog, classifier and translation failures degrade the answer but never fail it.

        Args:
            situation: Validated user situation
            language: Display language

        Returns:
            SimulationResult (not yet persisted)
        """
        language = (language or settings.native_language).strip().lower()
        logger.info(f"Running simulation for region {situation.region!r}, language {language}")

        candidates = await self.catalog.fetch_candidates(situation.region)
        # The same program can be listed under several profiles
        survivors = _first_by_id(self.eligibility.filter_candidates(candidates, situation))

        try:
            outcome = await self.relevance.classify(survivors, situation)
        except Exception as e:
            logger.warning(f"Relevance classification raised {e}, using keyword fallback")
            outcome = fallback_outcome(survivors, situation)
        for decision in outcome.excluded:
            logger.debug(f"Excluded {decision.record.id} at {decision.stage.value}: {decision.reason}")

        aides = self.estimator.estimate(outcome.retained, situation)
        aides = await self.localizer.localize(aides, language)

        result = self.aggregate(aides, situation, language, outcome.path)
        logger.info(
            f"Simulation {result.id}: {len(candidates)} candidates, {len(survivors)} after rules, "
            f"{len(result.eligible_aides)} retained via {outcome.path}, {result.total_monthly}/month"
        )
        return result

    def aggregate(
        self,
        aides: List[EstimatedAide],
        situation: UserSituation,
        language: str,
        classifier_path: str,
    ) -> SimulationResult:
        """Collapse duplicate program ids (first wins) and compute totals"""
        unique = _first_by_id(aides)

        return SimulationResult(
            id=generate_record_id(),
            eligible_aides=unique,
            total_monthly=sum(aide.monthly_amount for aide in unique),
            profile=situation.model_dump(mode="json"),
            language=language,
            classifier_path=classifier_path,
        )

    async def save_simulation(self, user_id: str, result: SimulationResult) -> Optional[str]:
        """
        Append a result to the user's history. Failures are logged, never raised.

        Returns:
            Stored id, or None when persistence failed
        """
        document = result.model_dump(mode="python")
        document["_id"] = document.pop("id")
        document["user_id"] = user_id

        try:
            stored_id = await self.store.insert_simulation(document)
            logger.info(f"Saved simulation {stored_id} for user {user_id}")
            return stored_id
        except Exception as e:
            logger.error(f"Failed to save simulation {result.id} for user {user_id}: {e}")
            return None

    async def get_simulation_history(self, user_id: str, limit: int = settings.history_default_limit) -> List[SimulationResult]:
        documents = await self.store.find_simulations(user_id, limit)
        return [_result_from_document(doc) for doc in documents]

    async def get_latest_simulation(self, user_id: str) -> Optional[SimulationResult]:
        history = await self.get_simulation_history(user_id, 1)
        return history[0] if history else None

    async def get_simulation(self, user_id: str, simulation_id: str) -> SimulationResult:
        doc = await self.store.find_simulation(user_id, simulation_id)
        if not doc:
            raise NotFoundError("Simulation", {"id": simulation_id})
        return _result_from_document(doc)

    async def delete_simulation(self, user_id: str, simulation_id: str):
        """Delete one stored result. Bookmarks created from it are kept."""
        deleted = await self.store.delete_simulation(user_id, simulation_id)
        if not deleted:
            raise NotFoundError("Simulation", {"id": simulation_id})
        logger.info(f"Deleted simulation {simulation_id} for user {user_id}")


# Global simulation service instance
simulation_service = SimulationService()
