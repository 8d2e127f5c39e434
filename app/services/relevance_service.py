"""
Relevance classifier: external LLM judgement with a deterministic keyword fallback
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..config import settings
from ..models.program import ProgramRecord
from ..models.situation import HousingStatus, Nationality, UserSituation
from ..models.simulation import DecisionStage, EligibilityDecision
from ..utils.validators import normalize_text
from .keywords import CHILD_PATTERN, DISABILITY_PATTERN, SENIOR_PATTERN, UNEMPLOYMENT_PATTERN
from .llm_service import LLMService, llm_service
from .relevance_cache import RelevanceCache, relevance_cache

logger = logging.getLogger(__name__)

PATH_LLM = "llm"
PATH_CACHE = "cache"
PATH_FALLBACK = "fallback"
PATH_NONE = "none"

NATIONALITY_LABELS = {
    Nationality.CITIZEN: "Française",
    Nationality.EU: "UE",
    Nationality.NON_EU: "Non-UE",
}

HOUSING_LABELS = {
    HousingStatus.RENTER: "Locataire",
    HousingStatus.OWNER: "Propriétaire",
    HousingStatus.OTHER: "Autre",
}


@dataclass
class RelevanceOutcome:
    retained: List[ProgramRecord] = field(default_factory=list)
    path: str = PATH_NONE
    excluded: List[EligibilityDecision] = field(default_factory=list)


def _excluded(candidates: List[ProgramRecord], retained: List[ProgramRecord], stage: DecisionStage,
              reason: str) -> List[EligibilityDecision]:
    kept = {id(record) for record in retained}
    return [
        EligibilityDecision(record, False, stage, reason)
        for record in candidates if id(record) not in kept
    ]


def build_profile_summary(situation: UserSituation) -> str:
    """Human readable summary of the situation sent to the classifier"""
    status = "Étudiant" if situation.is_student else (situation.residence_status or "Non précisé")

    parts = [
        f"- Âge: {situation.age} ans",
        f"- Nationalité: {NATIONALITY_LABELS[situation.nationality]}",
        f"- Statut: {status}",
        f"- Logement: {HOUSING_LABELS[situation.housing_status]}",
    ]
    if situation.rent:
        parts.append(f"- Loyer: {situation.rent:g}€/mois")
    parts.append(f"- Revenus: {situation.income_bracket:g}€/mois")
    parts.append(
        f"- Enfants: Oui ({situation.number_of_children})" if situation.has_children else "- Enfants: Non"
    )
    parts.append(f"- Emploi: {situation.employment_status.value}")
    parts.append(f"- Handicap: {'Oui' if situation.has_disability else 'Non'}")
    if situation.years_in_country:
        parts.append(f"- Années en France: {situation.years_in_country:g}")

    return '\n'.join(parts)


def keyword_fallback(candidates: List[ProgramRecord], situation: UserSituation) -> List[ProgramRecord]:
    """
    Deterministic relevance heuristic. Excludes candidates whose name or description
    carries disqualifying keywords for the situation. Never raises.

    Args:
        candidates: Records that passed the hard rules
        situation: User situation

    Returns:
        Retained records in input order
    """
    disqualifying = []
    if not situation.has_children:
        disqualifying.append(CHILD_PATTERN)
    if not situation.has_disability:
        disqualifying.append(DISABILITY_PATTERN)
    if situation.age < settings.senior_age_threshold:
        disqualifying.append(SENIOR_PATTERN)
    if situation.is_student:
        disqualifying.append(UNEMPLOYMENT_PATTERN)

    retained = []
    for record in candidates:
        combined = normalize_text(f"{record.name} {record.description}")
        if any(pattern.search(combined) for pattern in disqualifying):
            logger.debug(f"Fallback dropped {record.name}")
            continue
        retained.append(record)
    return retained


def fallback_outcome(candidates: List[ProgramRecord], situation: UserSituation) -> RelevanceOutcome:
    """Keyword heuristic result, used whenever the classifier cannot answer"""
    retained = keyword_fallback(candidates, situation)
    logger.info(f"Keyword fallback kept {len(retained)} of {len(candidates)} aides")
    return RelevanceOutcome(
        retained, PATH_FALLBACK, _excluded(candidates, retained, DecisionStage.FALLBACK, "disqualifying keyword")
    )


class RelevanceService:
    """Two-tier relevance classifier backed by a shared cache"""

    def __init__(self, llm: Optional[LLMService] = None, cache: Optional[RelevanceCache] = None):
        self.llm = llm or llm_service
        self.cache = cache if cache is not None else relevance_cache

    async def classify(self, candidates: List[ProgramRecord], situation: UserSituation) -> RelevanceOutcome:
        """
        Keep the candidates that are topically relevant to the situation

        Args:
            candidates: Survivors of the deterministic filter
            situation: User situation

        Returns:
            RelevanceOutcome with retained records (input order) and the path that decided
        """
        if not candidates:
            return RelevanceOutcome([], PATH_NONE)

        candidate_ids = [record.id for record in candidates]
        profile_summary = build_profile_summary(situation)
        key = self.cache.build_key(profile_summary, candidate_ids, settings.openrouter_model)

        async def compute() -> Optional[List[str]]:
            return await self._ask_classifier(candidates, profile_summary)

        try:
            retained_ids, from_cache = await self.cache.get_or_compute(
                key, compute, settings.llm_timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning(f"Relevance classifier timed out after {settings.llm_timeout_seconds}s, using keyword fallback")
            return fallback_outcome(candidates, situation)

        if not retained_ids:
            logger.warning("Relevance classifier gave no usable answer, using keyword fallback")
            return fallback_outcome(candidates, situation)

        wanted = set(retained_ids)
        retained = [record for record in candidates if record.id in wanted]
        path = PATH_CACHE if from_cache else PATH_LLM
        logger.info(f"Relevance classifier ({path}) kept {len(retained)} of {len(candidates)} aides")
        return RelevanceOutcome(
            retained, path, _excluded(candidates, retained, DecisionStage.CLASSIFIER, "not relevant to profile")
        )

    async def _ask_classifier(self, candidates: List[ProgramRecord], profile_summary: str) -> Optional[List[str]]:
        """Call the LLM and map its answer (ids or names) back to candidate ids"""
        response = await self.llm.classify_relevance(
            profile_summary,
            [record.to_candidate_summary() for record in candidates],
        )
        if not response.get("success"):
            logger.warning(f"Relevance classifier failed: {response.get('error')}")
            return None

        answered = set(response.get("retained_ids") or [])
        matched = [record.id for record in candidates if record.id in answered or record.name in answered]
        return matched or None


# Global relevance service instance
relevance_service = RelevanceService()
