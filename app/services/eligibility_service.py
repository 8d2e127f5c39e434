"""
Deterministic eligibility filter: hard rules applied to each candidate independently
"""
import logging
from typing import List, Optional

from ..models.program import ProgramRecord
from ..models.situation import EmploymentStatus, HousingStatus, Nationality, UserSituation
from ..models.simulation import DecisionStage, EligibilityDecision
from ..utils.validators import normalize_text
from .keywords import (
    ALL_TOKEN,
    NEGATION_TOKEN,
    CITIZEN_TOKENS,
    EU_TOKENS,
    RESIDENCE_PERMIT_TOKENS,
    STRICT_NATIONALITY_MARKERS,
    PROFILE_SYNONYMS,
    STUDENT_STATUSES,
    WORKER_STATUSES,
    WORKER_EMPLOYMENT,
    JOBSEEKER_STATUSES,
    HOUSING_CATEGORIES,
    RENT_LINKED_PATTERN,
)

logger = logging.getLogger(__name__)


def _normalize_entry(value: Optional[str]) -> str:
    entry = normalize_text(value).replace('-', '_').replace(' ', '_')
    if entry.startswith("noneu"):
        entry = "non_eu" + entry[len("noneu"):]
    return entry


def _entry_admits(entry: str, nationality: Nationality) -> bool:
    """Whether one allow-list entry admits the user's nationality class"""
    tokens = set(entry.split('_'))
    if ALL_TOKEN in tokens:
        return True

    negated = NEGATION_TOKEN in tokens
    if nationality == Nationality.CITIZEN:
        return not negated and bool(tokens & CITIZEN_TOKENS)
    if nationality == Nationality.EU:
        return not negated and bool(tokens & EU_TOKENS)
    # Non-EU: explicit non-EU entries and anything implying a residence permit
    return (negated and bool(tokens & EU_TOKENS)) or bool(tokens & RESIDENCE_PERMIT_TOKENS)


def matches_nationality(allowed: List[str], nationality: Nationality) -> bool:
    """
    Check the nationality rule

    Args:
        allowed: Program's nationality allow-list
        nationality: User's nationality class

    Returns:
        False only when no entry admits the user and an entry is a strict exclusion marker
    """
    entries = [_normalize_entry(value) for value in allowed if value]
    if not entries:
        return True

    if any(_entry_admits(entry, nationality) for entry in entries):
        return True

    return not any(entry in STRICT_NATIONALITY_MARKERS for entry in entries)


def matches_profile(profile_type: Optional[str], situation: UserSituation) -> bool:
    """
    Check the record's target profile against the user's residence/employment status

    Args:
        profile_type: students / workers / jobseekers / all, in any spelling
        situation: User situation

    Returns:
        True if the profile matches or the record targets no known profile
    """
    if not profile_type:
        return True

    key = _normalize_entry(profile_type)
    if key == ALL_TOKEN:
        return True

    target = next((name for name, synonyms in PROFILE_SYNONYMS.items() if key in synonyms), None)
    if target is None:
        return True

    residence = normalize_text(situation.residence_status)
    employment = situation.employment_status

    if target == "students":
        return residence in STUDENT_STATUSES or employment == EmploymentStatus.STUDENT
    if target == "workers":
        return residence in WORKER_STATUSES or employment.value in WORKER_EMPLOYMENT
    return residence in JOBSEEKER_STATUSES or employment == EmploymentStatus.UNEMPLOYED


class EligibilityService:
    """Applies hard rules to catalog candidates"""

    def evaluate(self, record: ProgramRecord, situation: UserSituation) -> EligibilityDecision:
        """
        Run every applicable hard rule on one record

        Args:
            record: Candidate program
            situation: User situation

        Returns:
            EligibilityDecision naming the first failed rule, if any
        """
        reason = self._first_failure(record, situation)
        if reason:
            logger.debug(f"Excluding {record.name} - {reason}")
            return EligibilityDecision(record, False, DecisionStage.HARD_RULE, reason)
        return EligibilityDecision(record, True, DecisionStage.HARD_RULE)

    def filter_candidates(self, records: List[ProgramRecord], situation: UserSituation) -> List[ProgramRecord]:
        """
        Prune candidates that fail any hard rule. Input order is preserved.

        Args:
            records: Candidates from the retriever
            situation: User situation

        Returns:
            Surviving records
        """
        logger.info(
            f"Filtering {len(records)} aides (nationality={situation.nationality.value}, "
            f"age={situation.age}, housing={situation.housing_status.value})"
        )
        survivors = [
            decision.record
            for decision in (self.evaluate(record, situation) for record in records)
            if decision.eligible
        ]
        logger.info(f"Filtered to {len(survivors)} eligible aides")
        return survivors

    def _first_failure(self, record: ProgramRecord, situation: UserSituation) -> Optional[str]:
        eligibility = record.eligibility

        if not matches_nationality(eligibility.nationality, situation.nationality):
            return "nationality mismatch"

        age = situation.age
        age_range = eligibility.age_range
        if age_range.min and age < age_range.min:
            return f"below min age {age_range.min}"
        if age_range.max and age > age_range.max:
            return f"above max age {age_range.max}"

        # Legacy flat fields
        if eligibility.min_age and age < eligibility.min_age:
            return f"below min age {eligibility.min_age}"
        if eligibility.max_age and age > eligibility.max_age:
            return f"above max age {eligibility.max_age}"

        if not matches_profile(record.profile_type, situation):
            return f"profile mismatch ({record.profile_type})"

        if (
            situation.housing_status == HousingStatus.OWNER
            and normalize_text(record.category) in HOUSING_CATEGORIES
            and RENT_LINKED_PATTERN.search(normalize_text(record.name))
        ):
            return "owner cannot get rental aid"

        if eligibility.requires_children and not situation.has_children:
            return "requires children"

        return None


# Global eligibility service instance
eligibility_service = EligibilityService()
