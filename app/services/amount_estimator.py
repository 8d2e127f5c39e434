"""
Amount estimator: monthly benefit estimates per program family
"""
import logging
import math
from typing import Callable, Dict, List, Optional

from ..config import settings
from ..models.program import ProgramFamily, ProgramRecord
from ..models.situation import UserSituation
from ..models.simulation import EstimatedAide
from ..utils.validators import normalize_text
from .keywords import (
    RENT_LINKED_PATTERN,
    SCHOLARSHIP_PATTERN,
    MINIMUM_INCOME_PATTERN,
    ACTIVITY_BONUS_PATTERN,
    TRANSPORT_PASS_PATTERN,
    MANDATORY_FEE_PATTERN,
    FAMILY_CATEGORIES,
    EDUCATION_CATEGORIES,
    DEFAULT_CATEGORY_AMOUNTS,
    DEFAULT_AMOUNT,
)

logger = logging.getLogger(__name__)

# Name signals are checked before category signals, in this order
NAME_SIGNALS = (
    (RENT_LINKED_PATTERN, ProgramFamily.HOUSING_RENT),
    (SCHOLARSHIP_PATTERN, ProgramFamily.STUDENT_SCHOLARSHIP),
    (MINIMUM_INCOME_PATTERN, ProgramFamily.MINIMUM_INCOME),
    (ACTIVITY_BONUS_PATTERN, ProgramFamily.ACTIVITY_BONUS),
    (TRANSPORT_PASS_PATTERN, ProgramFamily.TRANSPORT_PASS),
    (MANDATORY_FEE_PATTERN, ProgramFamily.MANDATORY_FEE),
)


def classify_program_family(name: Optional[str], category: Optional[str]) -> ProgramFamily:
    """
    Recognize the estimation family of a program from its name and category.
    Meant to run once per record, at ingestion or when the record is built.
    """
    folded_name = normalize_text(name)
    for pattern, family in NAME_SIGNALS:
        if pattern.search(folded_name):
            return family

    folded_category = normalize_text(category)
    if folded_category in FAMILY_CATEGORIES:
        return ProgramFamily.FAMILY_ALLOWANCE
    if folded_category in EDUCATION_CATEGORIES:
        return ProgramFamily.STUDENT_AID
    return ProgramFamily.GENERIC


def income_multiplier(income: Optional[float]) -> float:
    """Step function of declared monthly income, never increasing with income"""
    if not income or income < 500:
        return 1.0
    if income < 1000:
        return 0.9
    if income < 1500:
        return 0.7
    if income < 2000:
        return 0.5
    return 0.3


def default_category_amount(category: Optional[str]) -> float:
    return DEFAULT_CATEGORY_AMOUNTS.get(normalize_text(category), DEFAULT_AMOUNT)


def _round_amount(value: float) -> int:
    """Round half up to the nearest currency unit, clamped at zero"""
    if value is None or value <= 0:
        return 0
    return int(math.floor(value + 0.5))


# Family estimators: (record, situation) -> monthly amount before rounding

def _estimate_housing_rent(record: ProgramRecord, situation: UserSituation) -> float:
    rent = situation.rent or 0
    if rent > 0:
        cap = record.amount.max or settings.default_housing_cap
        return min(rent * 0.5 * income_multiplier(situation.income_bracket), cap)
    return record.amount.base_amount or record.amount.max or 250


def _estimate_scholarship(record: ProgramRecord, situation: UserSituation) -> float:
    average = ((record.amount.min or 0) + (record.amount.max or 0)) / 2 or 350
    if situation.income_bracket < 1500:
        return average
    return average * 0.5


def _estimate_minimum_income(record: ProgramRecord, situation: UserSituation) -> float:
    if situation.income_bracket >= 1000:
        return 0
    if situation.has_children:
        return 750 + situation.number_of_children * 200
    return 565


def _estimate_activity_bonus(record: ProgramRecord, situation: UserSituation) -> float:
    if situation.is_working and situation.income_bracket < 2000:
        return max(0, 200 - situation.income_bracket * 0.1)
    return 0


def _estimate_transport_pass(record: ProgramRecord, situation: UserSituation) -> float:
    # Average monthly saving on the pass
    return 40


def _estimate_mandatory_fee(record: ProgramRecord, situation: UserSituation) -> float:
    # A fee is never presented as a benefit
    return 0


def _estimate_family_allowance(record: ProgramRecord, situation: UserSituation) -> float:
    if not situation.has_children:
        return 0
    children = situation.number_of_children or 1
    if record.amount.base_amount:
        return record.amount.base_amount
    return 140 * (children - 1) if children >= 2 else 0


def _estimate_student_aid(record: ProgramRecord, situation: UserSituation) -> float:
    if not situation.is_student:
        return 0
    return record.amount.base_amount or record.amount.max or 100


def _estimate_generic(record: ProgramRecord, situation: UserSituation) -> float:
    return record.amount.base_amount or default_category_amount(record.category)


FAMILY_ESTIMATORS: Dict[ProgramFamily, Callable[[ProgramRecord, UserSituation], float]] = {
    ProgramFamily.HOUSING_RENT: _estimate_housing_rent,
    ProgramFamily.STUDENT_SCHOLARSHIP: _estimate_scholarship,
    ProgramFamily.MINIMUM_INCOME: _estimate_minimum_income,
    ProgramFamily.ACTIVITY_BONUS: _estimate_activity_bonus,
    ProgramFamily.TRANSPORT_PASS: _estimate_transport_pass,
    ProgramFamily.MANDATORY_FEE: _estimate_mandatory_fee,
    ProgramFamily.FAMILY_ALLOWANCE: _estimate_family_allowance,
    ProgramFamily.STUDENT_AID: _estimate_student_aid,
    ProgramFamily.GENERIC: _estimate_generic,
}


def estimate_monthly_amount(record: ProgramRecord, situation: UserSituation) -> int:
    """
    Estimate the monthly amount of one program for one situation

    Args:
        record: Program with its precomputed family
        situation: User situation

    Returns:
        Non-negative whole currency units
    """
    estimator = FAMILY_ESTIMATORS.get(record.family, _estimate_generic)
    return _round_amount(estimator(record, situation))


class AmountEstimator:
    """Turns surviving programs into estimated aides"""

    def estimate(self, records: List[ProgramRecord], situation: UserSituation) -> List[EstimatedAide]:
        aides = []
        for record in records:
            monthly = estimate_monthly_amount(record, situation)
            aides.append(EstimatedAide(
                id=record.id,
                name=record.name,
                category=record.category,
                category_key=normalize_text(record.category) or "social",
                description=record.description or record.content_text or "",
                monthly_amount=monthly,
                organism=record.organism,
                region=record.region,
                source_url=record.source_url,
                application_url=record.application_url,
                family=record.family,
                is_fee=record.family == ProgramFamily.MANDATORY_FEE,
            ))

        total = sum(aide.monthly_amount for aide in aides)
        logger.info(f"Estimated amounts for {len(aides)} aides, {total}/month in total")
        return aides


# Global amount estimator instance
amount_estimator = AmountEstimator()
