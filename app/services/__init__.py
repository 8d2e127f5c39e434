"""
Services package for the Aides Simulator
"""

from .mongo_service import MongoService
from .llm_service import LLMService
from .catalog_service import CatalogService
from .eligibility_service import EligibilityService
from .relevance_cache import RelevanceCache
from .relevance_service import RelevanceService, RelevanceOutcome
from .amount_estimator import AmountEstimator
from .localization_service import LocalizationService
from .simulation_service import SimulationService
from .saved_aide_service import SavedAideService
from .errors import (
    ServiceError,
    ConflictError,
    NotFoundError,
    InvalidStatusTransitionError,
    ExternalServiceError,
)

__all__ = [
    "MongoService",
    "LLMService",
    "CatalogService",
    "EligibilityService",
    "RelevanceCache",
    "RelevanceService",
    "RelevanceOutcome",
    "AmountEstimator",
    "LocalizationService",
    "SimulationService",
    "SavedAideService",
    "ServiceError",
    "ConflictError",
    "NotFoundError",
    "InvalidStatusTransitionError",
    "ExternalServiceError",
]
