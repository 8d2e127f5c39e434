"""
Models package for the Aides Simulator
"""

from .program import (
    ProgramFamily,
    AgeRange,
    EligibilityData,
    AmountData,
    ProgramRecord
)

from .situation import (
    Nationality,
    HousingStatus,
    EmploymentStatus,
    UserSituation
)

from .simulation import (
    DecisionStage,
    EligibilityDecision,
    EstimatedAide,
    SimulationResult,
    SimulationRequest,
    SavedAideStatus,
    STATUS_TRANSITIONS,
    AideSnapshot,
    SavedAide,
    SaveAideRequest,
    StatusUpdateRequest,
    NotesUpdateRequest
)

__all__ = [
    # Program models
    "ProgramFamily",
    "AgeRange",
    "EligibilityData",
    "AmountData",
    "ProgramRecord",

    # Situation models
    "Nationality",
    "HousingStatus",
    "EmploymentStatus",
    "UserSituation",

    # Simulation models
    "DecisionStage",
    "EligibilityDecision",
    "EstimatedAide",
    "SimulationResult",
    "SimulationRequest",
    "SavedAideStatus",
    "STATUS_TRANSITIONS",
    "AideSnapshot",
    "SavedAide",
    "SaveAideRequest",
    "StatusUpdateRequest",
    "NotesUpdateRequest"
]
