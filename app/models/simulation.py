"""
Pydantic models for simulation results and saved aides
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, computed_field, ConfigDict

from .program import ProgramFamily, ProgramRecord


def get_current_utc_time():
    """Get current UTC time for default values"""
    return datetime.now(timezone.utc)


class DecisionStage(str, Enum):
    HARD_RULE = "hard_rule"
    CLASSIFIER = "classifier"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class EligibilityDecision:
    """Transient outcome of one stage for one record. Never persisted."""
    record: ProgramRecord
    eligible: bool
    stage: DecisionStage
    reason: str = ""


class EstimatedAide(BaseModel):
    """A surviving program enriched with its estimated monthly amount"""
    id: str
    name: str
    category: str = Field(..., description="Localized category label")
    category_key: str = Field(..., description="Raw category key")
    description: str = ""
    monthly_amount: int = Field(0, ge=0)
    organism: str = "CAF"
    region: str = "National"
    source_url: Optional[str] = None
    application_url: Optional[str] = None
    family: ProgramFamily = ProgramFamily.GENERIC
    is_fee: bool = Field(False, description="Mandatory fee rather than a benefit")

    @computed_field
    @property
    def estimated_annual(self) -> int:
        return self.monthly_amount * 12


class SimulationResult(BaseModel):
    """Output of one pipeline run, stored append-only for authenticated users"""
    id: str = Field(..., description="Result identifier")
    eligible_aides: List[EstimatedAide] = Field(default_factory=list)
    total_monthly: int = Field(0, ge=0)
    profile: Dict[str, Any] = Field(default_factory=dict, description="Snapshot of the input situation")
    language: str = "fr"
    classifier_path: str = Field("none", description="llm, cache, fallback or none")
    simulated_at: datetime = Field(default_factory=get_current_utc_time)

    @computed_field
    @property
    def total_annual(self) -> int:
        return self.total_monthly * 12

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "3f1c2a9e0b7d4c6e8a5b1d2c3e4f5a6b",
                "eligible_aides": [
                    {
                        "id": "apl",
                        "name": "APL - Aide personnalisée au logement",
                        "category": "Logement",
                        "category_key": "housing",
                        "monthly_amount": 300,
                        "estimated_annual": 3600
                    }
                ],
                "total_monthly": 300,
                "total_annual": 3600,
                "language": "fr",
                "classifier_path": "llm"
            }
        }
    )


class SimulationRequest(BaseModel):
    answers: Dict[str, Any] = Field(..., description="User situation answers")
    language: str = Field("fr", description="Display language")


class SavedAideStatus(str, Enum):
    SAVED = "saved"
    APPLIED = "applied"
    RECEIVED = "received"
    REJECTED = "rejected"


# Legal transitions; received and rejected are terminal
STATUS_TRANSITIONS = {
    SavedAideStatus.SAVED: frozenset({SavedAideStatus.APPLIED}),
    SavedAideStatus.APPLIED: frozenset({SavedAideStatus.RECEIVED, SavedAideStatus.REJECTED}),
    SavedAideStatus.RECEIVED: frozenset(),
    SavedAideStatus.REJECTED: frozenset(),
}


class AideSnapshot(BaseModel):
    """Fields copied from an estimated aide at bookmark time"""
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = ""
    category: Optional[str] = None
    category_key: Optional[str] = None
    monthly_amount: int = Field(0, ge=0)
    source_url: Optional[str] = None
    application_url: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class SavedAide(BaseModel):
    """A user's bookmark, independent of the catalog and the originating simulation"""
    id: str = Field(..., alias="_id")
    user_id: str
    aide_id: str
    aide_name: str
    aide_description: str = ""
    aide_category: Optional[str] = None
    monthly_amount: int = Field(0, ge=0)
    source_url: Optional[str] = None
    application_url: Optional[str] = None
    simulation_id: Optional[str] = None
    notes: Optional[str] = None
    status: SavedAideStatus = SavedAideStatus.SAVED
    created_at: datetime = Field(default_factory=get_current_utc_time)
    updated_at: datetime = Field(default_factory=get_current_utc_time)
    applied_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        doc = self.model_dump(mode="python")
        doc["_id"] = doc.pop("id")
        return doc


class SaveAideRequest(BaseModel):
    aide: AideSnapshot
    simulation_id: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)


class StatusUpdateRequest(BaseModel):
    status: SavedAideStatus
    notes: Optional[str] = Field(None, max_length=2000)


class NotesUpdateRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=2000)
