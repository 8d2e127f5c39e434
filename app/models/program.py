"""
Pydantic models for catalogued aid programs
"""
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator, ConfigDict

from ..utils.validators import extract_text_snippet


class ProgramFamily(str, Enum):
    """Estimation family of a program, assigned once per record"""
    HOUSING_RENT = "housing_rent"
    STUDENT_SCHOLARSHIP = "student_scholarship"
    MINIMUM_INCOME = "minimum_income"
    ACTIVITY_BONUS = "activity_bonus"
    TRANSPORT_PASS = "transport_pass"
    MANDATORY_FEE = "mandatory_fee"
    FAMILY_ALLOWANCE = "family_allowance"
    STUDENT_AID = "student_aid"
    GENERIC = "generic"


class AgeRange(BaseModel):
    min: Optional[int] = Field(None, ge=0)
    max: Optional[int] = Field(None, ge=0)


class EligibilityData(BaseModel):
    """Hard-rule data attached to a program. Missing data skips the rule."""
    nationality: List[str] = Field(default_factory=list, description="Nationality allow-list")
    age_range: AgeRange = Field(default_factory=AgeRange)
    min_age: Optional[int] = Field(None, ge=0, description="Legacy flat minimum age")
    max_age: Optional[int] = Field(None, ge=0, description="Legacy flat maximum age")
    requires_children: bool = Field(False)

    @field_validator('nationality', mode='before')
    @classmethod
    def wrap_nationality(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return [item for item in v if item]

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AmountData(BaseModel):
    min: Optional[float] = Field(None, ge=0)
    max: Optional[float] = Field(None, ge=0)
    base: Optional[float] = Field(None, ge=0)
    monthly: Optional[float] = Field(None, ge=0)

    @property
    def base_amount(self) -> float:
        return self.monthly or self.base or 0

    model_config = ConfigDict(extra="ignore")


class ProgramRecord(BaseModel):
    """Catalogued aid program, read-only to the pipeline"""
    id: str = Field(..., description="Program identifier")
    name: str = Field(..., description="Display name")
    description: str = Field("", description="Program description")
    category: str = Field("social", description="Category key")
    region: str = Field("National", description="Region display name")
    region_id: Optional[str] = Field(None, description="Region slug, None for nationwide")
    profile_type: Optional[str] = Field(None, description="students / workers / jobseekers / all")
    profile_subtype: Optional[str] = Field(None)
    eligibility: EligibilityData = Field(default_factory=EligibilityData)
    amount: AmountData = Field(default_factory=AmountData)
    organism: str = Field("CAF")
    source_url: Optional[str] = None
    application_url: Optional[str] = None
    content_text: Optional[str] = None
    family: ProgramFamily = Field(ProgramFamily.GENERIC)

    def dedup_key(self) -> tuple:
        return (self.id, self.region_id or "national", (self.profile_type or "all").lower())

    def to_candidate_summary(self) -> Dict[str, Any]:
        """Compact view sent to the relevance classifier"""
        return {
            "id": self.id,
            "name": self.name,
            "description": extract_text_snippet(self.description, 300),
            "category": self.category,
        }

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "apl",
                "name": "APL - Aide personnalisée au logement",
                "description": "Aide au paiement du loyer pour les locataires",
                "category": "housing",
                "region": "Île-de-France",
                "region_id": "ile-de-france",
                "profile_type": "students",
                "eligibility": {"nationality": ["all"], "age_range": {"min": 16}},
                "amount": {"min": 50, "max": 500},
                "family": "housing_rent"
            }
        }
    )
