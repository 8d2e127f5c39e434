"""
Pydantic models for the user's self-reported situation
"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict
from pydantic.alias_generators import to_camel


class Nationality(str, Enum):
    """Nationality class used by the nationality rule"""
    CITIZEN = "citizen"
    EU = "eu"
    NON_EU = "non-eu"


class HousingStatus(str, Enum):
    RENTER = "renter"
    OWNER = "owner"
    OTHER = "other"


class EmploymentStatus(str, Enum):
    STUDENT = "student"
    EMPLOYED = "employed"
    SELF_EMPLOYED = "self-employed"
    UNEMPLOYED = "unemployed"
    RETIRED = "retired"
    OTHER = "other"


NATIONALITY_ALIASES = {
    "french": Nationality.CITIZEN,
    "national": Nationality.CITIZEN,
    "citizen": Nationality.CITIZEN,
    "eu": Nationality.EU,
    "eu_eea": Nationality.EU,
    "non-eu": Nationality.NON_EU,
    "non_eu": Nationality.NON_EU,
    "noneu": Nationality.NON_EU,
}

HOUSING_ALIASES = {
    "renter": HousingStatus.RENTER,
    "tenant": HousingStatus.RENTER,
    "locataire": HousingStatus.RENTER,
    "owner": HousingStatus.OWNER,
    "proprietaire": HousingStatus.OWNER,
    "hosted": HousingStatus.OTHER,
    "other": HousingStatus.OTHER,
}


class UserSituation(BaseModel):
    """Structured answers for one simulation run. Immutable once built."""
    age: int = Field(..., ge=0, le=120, description="User's age")
    nationality: Nationality = Field(..., description="Nationality class")
    region: str = Field(..., min_length=1, description="Declared geography code")
    housing_status: HousingStatus = Field(HousingStatus.OTHER, description="Renter, owner or other")
    rent: Optional[float] = Field(None, ge=0, description="Monthly rent")
    income_bracket: float = Field(0, ge=0, description="Declared monthly income")
    has_children: bool = Field(False, description="Whether the household has children")
    number_of_children: int = Field(0, ge=0, description="Number of children")
    employment_status: EmploymentStatus = Field(EmploymentStatus.OTHER, description="Employment status")
    residence_status: Optional[str] = Field(None, description="Residence status, e.g. student or worker")
    has_disability: bool = Field(False, description="Whether the user declared a disability")
    years_in_country: Optional[float] = Field(None, ge=0, description="Years lived in the country")

    @field_validator('nationality', mode='before')
    @classmethod
    def coerce_nationality(cls, v):
        if isinstance(v, str):
            key = v.strip().lower()
            if key in NATIONALITY_ALIASES:
                return NATIONALITY_ALIASES[key]
        return v

    @field_validator('housing_status', mode='before')
    @classmethod
    def coerce_housing_status(cls, v):
        if isinstance(v, str):
            return HOUSING_ALIASES.get(v.strip().lower(), v)
        return v

    @field_validator('income_bracket', mode='before')
    @classmethod
    def default_income(cls, v):
        return 0 if v is None else v

    @field_validator('residence_status')
    @classmethod
    def lower_residence_status(cls, v):
        if v:
            return v.strip().lower()
        return v

    @model_validator(mode='after')
    def reconcile_children(self):
        # Frozen model: adjust through object.__setattr__ during validation only
        if not self.has_children and self.number_of_children:
            object.__setattr__(self, 'number_of_children', 0)
        elif self.has_children and self.number_of_children == 0:
            object.__setattr__(self, 'number_of_children', 1)
        return self

    @property
    def is_student(self) -> bool:
        return (
            self.employment_status == EmploymentStatus.STUDENT
            or self.residence_status in ("student", "etudiant", "étudiant")
        )

    @property
    def is_working(self) -> bool:
        return self.employment_status in (EmploymentStatus.EMPLOYED, EmploymentStatus.SELF_EMPLOYED)

    # Answers arrive in snake_case or in the camelCase the web client sends
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "age": 22,
                "nationality": "non-eu",
                "region": "ile-de-france",
                "housing_status": "renter",
                "rent": 600,
                "income_bracket": 400,
                "has_children": False,
                "employment_status": "student",
                "residence_status": "student"
            }
        }
    )
