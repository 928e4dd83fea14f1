"""
Pathway Schemas.

Pydantic models for resolved pathways (procedure cost, hidden costs and
eligible hospitals) and the request/response bodies of the pathway and
advisory APIs.
"""

from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Longest free-text procedure query accepted from clients
MAX_PROCEDURE_QUERY_CHARS = 200


# ============================================
# Enums
# ============================================

class IncomeLevel(str, Enum):
    LOW = "low"
    MIDDLE = "middle"
    HIGH = "high"
    UNSPECIFIED = "unspecified"

    @classmethod
    def parse(cls, value) -> "IncomeLevel":
        """Case-insensitive parse; blank or missing means unspecified."""
        if isinstance(value, cls):
            return value
        if value is None or not str(value).strip():
            return cls.UNSPECIFIED
        return cls(str(value).strip().lower())


class ResolutionTier(str, Enum):
    STORE_EXACT = "store-exact"
    CATALOG = "catalog"
    NATIONAL_AVERAGE = "national-average"


# ============================================
# Resolved values
# ============================================

class ProcedureEstimate(BaseModel):
    """Procedure costs at whichever tier resolved it."""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = Field(None, description="Store id; only set for store-exact matches")
    name: str
    avg_private_cost: float
    govt_rate: Optional[float] = Field(None, description="PMJAY package / government hospital rate")
    recovery_days: Optional[int] = None


class HiddenCostRead(BaseModel):
    """Hidden cost line item, normalized across store and catalog sources."""
    model_config = ConfigDict(from_attributes=True)

    item_name: str
    avg_cost: float
    description: Optional[str] = None
    is_avoidable: Optional[bool] = None


class HospitalRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    location: str
    is_pmjay_empaneled: bool = False
    rating: float = 0.0


class Pathway(BaseModel):
    """The resolved bundle returned for one request."""
    procedure: ProcedureEstimate
    hidden_costs: List[HiddenCostRead] = Field(default_factory=list)
    hospitals: List[HospitalRead] = Field(default_factory=list)
    currency_symbol: str
    income_level: IncomeLevel = IncomeLevel.UNSPECIFIED
    resolution_tier: ResolutionTier
    note: Optional[str] = Field(None, description="Set when resolution degraded to the national average")

    @property
    def is_degraded(self) -> bool:
        return self.resolution_tier == ResolutionTier.NATIONAL_AVERAGE

    @property
    def total_hidden_cost(self) -> float:
        return sum(cost.avg_cost for cost in self.hidden_costs)


# ============================================
# Request / Response bodies
# ============================================

class PathwayRequest(BaseModel):
    """Body of POST /check-pathway."""
    procedure: str = Field(..., min_length=2, max_length=MAX_PROCEDURE_QUERY_CHARS, description="Free-text procedure name")
    income_level: IncomeLevel = IncomeLevel.UNSPECIFIED
    state: str = Field(..., min_length=1)
    country: Optional[str] = Field(None, description="Defaults to the configured country")

    @field_validator("income_level", mode="before")
    @classmethod
    def _parse_income_level(cls, value):
        return IncomeLevel.parse(value)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "procedure": "knee replacement",
                "income_level": "low",
                "state": "Maharashtra",
                "country": "India",
            }
        }
    )


class AskAIRequest(BaseModel):
    """Body of POST /api/ask-ai; contextData is a previously resolved pathway."""
    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(..., min_length=1, max_length=1000)
    context_data: Pathway = Field(..., alias="contextData")


class AskAIResponse(BaseModel):
    answer: str
