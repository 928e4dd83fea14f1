"""
Pydantic schemas for request/response validation.
"""

from healthflow.schemas.catalog import (
    CatalogCountry, CatalogState, CatalogProcedure, CatalogHospital, HiddenCostItem,
)
from healthflow.schemas.pathway import (
    IncomeLevel, ResolutionTier, ProcedureEstimate, HiddenCostRead, HospitalRead,
    Pathway, PathwayRequest, AskAIRequest, AskAIResponse,
)

__all__ = [
    "CatalogCountry",
    "CatalogState",
    "CatalogProcedure",
    "CatalogHospital",
    "HiddenCostItem",
    "IncomeLevel",
    "ResolutionTier",
    "ProcedureEstimate",
    "HiddenCostRead",
    "HospitalRead",
    "Pathway",
    "PathwayRequest",
    "AskAIRequest",
    "AskAIResponse",
]
