"""
Reference Catalog Schemas.

Pydantic models for the bundled country -> state -> procedure/hospital
document. The document is validated into these frozen models at load time
so resolution never touches untyped JSON.
"""

from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field


class _CatalogModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class HiddenCostItem(_CatalogModel):
    """Hidden cost embedded in a catalog procedure."""
    item: str = Field(..., min_length=1)
    cost: float = Field(..., ge=0)
    note: Optional[str] = None


class CatalogProcedure(_CatalogModel):
    """State-level average costs for a procedure."""
    name: str = Field(..., min_length=1)
    avg_cost_private: float = Field(..., ge=0)
    avg_cost_govt: Optional[float] = Field(None, ge=0)
    hidden_costs: Tuple[HiddenCostItem, ...] = ()


class CatalogHospital(_CatalogModel):
    """Hospital listed for a state."""
    name: str = Field(..., min_length=1)
    city: str
    type: str = Field("Private", description="Government or Private")
    rating: float = 0.0


class CatalogState(_CatalogModel):
    name: str = Field(..., alias="state_name", min_length=1)
    hospitals: Tuple[CatalogHospital, ...] = ()
    procedures: Tuple[CatalogProcedure, ...] = ()


class CatalogCountry(_CatalogModel):
    name: str = Field(..., alias="country", min_length=1)
    currency_symbol: str = Field(..., min_length=1)
    states: Tuple[CatalogState, ...] = ()

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "country": "India",
                "currency_symbol": "₹",
                "states": [
                    {
                        "state_name": "Maharashtra",
                        "hospitals": [
                            {"name": "KEM Hospital", "city": "Mumbai", "type": "Government", "rating": 4.2}
                        ],
                        "procedures": [
                            {
                                "name": "Knee Replacement",
                                "avg_cost_private": 350000,
                                "avg_cost_govt": 80000,
                                "hidden_costs": [
                                    {"item": "Implant upgrade", "cost": 60000, "note": "Imported implants cost extra"}
                                ],
                            }
                        ],
                    }
                ],
            }
        },
    )
