"""
Location and Estimate API Endpoints.

Public read-only APIs over the reference catalog and the resolver:
- Country and state listings
- Procedure cost estimate for a state
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query, Request

from healthflow.api.deps import get_catalog, get_pathway_resolver
from healthflow.core.exceptions import NotFoundException
from healthflow.core.rate_limiter import limiter, RATE_LIMITS
from healthflow.schemas.pathway import MAX_PROCEDURE_QUERY_CHARS, IncomeLevel, Pathway
from healthflow.services.catalog_service import ReferenceCatalog
from healthflow.services.pathway_service import Location, PathwayResolver

logger = logging.getLogger(__name__)

router = APIRouter()


def estimate_payload(pathway: Pathway) -> Dict[str, Any]:
    """
    Shape a pathway as an estimate response.

    The national-average tier returns the degraded shape with a ``note``
    and ``avg_cost`` instead of ``data`` and ``hospitals``.
    """
    hidden_costs = [cost.model_dump() for cost in pathway.hidden_costs]

    if pathway.is_degraded:
        return {
            "note": pathway.note,
            "avg_cost": pathway.procedure.avg_private_cost,
            "currency": pathway.currency_symbol,
            "hidden_costs": hidden_costs,
            "resolution_tier": pathway.resolution_tier.value,
        }

    procedure = pathway.procedure
    return {
        "currency": pathway.currency_symbol,
        "data": {
            "name": procedure.name,
            "avg_cost_private": procedure.avg_private_cost,
            "avg_cost_govt": procedure.govt_rate,
            "recovery_days": procedure.recovery_days,
        },
        "hidden_costs": hidden_costs,
        "hospitals": [h.model_dump() for h in pathway.hospitals],
        "resolution_tier": pathway.resolution_tier.value,
    }


@router.get("/countries", response_model=List[str])
def list_countries(catalog: ReferenceCatalog = Depends(get_catalog)):
    """List the countries covered by the reference catalog."""
    return catalog.country_names()


@router.get("/states/{country}", response_model=List[str])
def list_states(country: str, catalog: ReferenceCatalog = Depends(get_catalog)):
    """List the states of a country (case-insensitive)."""
    states = catalog.state_names(country)
    if states is None:
        raise NotFoundException("Country not found")
    return states


@router.get("/estimate")
@limiter.limit(RATE_LIMITS["pathway"])
def get_estimate(
    request: Request,
    country: str = Query(..., min_length=1),
    state: str = Query(..., min_length=1),
    procedure: str = Query(..., min_length=2, max_length=MAX_PROCEDURE_QUERY_CHARS, description="Procedure name to look up"),
    resolver: PathwayResolver = Depends(get_pathway_resolver),
):
    """
    Estimate a procedure's cost in a state.

    Falls back to the national average (with a ``note``) when the state
    has no data for the procedure. Unknown country or state returns 404.
    """
    pathway = resolver.resolve(procedure, Location(country=country, state=state), IncomeLevel.UNSPECIFIED)
    return estimate_payload(pathway)
