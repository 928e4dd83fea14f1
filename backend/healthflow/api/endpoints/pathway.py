"""
Pathway API Endpoint.

POST /check-pathway resolves a procedure for a patient's income level and
location into costs, hidden costs and eligible hospitals.
"""

from fastapi import APIRouter, Depends, Request

from healthflow.api.deps import get_pathway_resolver
from healthflow.config import settings
from healthflow.core.rate_limiter import limiter, RATE_LIMITS
from healthflow.schemas.pathway import Pathway, PathwayRequest
from healthflow.services.pathway_service import Location, PathwayResolver

router = APIRouter()


@router.post("/check-pathway", response_model=Pathway)
@limiter.limit(RATE_LIMITS["pathway"])
def check_pathway(
    request: Request,
    body: PathwayRequest,
    resolver: PathwayResolver = Depends(get_pathway_resolver),
):
    """
    Resolve a full pathway.

    Low and middle income patients only see PMJAY-empaneled hospitals.
    ``resolution_tier`` tells the caller how confident the estimate is;
    ``national-average`` results also carry a ``note``.
    """
    location = Location(country=body.country or settings.DEFAULT_COUNTRY, state=body.state)
    return resolver.resolve(body.procedure, location, body.income_level)
