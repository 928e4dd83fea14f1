"""
API router aggregating all endpoint routers.

- /api/countries, /api/states/{country}, /api/estimate
- /api/ask-ai
- /check-pathway
"""

from fastapi import APIRouter

from healthflow.api.endpoints import advisory, estimate, pathway

api_router = APIRouter()

api_router.include_router(
    estimate.router,
    prefix="/api",
    tags=["Locations & Estimates"],
)
api_router.include_router(
    advisory.router,
    prefix="/api",
    tags=["AI Advisor"],
)
api_router.include_router(
    pathway.router,
    tags=["Pathway"],
)
