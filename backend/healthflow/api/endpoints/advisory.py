"""
Advisory API Endpoint.

POST /api/ask-ai answers a follow-up question about a pathway the client
already resolved. Always 200 with either a model answer or the fixed
fallback answer; 503 only when no advisory backend is configured.
"""

from fastapi import APIRouter, Depends, Request

from healthflow.api.deps import get_advisory
from healthflow.core.exceptions import ServiceUnavailableException
from healthflow.core.rate_limiter import limiter, RATE_LIMITS
from healthflow.schemas.pathway import AskAIRequest, AskAIResponse
from healthflow.services.advisory_service import AdvisoryGrounder

router = APIRouter()


@router.post("/ask-ai", response_model=AskAIResponse)
@limiter.limit(RATE_LIMITS["advisory"])
async def ask_ai(
    request: Request,
    body: AskAIRequest,
    grounder: AdvisoryGrounder = Depends(get_advisory),
):
    """Ask the cost advisor about a resolved pathway (``contextData``)."""
    if not grounder.is_configured:
        raise ServiceUnavailableException("AI advisor is not configured")

    answer = await grounder.answer(body.context_data, body.question)
    return AskAIResponse(answer=answer)
