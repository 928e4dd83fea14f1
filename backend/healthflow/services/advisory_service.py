"""
Advisory Service

Answers free-text follow-up questions about a resolved pathway using an
OpenAI-compatible chat completions endpoint (Groq by default).

The advisory answer is never load-bearing:
- the model only sees the compact context built from the pathway
- every call is bounded by a hard timeout
- any failure (not configured, timeout, transport error, bad status,
  malformed or empty content) returns FALLBACK_ANSWER instead of raising
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional

import httpx

from healthflow.config import settings
from healthflow.core.metrics import track_advisory_request
from healthflow.schemas.pathway import Pathway
from healthflow.services.ai.prompts import SYSTEM_PROMPTS, build_pathway_context, get_advisory_prompt

logger = logging.getLogger(__name__)

FALLBACK_ANSWER = (
    "The cost advisor is unavailable right now. Please rely on the estimate and "
    "hidden costs shown above, and confirm the final package price and any extra "
    "charges with the hospital's billing desk before admission."
)


class AdvisoryResponseError(Exception):
    """Raised when the advisory backend returns an unusable response."""
    pass


class AdvisoryGrounder:
    """
    Grounded cost advisor.

    Stateless apart from configuration; safe to share across requests.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_context_chars: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.advisory_api_key
        self.model = model or settings.ADVISORY_MODEL
        self.api_url = api_url or settings.ADVISORY_API_URL
        self.timeout_seconds = (
            settings.ADVISORY_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
        )
        self.max_context_chars = (
            settings.ADVISORY_MAX_CONTEXT_CHARS if max_context_chars is None else max_context_chars
        )
        self._transport = transport

        if self.is_configured:
            logger.info(f"Advisory backend configured: {self.model}")
        else:
            logger.warning("Advisory API key not set - ask-ai will report not configured")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def get_status(self) -> Dict[str, Any]:
        """Advisory status for health checks."""
        return {
            "configured": self.is_configured,
            "model": self.model,
            "timeout_seconds": self.timeout_seconds,
        }

    async def answer(self, pathway: Pathway, question: str) -> str:
        """
        Answer a question grounded in a resolved pathway.

        Never raises for backend problems; returns FALLBACK_ANSWER instead.
        Cancellation of the calling task still propagates.
        """
        if not self.is_configured:
            track_advisory_request("not_configured")
            return FALLBACK_ANSWER

        context = build_pathway_context(pathway, self.max_context_chars)
        prompt = get_advisory_prompt(context, question)

        start = time.perf_counter()
        outcome = "answered"
        try:
            content = await asyncio.wait_for(self._call_model(prompt), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            outcome = "fallback_timeout"
            logger.warning(f"Advisory call timed out after {self.timeout_seconds}s")
        except httpx.HTTPError as e:
            outcome = "fallback_transport"
            logger.warning(f"Advisory call failed: {e!r}")
        except AdvisoryResponseError as e:
            outcome = "fallback_malformed"
            logger.warning(f"Advisory response unusable: {e}")
        except Exception as e:
            outcome = "fallback_error"
            logger.error(f"Unexpected advisory failure: {e!r}")
        else:
            answer = content.strip()
            if answer:
                track_advisory_request(outcome, time.perf_counter() - start)
                return answer
            outcome = "fallback_empty"
            logger.warning("Advisory response was empty")

        track_advisory_request(outcome, time.perf_counter() - start)
        return FALLBACK_ANSWER

    async def _call_model(self, prompt: str) -> str:
        """Call the chat completions endpoint and return the message content."""
        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            response = await client.post(
                self.api_url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": SYSTEM_PROMPTS["advisor"]},
                        {"role": "user", "content": prompt},
                    ],
                    "temperature": 0.2,
                    "max_tokens": settings.ADVISORY_MAX_TOKENS,
                },
            )
            response.raise_for_status()

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise AdvisoryResponseError(f"unexpected payload shape: {e!r}") from e

        if not isinstance(content, str):
            raise AdvisoryResponseError(f"content is {type(content).__name__}, not text")
        logger.info(f"Advisory response: {len(content)} chars")
        return content


# Lazy singleton - initialized on first access to pick up env vars
_advisory_instance: Optional[AdvisoryGrounder] = None


def get_advisory_grounder() -> AdvisoryGrounder:
    """Get the shared advisory grounder (lazy initialization)."""
    global _advisory_instance
    if _advisory_instance is None:
        _advisory_instance = AdvisoryGrounder()
    return _advisory_instance
