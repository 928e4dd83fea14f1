"""
AI Prompt Templates

Prompts and context construction for the cost advisor. The context built
here is the only source of facts the model is allowed to use.
"""

import json
from typing import Any, Dict, Optional

from healthflow.schemas.pathway import Pathway
from healthflow.services.eligibility import requires_pmjay

# System prompts for different AI roles
SYSTEM_PROMPTS = {
    "advisor": """You are a healthcare cost advisor for patients in India.
Answer ONLY from the COST CONTEXT provided with each question.
Never invent prices, hospitals, schemes or percentages that are not in the context.
If the context does not contain the answer, say so and suggest asking the hospital billing desk.
Keep answers under 120 words, practical and focused on money: what to budget,
which hidden costs to expect, which of them can be avoided, and PMJAY eligibility.
You do not give medical advice.""",
}

MAX_CONTEXT_HOSPITALS = 3

# Longest free-text field (procedure name, notes, hospital names) passed to the model
MAX_CONTEXT_TEXT_CHARS = 200


def _clip(text: Optional[str], limit: int) -> Optional[str]:
    if text is None or len(text) <= limit:
        return text
    return text[:limit]


def _context_payload(
    pathway: Pathway,
    hidden_cost_limit: int,
    hospital_limit: int,
    text_limit: int = MAX_CONTEXT_TEXT_CHARS,
) -> Dict[str, Any]:
    procedure = pathway.procedure
    payload: Dict[str, Any] = {
        "procedure": _clip(procedure.name, text_limit),
        "currency": _clip(pathway.currency_symbol, text_limit),
        "avg_private_cost": procedure.avg_private_cost,
        "govt_rate": procedure.govt_rate,
        "recovery_days": procedure.recovery_days,
        "income_level": pathway.income_level.value,
        "pmjay_hospitals_only": requires_pmjay(pathway.income_level),
        "resolution_tier": pathway.resolution_tier.value,
        "note": _clip(pathway.note, text_limit),
        "total_hidden_cost": pathway.total_hidden_cost,
        "hidden_costs": [
            {
                "item": _clip(cost.item_name, text_limit),
                "cost": cost.avg_cost,
                "note": _clip(cost.description, text_limit),
                "avoidable": cost.is_avoidable,
            }
            for cost in pathway.hidden_costs[:hidden_cost_limit]
        ],
        "recommended_hospitals": [
            {
                "name": _clip(h.name, text_limit),
                "location": _clip(h.location, text_limit),
                "pmjay": h.is_pmjay_empaneled,
                "rating": h.rating,
            }
            for h in pathway.hospitals[:hospital_limit]
        ],
    }
    omitted = len(pathway.hidden_costs) - len(payload["hidden_costs"])
    if omitted > 0:
        payload["hidden_costs_omitted"] = omitted

    # Compact: drop empty fields, including inside line items
    for line in payload["hidden_costs"] + payload["recommended_hospitals"]:
        for key in [k for k, v in line.items() if v is None]:
            del line[key]
    return {k: v for k, v in payload.items() if v is not None}


def build_pathway_context(pathway: Pathway, max_chars: int = 1500) -> str:
    """
    Serialize a resolved pathway into a compact JSON context.

    Trailing hospitals, then trailing hidden-cost items are dropped, then
    free-text fields are shortened, until the context fits in ``max_chars``.
    The result is always valid JSON no longer than ``max_chars``; a limit
    too small for any pathway yields an empty object.

    Args:
        pathway: Resolved pathway; not modified.
        max_chars: Upper bound on the serialized context length.

    Returns:
        JSON string.
    """
    hospital_limit = min(len(pathway.hospitals), MAX_CONTEXT_HOSPITALS)
    hidden_cost_limit = len(pathway.hidden_costs)
    text_limit = MAX_CONTEXT_TEXT_CHARS

    while True:
        context = json.dumps(
            _context_payload(pathway, hidden_cost_limit, hospital_limit, text_limit),
            ensure_ascii=False,
            separators=(",", ":"),
        )
        if len(context) <= max_chars:
            return context
        if hospital_limit > 0:
            hospital_limit -= 1
        elif hidden_cost_limit > 0:
            hidden_cost_limit -= 1
        elif text_limit > 0:
            text_limit //= 2
        else:
            return "{}"


def get_advisory_prompt(context: str, question: str) -> str:
    """
    Generate the user prompt for a grounded advisory question.

    Args:
        context: JSON from build_pathway_context
        question: Patient's free-text question

    Returns:
        Complete prompt for the advisor
    """
    return f"""COST CONTEXT (the only facts you may use):
{context}

PATIENT QUESTION:
{question.strip()[:1000]}

Answer in at most 120 words using only the figures above. Quote amounts with the
context currency. If the context lacks the answer, say that plainly."""
