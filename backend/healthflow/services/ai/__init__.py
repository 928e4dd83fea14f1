"""
AI Services Module

- prompts.py: advisor system prompt, grounded context and question prompt
"""

from .prompts import SYSTEM_PROMPTS, build_pathway_context, get_advisory_prompt
