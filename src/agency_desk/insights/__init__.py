"""Insights module: AI summaries of report data."""

from agency_desk.insights.cache import FAILURE_MESSAGE, UNAVAILABLE_MESSAGE, InsightCache
from agency_desk.insights.gemini import GeminiSummaryProvider
from agency_desk.insights.interfaces import InsightError, ISummaryProvider
from agency_desk.insights.prompts import DEFAULT_PROMPTS, build_prompt

__all__ = [
    "DEFAULT_PROMPTS",
    "FAILURE_MESSAGE",
    "GeminiSummaryProvider",
    "ISummaryProvider",
    "InsightCache",
    "InsightError",
    "UNAVAILABLE_MESSAGE",
    "build_prompt",
]
