"""AI Agents package."""

from aquaflow.agents.insight_agent import (
    EMPTY_RESPONSE_MESSAGE,
    FAILURE_MESSAGE,
    MISSING_KEY_MESSAGE,
    BusinessInsightAgent,
    format_data_for_ai,
)

__all__ = [
    "EMPTY_RESPONSE_MESSAGE",
    "FAILURE_MESSAGE",
    "MISSING_KEY_MESSAGE",
    "BusinessInsightAgent",
    "format_data_for_ai",
]
