"""
Business Insight Agent

Produces a short written analysis of the customer base from a compact
per-customer summary.

CRITICAL BOUNDARIES:
- CAN: Read the summary built from stored customers and transactions
- CANNOT: Write anything back to storage
- CANNOT: Raise to the caller. Every failure becomes a readable message.

The LLM only sees numbers computed by ``format_data_for_ai``. It never
receives raw records and never feeds anything into the ledger.
"""

import json
from typing import Iterable, Optional

import google.generativeai as genai

from aquaflow.config import GeminiSettings, get_settings
from aquaflow.ledger import daily_cost
from aquaflow.logger import get_logger
from aquaflow.models import Customer, Transaction


log = get_logger(__name__)

MISSING_KEY_MESSAGE = "API Key not found. Please ensure GEMINI_API_KEY is set."
FAILURE_MESSAGE = "Failed to generate insights. Please check your network or API key."
EMPTY_RESPONSE_MESSAGE = "No analysis generated."

PROMPT_TEMPLATE = """You are a business analyst for a water jar supply company.
Here is the summary data of customers and their transaction history in JSON format:
{data}

Please provide a concise analysis (max 200 words) focusing on:
1. Who are the top performing customers by revenue?
2. Which area has the highest demand?
3. Any anomalies or suggestions for business growth.

Keep the tone professional and helpful."""


def format_data_for_ai(
    customers: Iterable[Customer],
    transactions: Iterable[Transaction],
) -> str:
    """
    Per-customer summary as a JSON array.

    Each entry carries ``name``, ``area``, ``totalRevenue`` (delivery
    cost at current rates), ``totalJars`` and ``transactionsCount``.
    """
    by_customer: dict[str, list[Transaction]] = {}
    for t in transactions:
        by_customer.setdefault(t.customer_id, []).append(t)

    summary = []
    for c in customers:
        history = by_customer.get(c.id, [])
        summary.append({
            "name": c.name,
            "area": c.area,
            "totalRevenue": sum(daily_cost(t, c) for t in history),
            "totalJars": sum(t.jars_delivered for t in history),
            "transactionsCount": len(history),
        })
    return json.dumps(summary, ensure_ascii=False)


class BusinessInsightAgent:
    """
    Gemini-backed insight generator for the dashboard.

    Without an API key the model is never configured and ``generate``
    answers with ``MISSING_KEY_MESSAGE``.
    """

    def __init__(self, settings: Optional[GeminiSettings] = None):
        self._settings = settings or get_settings().gemini
        self._model = None
        if self._settings.is_configured:
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    @property
    def is_available(self) -> bool:
        return self._model is not None

    async def generate(
        self,
        customers: list[Customer],
        transactions: list[Transaction],
    ) -> str:
        """
        Ask the model for a business analysis.

        Returns:
            The model's text, or one of the fallback messages
        """
        if self._model is None:
            log.info("insight_skipped", reason="missing_api_key")
            return MISSING_KEY_MESSAGE

        prompt = PROMPT_TEMPLATE.format(data=format_data_for_ai(customers, transactions))

        try:
            response = await self._model.generate_content_async(prompt)
            text = (response.text or "").strip()
        except Exception as e:
            log.error("insight_generation_failed", error=str(e), error_type=type(e).__name__)
            return FAILURE_MESSAGE

        if not text:
            log.warning("insight_empty_response")
            return EMPTY_RESPONSE_MESSAGE

        log.info("insight_generated", customers=len(customers), length=len(text))
        return text
