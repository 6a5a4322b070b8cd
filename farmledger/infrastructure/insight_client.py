"""
Infrastructure layer: Insight generation through a text-generation API.

The client never raises to its callers. Any failure turns into a fixed
HTML message so the report page can always render something.
"""
import json
import logging
from typing import Any, Dict, List, Optional

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from farmledger.config import settings
from farmledger.domain.models import Activity, FinancialSummary, Harvest, Plot
from farmledger.infrastructure.api_constants import APIConstants, InsightEndpoints

logger = logging.getLogger(__name__)


NO_ANALYSIS_HTML = "<p>Unable to generate an analysis right now.</p>"
FAILURE_HTML = "<p>Could not reach the insight service. Check the API key.</p>"

PROMPT_TEMPLATE = """
Act as a senior agronomist and farm financial consultant.
Analyse the following farm data (JSON):
{context}

Write a concise report in HTML (no markdown code fences, only basic tags such
as <p>, <strong>, <ul>, <li>) covering:
1. Profitability: which plots make a profit or a loss, and why.
2. Management efficiency: comments on activity costs (fertilizing, pruning, etc).
3. Recommendations: practical steps to improve margin in the next season.

Keep the tone professional and direct.
"""


class InsightClient:
    """Client for the text-generation API used to write farm insights."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        context_limit: Optional[int] = None,
    ):
        self.base_url = base_url or settings.insight_base_url
        self.api_key = api_key if api_key is not None else settings.insight_api_key
        self.model = model or settings.insight_model
        self.context_limit = context_limit or settings.insight_context_limit
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "x-goog-api-key": self.api_key,
                "content-type": APIConstants.CONTENT_TYPE_JSON,
            },
            timeout=settings.request_timeout,
        )

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    def build_context(
        self,
        summary: FinancialSummary,
        activities: List[Activity],
        harvests: List[Harvest],
        plots: List[Plot],
    ) -> Dict[str, Any]:
        """Assemble the JSON context sent along with the prompt."""
        return {
            "summary": summary.model_dump(mode="json", by_alias=True),
            "plots": [p.model_dump(mode="json", by_alias=True) for p in plots],
            "recentActivities": [
                a.model_dump(mode="json", by_alias=True)
                for a in activities[:self.context_limit]
            ],
            "recentHarvests": [
                h.model_dump(mode="json", by_alias=True)
                for h in harvests[:self.context_limit]
            ],
        }

    def build_prompt(self, context: Dict[str, Any]) -> str:
        return PROMPT_TEMPLATE.format(context=json.dumps(context, ensure_ascii=False))

    @retry(
        stop=stop_after_attempt(settings.max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.RequestError)),
        reraise=True,
    )
    async def _make_request(self, prompt: str) -> Dict[str, Any]:
        response = await self.client.post(
            InsightEndpoints.generate_content(self.model),
            json={"contents": [{"parts": [{"text": prompt}]}]},
        )
        response.raise_for_status()
        return response.json()

    @staticmethod
    def extract_text(data: Any) -> str:
        """
        Pull the generated text out of a generateContent response.

        Raises:
            ValueError: If the response does not have the expected shape
        """
        if not isinstance(data, dict):
            raise ValueError("Insight response is not a JSON object")
        parts = []
        try:
            for candidate in data.get("candidates") or []:
                for part in (candidate.get("content") or {}).get("parts") or []:
                    if part.get("text"):
                        parts.append(part["text"])
                if parts:
                    break
            return "".join(parts)
        except (AttributeError, TypeError) as e:
            raise ValueError(f"Unexpected insight response shape: {e}")

    async def generate_insights(
        self,
        summary: FinancialSummary,
        activities: List[Activity],
        harvests: List[Harvest],
        plots: List[Plot],
    ) -> str:
        """
        Generate an HTML analysis of the farm's finances.

        Args:
            summary: Current financial summary
            activities: Activities, most relevant first
            harvests: Harvests, most relevant first
            plots: All plots

        Returns:
            HTML string; a fixed fallback message when generation fails
        """
        if not self.api_key:
            logger.error("Insight API key is not configured")
            return FAILURE_HTML

        prompt = self.build_prompt(self.build_context(summary, activities, harvests, plots))
        try:
            data = await self._make_request(prompt)
            text = self.extract_text(data)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error generating insights: {str(e)}")
            return FAILURE_HTML

        return text or NO_ANALYSIS_HTML


# Singleton instance
_insight_client: Optional[InsightClient] = None


def get_insight_client() -> InsightClient:
    """
    Get or create the singleton insight client instance.

    Returns:
        InsightClient instance
    """
    global _insight_client
    if _insight_client is None:
        _insight_client = InsightClient()
    return _insight_client
