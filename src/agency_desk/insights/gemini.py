"""Gemini summary provider over the Generative Language REST API."""

from typing import Any

import httpx

from agency_desk.common.config import AiConfig
from agency_desk.common.logging import get_logger
from agency_desk.insights.interfaces import InsightError, ISummaryProvider
from agency_desk.insights.prompts import build_prompt, format_summary

logger = get_logger(__name__)


class GeminiSummaryProvider(ISummaryProvider):
    """Generates report summaries with a Gemini model.

    Usage:
        async with GeminiSummaryProvider(config) as provider:
            text = await provider.generate_summary(prompt, report.to_dict())
    """

    def __init__(self, config: AiConfig):
        """Initialize provider.

        Args:
            config: AI configuration with api_key and model.
        """
        self.config = config
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "GeminiSummaryProvider":
        """Async context manager entry."""
        self._client = httpx.AsyncClient(timeout=self.config.timeout_seconds)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get HTTP client."""
        if self._client is None:
            # Create a one-shot client if not in context manager
            self._client = httpx.AsyncClient(timeout=self.config.timeout_seconds)
        return self._client

    @property
    def endpoint(self) -> str:
        base = self.config.base_url.rstrip("/")
        return f"{base}/models/{self.config.model}:generateContent"

    async def generate_summary(self, prompt: str, context: dict[str, Any]) -> str:
        """Ask the model for a bulleted summary of report data.

        Args:
            prompt: What the summary should focus on.
            context: Report data (JSON-serializable).

        Returns:
            Summary text with '•' bullets.

        Raises:
            InsightError: If the provider is not configured, the request fails
                or the response carries no text.
        """
        if not self.config.is_configured:
            raise InsightError("Gemini API key is not configured")

        payload = {"contents": [{"parts": [{"text": build_prompt(prompt, context)}]}]}

        try:
            response = await self.client.post(
                self.endpoint,
                json=payload,
                headers={"x-goog-api-key": self.config.api_key},
            )
        except httpx.HTTPError as e:
            logger.error("gemini_request_error", error=str(e))
            raise InsightError(f"Request failed: {e}") from e

        if response.status_code != 200:
            logger.warning(
                "gemini_request_failed",
                status=response.status_code,
                response=response.text[:200],
            )
            raise InsightError(
                f"Gemini API error: {response.status_code}", status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise InsightError("Malformed Gemini response") from e

        text = self._extract_text(data)
        logger.info("gemini_summary_generated", model=self.config.model, length=len(text))
        return format_summary(text)

    def _extract_text(self, data: dict[str, Any]) -> str:
        """Pull the reply text out of a generateContent response."""
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise InsightError("Malformed Gemini response") from e

        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        if not text.strip():
            raise InsightError("Empty Gemini response")
        return text
