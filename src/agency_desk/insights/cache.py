"""Per-page cache of AI summaries."""

from typing import Any

from agency_desk.common.logging import get_logger
from agency_desk.insights.interfaces import InsightError, ISummaryProvider

logger = get_logger(__name__)

UNAVAILABLE_MESSAGE = (
    "AI insights are not available. Please configure your Gemini API key to enable this feature."
)
FAILURE_MESSAGE = "Could not fetch AI insight."


class InsightCache:
    """Holds at most one summary per report page.

    A page is fetched once: while its request is in flight, or once a result
    (including a failure message) is cached, further fetches return the
    cached value without calling the provider. ``clear`` allows a refresh.
    """

    def __init__(self, provider: ISummaryProvider | None = None):
        """Initialize cache.

        Args:
            provider: Summary provider, or None when AI is not configured.
        """
        self.provider = provider
        self._results: dict[str, str] = {}
        self._loading: set[str] = set()

    @property
    def is_available(self) -> bool:
        return self.provider is not None

    def get(self, page: str) -> str | None:
        """Cached summary for a page, if any."""
        return self._results.get(page)

    def is_loading(self, page: str) -> bool:
        return page in self._loading

    def clear(self, page: str | None = None) -> None:
        """Drop the cached summary of one page, or of every page."""
        if page is None:
            self._results.clear()
        else:
            self._results.pop(page, None)

    async def fetch(self, page: str, prompt: str, context: dict[str, Any]) -> str | None:
        """Fetch and cache a page summary.

        Args:
            page: Report page key.
            prompt: Summary prompt.
            context: Report data for the prompt.

        Returns:
            The cached text, or None while another fetch for the page runs.
        """
        if page in self._loading or page in self._results:
            return self._results.get(page)

        if self.provider is None:
            self._results[page] = UNAVAILABLE_MESSAGE
            return self._results[page]

        self._loading.add(page)
        try:
            text = await self.provider.generate_summary(prompt, context)
        except InsightError as e:
            logger.error("insight_failed", page=page, error=str(e))
            text = FAILURE_MESSAGE
        finally:
            self._loading.discard(page)

        self._results[page] = text
        logger.info("insight_cached", page=page, length=len(text))
        return text
