"""Summary provider interface."""

from abc import ABC, abstractmethod
from typing import Any


class InsightError(Exception):
    """Exception for summary provider failures."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ISummaryProvider(ABC):
    """Abstract interface for natural-language report summaries."""

    @abstractmethod
    async def generate_summary(self, prompt: str, context: dict[str, Any]) -> str:
        """Summarize report data.

        Args:
            prompt: What the summary should focus on.
            context: Report data, serialized to JSON for the model.

        Returns:
            Summary text.

        Raises:
            InsightError: If the provider fails or returns no text.
        """
        ...
