"""Tests for the per-page insight cache."""

import asyncio
from typing import Any

import pytest

from agency_desk.insights.cache import FAILURE_MESSAGE, UNAVAILABLE_MESSAGE, InsightCache
from agency_desk.insights.interfaces import InsightError, ISummaryProvider


class FakeProvider(ISummaryProvider):
    """Counts calls and returns canned text."""

    def __init__(self, text: str = "• insight", error: InsightError | None = None):
        self.text = text
        self.error = error
        self.calls: list[str] = []
        self.release = asyncio.Event()
        self.release.set()

    async def generate_summary(self, prompt: str, context: dict[str, Any]) -> str:
        self.calls.append(prompt)
        await self.release.wait()
        if self.error:
            raise self.error
        return self.text


class TestInsightCache:
    """Tests for InsightCache."""

    @pytest.mark.asyncio
    async def test_fetch_caches_per_page(self):
        """Test each page calls the provider once."""
        provider = FakeProvider()
        cache = InsightCache(provider)

        first = await cache.fetch("daily", "Summarize", {})
        second = await cache.fetch("daily", "Summarize again", {})
        await cache.fetch("monthly", "Summarize", {})

        assert first == second == "• insight"
        assert len(provider.calls) == 2
        assert cache.get("daily") == "• insight"

    @pytest.mark.asyncio
    async def test_unavailable_without_provider(self):
        cache = InsightCache()

        assert cache.is_available is False
        assert await cache.fetch("daily", "Summarize", {}) == UNAVAILABLE_MESSAGE

    @pytest.mark.asyncio
    async def test_failure_is_cached(self):
        """Test a provider error caches the failure message."""
        provider = FakeProvider(error=InsightError("quota", status_code=429))
        cache = InsightCache(provider)

        assert await cache.fetch("daily", "Summarize", {}) == FAILURE_MESSAGE
        assert await cache.fetch("daily", "Summarize", {}) == FAILURE_MESSAGE
        assert len(provider.calls) == 1
        assert cache.is_loading("daily") is False

    @pytest.mark.asyncio
    async def test_concurrent_fetch_is_ignored(self):
        """Test a second fetch while loading does not call the provider."""
        provider = FakeProvider()
        provider.release.clear()
        cache = InsightCache(provider)

        task = asyncio.create_task(cache.fetch("daily", "Summarize", {}))
        await asyncio.sleep(0)
        assert cache.is_loading("daily")

        assert await cache.fetch("daily", "Summarize", {}) is None

        provider.release.set()
        assert await task == "• insight"
        assert len(provider.calls) == 1

    @pytest.mark.asyncio
    async def test_clear_allows_refresh(self):
        provider = FakeProvider()
        cache = InsightCache(provider)
        await cache.fetch("daily", "Summarize", {})
        await cache.fetch("monthly", "Summarize", {})

        cache.clear("daily")
        await cache.fetch("daily", "Summarize", {})

        assert len(provider.calls) == 3
        cache.clear()
        assert cache.get("monthly") is None
