"""Tests for the advertisement eligibility guard."""

import itertools

import pytest

from vmservice_mdns.core.discovery.eligibility import (
    BOT_SUPPRESSED_MESSAGE,
    DISCOVERY_DISABLED_MESSAGE,
    is_eligible,
)
from tests.infrastructure.mocks.discovery_mocks import FakeBotDetector


class TestIsEligible:
    """Test is_eligible policy ordering and diagnostics."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "enabled,on_bot", list(itertools.product([True, False], repeat=2))
    )
    async def test_truth_table(self, enabled, on_bot):
        result = await is_eligible(FakeBotDetector(on_bot), enabled)

        assert result is (enabled and not on_bot)

    @pytest.mark.asyncio
    async def test_disabled_does_not_query_detector(self, trace_caplog):
        detector = FakeBotDetector(False)

        assert await is_eligible(detector, False) is False
        assert detector.calls == 0
        assert DISCOVERY_DISABLED_MESSAGE in trace_caplog.text
        assert BOT_SUPPRESSED_MESSAGE not in trace_caplog.text

    @pytest.mark.asyncio
    async def test_bot_context_traced(self, trace_caplog):
        detector = FakeBotDetector(True)

        assert await is_eligible(detector, True) is False
        assert detector.calls == 1
        assert BOT_SUPPRESSED_MESSAGE in trace_caplog.text
        assert DISCOVERY_DISABLED_MESSAGE not in trace_caplog.text

    @pytest.mark.asyncio
    async def test_eligible_emits_no_diagnostic(self, trace_caplog):
        assert await is_eligible(FakeBotDetector(False), True) is True
        assert BOT_SUPPRESSED_MESSAGE not in trace_caplog.text
        assert DISCOVERY_DISABLED_MESSAGE not in trace_caplog.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("marker", ["BOT", "CI", "GITHUB_ACTIONS"])
    async def test_detector_verdict_overrides_environment(self, monkeypatch, marker):
        monkeypatch.setenv(marker, "true")

        assert await is_eligible(FakeBotDetector(False), True) is True

    @pytest.mark.asyncio
    async def test_detector_failure_counts_as_bot(self, trace_caplog):
        detector = FakeBotDetector(error=RuntimeError("boom"))

        assert await is_eligible(detector, True) is False
        assert "boom" in trace_caplog.text

    @pytest.mark.asyncio
    async def test_uses_injected_logger(self, trace_caplog):
        import logging

        custom = logging.getLogger("tests.guard")

        await is_eligible(FakeBotDetector(True), True, logger=custom)

        records = [r for r in trace_caplog.records if r.name == "tests.guard"]
        assert len(records) == 1
        assert BOT_SUPPRESSED_MESSAGE in records[0].getMessage()
