"""
Tests for capability health probes.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from shortreel.core.exceptions import ImageSearchFailed, SynthesisFailed
from shortreel.services.capabilities.config import CapabilityConfig
from shortreel.services.capabilities.health import CAPABILITIES, check_all, check_capability
from shortreel.services.llm.base import LLMError

PROBE = "shortreel.services.capabilities.health._find_probe"


@pytest.mark.asyncio
class TestCheckCapability:

    async def test_unknown_capability(self):
        with pytest.raises(KeyError):
            await check_capability("openai", CapabilityConfig())

    async def test_not_configured(self):
        result = await check_capability("unsplash", CapabilityConfig())
        assert result["status"] == "not_configured"
        assert result["configured"] is False
        assert result["service"] == "Unsplash"

    async def test_working(self):
        with patch(PROBE, return_value=AsyncMock(return_value=None)):
            result = await check_capability("llm", CapabilityConfig(gemini_api_key="k"))
        assert result["status"] == "working"
        assert result["configured"] is True

    async def test_working_with_detail(self):
        with patch(PROBE, return_value=AsyncMock(return_value="3 voices")):
            result = await check_capability("edge_tts", CapabilityConfig(edge_tts_voice="v"))
        assert result["message"].endswith("(3 voices)")

    @pytest.mark.parametrize(
        "error, code",
        [
            (LLMError("bad key", status_code=401), 401),
            (SynthesisFailed("quota", "quota"), "quota"),
            (ImageSearchFailed("down"), None),
        ],
    )
    async def test_probe_errors(self, error, code):
        with patch(PROBE, return_value=AsyncMock(side_effect=error)):
            result = await check_capability("pexels", CapabilityConfig(pexels_api_key="p"))
        assert result["status"] == "error"
        assert result.get("error_code") == code

    async def test_timeout(self):
        async def slow(timeout):
            await asyncio.sleep(5)

        with patch(PROBE, return_value=slow):
            result = await check_capability("pexels", CapabilityConfig(pexels_api_key="p"), timeout=0.01)
        assert result["status"] == "error"
        assert result["error_code"] == "timeout"

    async def test_unexpected_error_does_not_raise(self):
        with patch(PROBE, return_value=AsyncMock(side_effect=RuntimeError("boom"))):
            result = await check_capability("pexels", CapabilityConfig(pexels_api_key="p"))
        assert result["status"] == "error"
        assert "boom" in result["message"]


@pytest.mark.asyncio
async def test_check_all_summary_with_nothing_configured():
    report = await check_all(CapabilityConfig())
    assert set(report["apis"]) == set(CAPABILITIES)
    assert report["summary"] == {
        "total": len(CAPABILITIES),
        "working": 0,
        "error": 0,
        "not_configured": len(CAPABILITIES),
    }
    assert "timestamp" in report
