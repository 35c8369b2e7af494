"""
Bot / CI detection.

The eligibility guard only ever sees ``is_running_on_bot()``; everything
that inspects the process environment lives here so that a different
detector can be substituted without touching environment state.
"""

from __future__ import annotations

import asyncio
import os
import sys
import urllib.error
import urllib.request
from typing import Mapping, Optional, Protocol

from ..logging_utils import get_module_logger

logger = get_module_logger("BotDetector")

AZURE_METADATA_URL = "http://169.254.169.254/metadata/instance?api-version=2019-03-11"
AZURE_METADATA_TIMEOUT = 1.0


class BotDetector(Protocol):
    """Answers whether the process runs in an automated (bot/CI) context."""

    async def is_running_on_bot(self) -> bool: ...


class StaticBotDetector:
    """Detector with a fixed verdict."""

    def __init__(self, running_on_bot: bool) -> None:
        self._running_on_bot = running_on_bot

    async def is_running_on_bot(self) -> bool:
        return self._running_on_bot


class AzureDetector:
    """Detects Azure VMs by probing the instance metadata service.

    Only Linux hosts are probed. Any network failure means "not Azure".
    """

    def __init__(self, platform: Optional[str] = None, timeout: float = AZURE_METADATA_TIMEOUT) -> None:
        self._platform = platform or sys.platform
        self._timeout = timeout
        self._is_running_on_azure: Optional[bool] = None

    async def is_running_on_azure(self) -> bool:
        if self._is_running_on_azure is not None:
            return self._is_running_on_azure
        if self._platform != "linux":
            self._is_running_on_azure = False
            return False
        # Run the blocking HTTP request in a thread pool
        loop = asyncio.get_running_loop()
        self._is_running_on_azure = await loop.run_in_executor(None, self._probe_metadata)
        return self._is_running_on_azure

    def _probe_metadata(self) -> bool:
        request = urllib.request.Request(AZURE_METADATA_URL, headers={"Metadata": "true"})
        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                return response.status == 200
        except (urllib.error.URLError, OSError) as e:
            logger.debug("Azure metadata probe failed: %s", e)
            return False


class EnvironmentBotDetector:
    """Production detector driven by well-known CI environment markers."""

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        azure_detector: Optional[AzureDetector] = None,
    ) -> None:
        self._environ = environ if environ is not None else os.environ
        self._azure_detector = azure_detector or AzureDetector()
        self._is_running_on_bot: Optional[bool] = None

    async def is_running_on_bot(self) -> bool:
        if self._is_running_on_bot is None:
            self._is_running_on_bot = await self._detect()
        return self._is_running_on_bot

    def _is_interactive(self) -> bool:
        env = self._environ
        return (
            env.get("BOT") == "false"
            # Set by IDEs that launch the tool on a developer's behalf.
            or "FLUTTER_HOST" in env
            or "FLUTTER_ANALYTICS_LOG_FILE" in env
        )

    def _has_ci_marker(self) -> bool:
        env = self._environ
        return (
            env.get("BOT") == "true"
            or env.get("TRAVIS") == "true"
            or env.get("CONTINUOUS_INTEGRATION") == "true"
            or "CI" in env
            or "APPVEYOR" in env
            or "CIRRUS_CI" in env
            or ("AWS_REGION" in env and "CODEBUILD_INITIATOR" in env)
            or "JENKINS_URL" in env
            or "GITHUB_ACTIONS" in env
            or env.get("CHROME_HEADLESS") == "1"
            or "BUILDBOT_BUILDERNAME" in env
            or "SWARMING_TASK_ID" in env
            or "BORG_ALLOC_DIR" in env
        )

    async def _detect(self) -> bool:
        if self._is_interactive():
            return False
        if self._has_ci_marker():
            return True
        return await self._azure_detector.is_running_on_azure()


__all__ = [
    "AzureDetector",
    "BotDetector",
    "EnvironmentBotDetector",
    "StaticBotDetector",
]
