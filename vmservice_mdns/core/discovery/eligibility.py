"""Decides whether a session may advertise itself on the local network."""

from __future__ import annotations

from ..logging_utils import LoggerLike, ensure_structured_logger
from .bot_detector import BotDetector

BOT_SUPPRESSED_MESSAGE = "Running on CI/Bot, not starting mDNS server."
DISCOVERY_DISABLED_MESSAGE = "mDNS local discovery is disabled."


async def is_eligible(
    bot_detector: BotDetector,
    enable_local_discovery: bool,
    *,
    logger: LoggerLike = None,
) -> bool:
    """Return True when advertisement may proceed.

    The configuration flag is checked first and short-circuits without
    querying the detector. The detector's verdict is final: the environment
    is never inspected here. A detector that fails counts as a bot.
    Ineligibility is traced, never raised.
    """
    log = ensure_structured_logger(logger, fallback_name="Eligibility")

    if not enable_local_discovery:
        log.trace(DISCOVERY_DISABLED_MESSAGE)
        return False

    try:
        running_on_bot = await bot_detector.is_running_on_bot()
    except Exception as e:
        log.trace("Bot detection failed (%s); treating as bot", e)
        running_on_bot = True

    if running_on_bot:
        log.trace(BOT_SUPPRESSED_MESSAGE)
        return False

    return True


__all__ = [
    "BOT_SUPPRESSED_MESSAGE",
    "DISCOVERY_DISABLED_MESSAGE",
    "is_eligible",
]
