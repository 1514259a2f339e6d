"""
Backoff Utilities

Timing primitive and rate-limit delay parsing used by the translation
retry engine.
"""

import asyncio
import logging
import re

logger = logging.getLogger(__name__)

DEFAULT_RETRY_DELAY = 30
RETRY_PADDING = 5
MAX_RETRY_DELAY = 60

_RETRY_DELAY_PATTERN = re.compile(r"retryDelay.*?(\d+)")


class Sleeper:
    """Awaitable delay. Subclass or replace to avoid real waits in tests."""

    async def __call__(self, seconds: float) -> None:
        if seconds > 0:
            logger.debug(f"Sleeping {seconds}s")
            await asyncio.sleep(seconds)


def parse_retry_delay(
    body: str,
    default: int = DEFAULT_RETRY_DELAY,
    padding: int = RETRY_PADDING,
    cap: int = MAX_RETRY_DELAY,
) -> int:
    """
    Work out how long to wait after a rate-limited response.

    The server hint is the first integer following ``retryDelay`` in the
    error body (e.g. ``"retryDelay": "17s"``). A hint is padded and capped;
    without one the default is used as is.
    """
    match = _RETRY_DELAY_PATTERN.search(body or "")
    if match:
        return min(int(match.group(1)) + padding, cap)
    return default
