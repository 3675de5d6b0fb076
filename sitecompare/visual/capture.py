"""Screenshot capture — navigate with a soft deadline, then always screenshot."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from playwright.async_api import Page

logger = logging.getLogger(__name__)

NAVIGATION_TIMEOUT_MS = 60000
SOFT_DEADLINE_MS = 10000


def _log_abandoned_navigation(url: str, task: asyncio.Task) -> None:
    """Retrieve the outcome of a navigation that lost the race."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Abandoned navigation to %s ended with: %s", url, exc)


async def capture_screenshot(
    page: Page,
    url: str,
    output_path: Path,
    navigation_timeout_ms: int = NAVIGATION_TIMEOUT_MS,
    soft_deadline_ms: int = SOFT_DEADLINE_MS,
) -> bool:
    """Navigate to ``url`` and write a full-page screenshot to ``output_path``.

    Navigation waits for network idle (bounded by ``navigation_timeout_ms``)
    but races a shorter soft deadline; whichever finishes first lets the
    screenshot proceed. The losing task is left to run on its own. Any
    error is logged and a best-effort screenshot is attempted anyway.

    Never raises. Returns False only when no screenshot could be written.
    """
    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error("Cannot create screenshot directory for %s: %s", url, e)
        return False

    try:
        logger.info("Navigating to: %s", url)
        navigation = asyncio.ensure_future(
            page.goto(url, wait_until="networkidle", timeout=navigation_timeout_ms)
        )
        deadline = asyncio.ensure_future(asyncio.sleep(soft_deadline_ms / 1000))

        done, _ = await asyncio.wait(
            {navigation, deadline}, return_when=asyncio.FIRST_COMPLETED
        )
        deadline.cancel()

        if navigation in done:
            # Re-raises a navigation failure into the fallback path
            navigation.result()
        else:
            logger.warning("Timeout detected on %s. Forcing screenshot.", url)
            navigation.add_done_callback(lambda t: _log_abandoned_navigation(url, t))

        await page.screenshot(path=str(output_path), full_page=True)
        logger.info("Screenshot captured: %s", output_path)
        return True
    except Exception as e:
        logger.error("Failed to capture screenshot for %s: %s", url, e)

    try:
        await page.screenshot(path=str(output_path), full_page=True)
        logger.info("Forced screenshot captured: %s", output_path)
        return True
    except Exception as e:
        logger.error("Forced screenshot failed for %s: %s", url, e)
        return False
