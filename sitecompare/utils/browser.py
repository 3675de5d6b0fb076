"""Browser utilities — launch Chromium, build contexts, block resources."""

from __future__ import annotations

import logging
import random
from typing import Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, Route

logger = logging.getLogger(__name__)


async def launch_browser(playwright: Playwright, headless: bool = True) -> Browser:
    """Launch Chromium for a suite run."""
    return await playwright.chromium.launch(headless=headless)


async def create_context(
    browser: Browser,
    viewport: Optional[dict] = None,
    user_agent: Optional[str] = None,
) -> BrowserContext:
    """Create a browser context.

    Args:
        viewport: ``{"width": ..., "height": ...}``; Playwright's default when omitted.
        user_agent: Override string; Playwright's default when omitted.
    """
    context_kwargs: dict = {"locale": "en-US"}
    if viewport:
        context_kwargs["viewport"] = viewport
    if user_agent:
        context_kwargs["user_agent"] = user_agent
    return await browser.new_context(**context_kwargs)


async def block_resources(page: Page, extensions: list[str]) -> None:
    """Abort every request whose URL ends with one of the given extensions."""
    suffixes = tuple(e if e.startswith(".") else f".{e}" for e in extensions)

    async def _handle(route: Route) -> None:
        if route.request.url.endswith(suffixes):
            await route.abort()
        else:
            await route.continue_()

    await page.route("**/*", _handle)
    logger.debug("Blocking requests ending with %s", ", ".join(suffixes))


async def human_delay(page: Page, min_ms: int = 50, max_ms: int = 300) -> None:
    """Wait a randomized amount of time to mimic human interaction pacing."""
    await page.wait_for_timeout(random.randint(min_ms, max_ms))
