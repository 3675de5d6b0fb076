"""Broken image check — fetch every <img> on a page and flag failures."""

from __future__ import annotations

import logging

from playwright.async_api import Page

from sitecompare.models.results import BrokenImage, ImageCheckResult
from sitecompare.url_utils import is_excluded, resolve_image_url

logger = logging.getLogger(__name__)


async def _fetch_status(page: Page, url: str) -> int:
    response = await page.request.get(url)
    try:
        return response.status
    finally:
        await response.dispose()


async def check_broken_images(
    page: Page, url: str, exclude_patterns: list[str] | None = None,
) -> ImageCheckResult:
    """Load ``url`` and verify that each image on it responds with 200.

    An image without a ``src`` counts as broken. Images whose URL contains
    one of ``exclude_patterns`` (tracking pixels and the like) are skipped.
    """
    exclude_patterns = exclude_patterns or []
    result = ImageCheckResult(page_url=url)

    try:
        logger.info("Navigating to: %s", url)
        await page.goto(url, wait_until="domcontentloaded")
        images = page.locator("img")
        result.image_count = await images.count()
    except Exception as e:
        logger.error("Could not load %s: %s", url, e)
        result.error = str(e)
        return result
    logger.info("Found %d images on %s", result.image_count, url)

    for i in range(result.image_count):
        index = i + 1
        try:
            src = await images.nth(i).get_attribute("src")
        except Exception as e:
            result.broken.append(BrokenImage(index=index, reason=f"Could not read src: {e}"))
            continue

        if not src:
            logger.warning("Image %d does not have a valid src attribute.", index)
            result.broken.append(BrokenImage(index=index, reason="Missing src attribute"))
            continue

        image_url = resolve_image_url(src, url)
        if is_excluded(image_url, exclude_patterns):
            logger.debug("Image %d is a tracking pixel or excluded URL: %s", index, image_url)
            result.skipped += 1
            continue

        result.checked += 1
        try:
            logger.debug("Checking image %d: %s", index, image_url)
            status = await _fetch_status(page, image_url)
        except Exception as e:
            logger.warning("Image %d failed to load. Error: %s", index, e)
            result.broken.append(BrokenImage(index=index, url=image_url, reason=str(e)))
            continue

        if status != 200:
            logger.warning("Image %d failed to load. Status Code: %d", index, status)
            result.broken.append(
                BrokenImage(index=index, url=image_url, reason=f"HTTP {status}")
            )

    if result.broken:
        logger.error("Found %d broken images on %s", len(result.broken), url)
    else:
        logger.info("No broken images found on %s", url)
    return result
