"""Visual suite — capture staging and prod per page and compare them."""

from __future__ import annotations

import logging
import shutil
import time
from pathlib import Path

from playwright.async_api import Browser

from sitecompare.models.config import DeviceConfig, SuiteConfig
from sitecompare.models.results import ERROR, ComparisonResult, VisualRunResult
from sitecompare.url_utils import join_url, page_slug
from sitecompare.utils.browser import create_context

from .capture import capture_screenshot
from .comparator import compare_screenshots

logger = logging.getLogger(__name__)

ENVIRONMENT_DIRS = ("staging", "prod", "diff")


class ScreenshotLayout:
    """Paths of the screenshot tree for one device."""

    def __init__(self, screenshots_dir: Path, device: str):
        self.root = Path(screenshots_dir) / device

    def path(self, kind: str, page_path: str) -> Path:
        return self.root / kind / f"{page_slug(page_path)}.png"

    def reset(self) -> None:
        """Remove the previous run's files and recreate empty directories."""
        if self.root.exists():
            shutil.rmtree(self.root)
        for kind in ENVIRONMENT_DIRS:
            (self.root / kind).mkdir(parents=True, exist_ok=True)


class VisualSuite:
    """Runs the staging-vs-prod screenshot comparison for one device."""

    def __init__(self, config: SuiteConfig, device: DeviceConfig):
        self.config = config
        self.device = device
        self.layout = ScreenshotLayout(Path(config.screenshots_dir), device.name)

    async def run(self, browser: Browser) -> VisualRunResult:
        """Process every configured page in order and collect the results."""
        run = VisualRunResult(
            device=self.device.name,
            viewport_width=self.device.width,
            viewport_height=self.device.height,
            staging_url=self.config.staging.base_url,
            prod_url=self.config.prod.base_url,
            started_at=time.strftime("%Y-%m-%dT%H:%M:%SZ"),
            pass_threshold=self.config.pass_threshold,
        )
        logger.info("Running visual comparison for %s (%d pages)",
                    self.device.name, len(self.config.pages))
        self.layout.reset()

        context = await create_context(
            browser,
            viewport={"width": self.device.width, "height": self.device.height},
            user_agent=self.config.user_agent,
        )
        try:
            page = await context.new_page()
            for index, page_path in enumerate(self.config.pages):
                logger.info("Comparing page [%d/%d]: %s",
                            index + 1, len(self.config.pages), page_path)
                result = await self.compare_page(page, page_path)
                run.results.append(result)
        finally:
            await context.close()

        run.completed_at = time.strftime("%Y-%m-%dT%H:%M:%SZ")
        counts = run.counts()
        logger.info("%s: %d passed, %d failed, %d errors",
                    self.device.name, counts["pass"], counts["fail"], counts["error"])
        return run

    async def compare_page(self, page, page_path: str) -> ComparisonResult:
        """Capture both environments for one page and compare them.

        Any failure is recorded as an "Error" result rather than raised.
        """
        staging_shot = self.layout.path("staging", page_path)
        prod_shot = self.layout.path("prod", page_path)
        diff_shot = self.layout.path("diff", page_path)
        try:
            await capture_screenshot(
                page, join_url(self.config.staging.base_url, page_path), staging_shot,
                navigation_timeout_ms=self.config.navigation_timeout_ms,
                soft_deadline_ms=self.config.soft_deadline_ms,
            )
            await capture_screenshot(
                page, join_url(self.config.prod.base_url, page_path), prod_shot,
                navigation_timeout_ms=self.config.navigation_timeout_ms,
                soft_deadline_ms=self.config.soft_deadline_ms,
            )
            similarity = compare_screenshots(
                staging_shot, prod_shot, diff_shot,
                width=self.config.canonical_width,
                height=self.config.canonical_height,
                threshold=self.config.diff_threshold,
            )
        except Exception as e:
            logger.error("Comparison failed for %s: %s", page_path, e)
            return ComparisonResult(page_path=page_path, similarity_percentage=ERROR, error=str(e))

        return ComparisonResult(
            page_path=page_path,
            similarity_percentage=similarity,
            diff_path=str(diff_shot) if diff_shot.exists() else None,
        )
