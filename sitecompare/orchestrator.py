"""Suite orchestrator — coordinates visual comparison, site checks and reports."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from pathlib import Path

from playwright.async_api import Browser, async_playwright

from sitecompare.checks.broken_images import check_broken_images
from sitecompare.checks.form_flow import run_form_flow
from sitecompare.checks.menu_links import verify_menu
from sitecompare.models.config import DeviceConfig, SuiteConfig
from sitecompare.models.results import (
    FormFlowResult,
    ImageCheckResult,
    MenuCheckResult,
    SuiteResult,
    VisualRunResult,
)
from sitecompare.reporter.reporter import Reporter
from sitecompare.url_utils import join_url
from sitecompare.utils.browser import create_context, launch_browser
from sitecompare.visual.suite import VisualSuite

logger = logging.getLogger(__name__)

ALL_STAGES = ("visual", "images", "menus", "forms")


class Orchestrator:
    """Runs the suite stages against one browser and writes the reports."""

    def __init__(self, config: SuiteConfig):
        self.config = config

    def run(
        self,
        stages: tuple[str, ...] = ALL_STAGES,
        devices: list[DeviceConfig] | None = None,
        form_names: list[str] | None = None,
    ) -> tuple[SuiteResult, dict[str, str]]:
        """Execute the selected stages and generate reports.

        Returns the suite result and a mapping of report label -> path.
        """
        return asyncio.run(self._run(stages, devices, form_names))

    async def _run(
        self,
        stages: tuple[str, ...],
        devices: list[DeviceConfig] | None,
        form_names: list[str] | None,
    ) -> tuple[SuiteResult, dict[str, str]]:
        start = time.time()
        suite = SuiteResult(
            run_id=f"run_{uuid.uuid4().hex[:8]}",
            started_at=time.strftime("%Y-%m-%dT%H:%M:%SZ"),
            staging_url=self.config.staging.base_url,
            prod_url=self.config.prod.base_url,
        )
        logger.info("=== Starting suite %s: staging=%s prod=%s ===",
                    suite.run_id, suite.staging_url, suite.prod_url)

        async with async_playwright() as p:
            browser = await launch_browser(p, headless=self.config.headless)
            try:
                if "visual" in stages:
                    logger.info("--- Visual comparison ---")
                    for device in devices or self.config.devices:
                        suite.visual_runs.append(await self._visual(browser, device))
                if "images" in stages:
                    logger.info("--- Broken image check ---")
                    suite.image_checks = await self._images(browser)
                if "menus" in stages and self.config.menus:
                    logger.info("--- Menu link check ---")
                    suite.menu_checks = await self._menus(browser)
                if "forms" in stages and self.config.forms:
                    logger.info("--- Form flows ---")
                    suite.form_flows = await self._forms(browser, form_names)
            finally:
                await browser.close()

        suite.completed_at = time.strftime("%Y-%m-%dT%H:%M:%SZ")
        suite.duration_seconds = round(time.time() - start, 2)

        # Report failures are fatal and propagate to the caller
        reports = Reporter(self.config).generate_reports(suite, Path(self.config.report_dir))
        logger.info("=== Suite complete in %.1fs ===", suite.duration_seconds)
        return suite, reports

    async def _visual(self, browser: Browser, device: DeviceConfig) -> VisualRunResult:
        return await VisualSuite(self.config, device).run(browser)

    async def _images(self, browser: Browser) -> list[ImageCheckResult]:
        context = await create_context(browser, user_agent=self.config.user_agent)
        results = []
        try:
            page = await context.new_page()
            for page_path in self.config.pages:
                url = join_url(self.config.staging.base_url, page_path)
                results.append(
                    await check_broken_images(page, url, self.config.image_exclude_patterns)
                )
        finally:
            await context.close()
        return results

    async def _menus(self, browser: Browser) -> list[MenuCheckResult]:
        url = self.config.menu_page_url or self.config.staging.base_url
        context = await create_context(browser, user_agent=self.config.user_agent)
        results = []
        try:
            page = await context.new_page()
            try:
                logger.info("Navigating to %s for menu checks", url)
                await page.goto(url, wait_until="domcontentloaded")
            except Exception as e:
                logger.error("Could not load %s: %s", url, e)
                return [MenuCheckResult(name=m.name, error=str(e)) for m in self.config.menus]
            for menu in self.config.menus:
                results.append(await verify_menu(page, menu))
        finally:
            await context.close()
        return results

    async def _forms(self, browser: Browser, form_names: list[str] | None) -> list[FormFlowResult]:
        flows = self.config.forms
        if form_names:
            wanted = {n.lower() for n in form_names}
            flows = [f for f in flows if f.name.lower() in wanted]
        results = []
        for flow in flows:
            context = await create_context(browser, user_agent=self.config.user_agent)
            results.append(await run_form_flow(context, flow, self.config.staging.base_url))
        return results
