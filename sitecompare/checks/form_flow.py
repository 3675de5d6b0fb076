"""Form flow runner — fill a lead form, submit it, verify the confirmation."""

from __future__ import annotations

import logging
import re
import time

from playwright.async_api import BrowserContext, Page

from sitecompare.errors import CheckError
from sitecompare.models.checks import FormFlow
from sitecompare.models.results import FormFlowResult, StepResult
from sitecompare.url_utils import join_url

from .action_runner import resolve_dynamic_vars, run_action

logger = logging.getLogger(__name__)


def normalize_text(text: str) -> str:
    """Collapse whitespace and lowercase, for confirmation text matching."""
    return re.sub(r"\s+", " ", text.strip()).lower()


async def run_form_flow(context: BrowserContext, flow: FormFlow, base_url: str) -> FormFlowResult:
    """Run one form flow in a fresh page of ``context``.

    The context is closed when the flow ends. Failures are recorded on the
    returned result, never raised.
    """
    start = time.time()
    result = FormFlowResult(name=flow.name)
    logger.info("Running form flow: %s", flow.name)
    try:
        page = await context.new_page()
        await _run(page, flow, base_url, result)
        result.passed = True
        logger.info("Form flow '%s' passed", flow.name)
    except Exception as e:
        result.failure_reason = str(e)
        logger.error("Form flow '%s' failed: %s", flow.name, e)
    finally:
        result.duration_seconds = round(time.time() - start, 2)
        await context.close()
    return result


async def _run(page: Page, flow: FormFlow, base_url: str, result: FormFlowResult) -> None:
    start_url = join_url(base_url, flow.start_url)
    logger.debug("Opening %s", start_url)
    await page.goto(start_url, wait_until="domcontentloaded")

    for i, action in enumerate(resolve_dynamic_vars(flow.steps)):
        step = StepResult(
            step_index=i, action_type=action.action_type, selector=action.selector,
            value=action.value, description=action.description,
        )
        result.step_results.append(step)
        try:
            await run_action(page, action)
        except Exception as e:
            step.status = "fail"
            step.error_message = str(e)
            raise CheckError(f"Step {i} ({action.action_type}) failed: {e}") from e

    logger.debug("Submitting form via %s", flow.submit_selector)
    if flow.expect_navigation:
        async with page.expect_navigation(wait_until="domcontentloaded"):
            await page.click(flow.submit_selector)
    else:
        await page.click(flow.submit_selector)

    result.final_url = page.url
    if flow.expected_url_fragment and flow.expected_url_fragment not in page.url:
        raise CheckError(
            f"Did not navigate to the expected confirmation URL: {page.url}"
        )

    await page.wait_for_selector(flow.confirmation_selector, timeout=flow.confirmation_timeout_ms)
    text = await page.text_content(flow.confirmation_selector) or ""
    result.confirmation_text = text.strip()
    if normalize_text(text) != normalize_text(flow.expected_confirmation_text):
        raise CheckError(f'Confirmation message mismatch. Found: "{text.strip()}"')
