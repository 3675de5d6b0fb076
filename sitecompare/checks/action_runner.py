"""Action runner — turns form flow steps into Playwright calls."""

from __future__ import annotations

import logging
import re
import time

from playwright.async_api import Page

from sitecompare.models.checks import Action
from sitecompare.utils.browser import block_resources, human_delay

logger = logging.getLogger(__name__)

# Dynamic variables that can appear in action values.
_DYNAMIC_VAR_RE = re.compile(r"\{\{\$(\w+)\}\}")


def _build_dynamic_vars() -> dict[str, str]:
    """Build a snapshot of dynamic variable values (fixed for one flow)."""
    return {
        "timestamp": str(int(time.time() * 1000)),
    }


def _resolve_dynamic_vars(value: str, resolved: dict[str, str]) -> str:
    """Replace ``{{$variable}}`` tokens with pre-computed values."""
    def _replacer(match: re.Match) -> str:
        name = match.group(1)
        if name in resolved:
            return resolved[name]
        logger.warning("Unknown dynamic variable: {{$%s}}", name)
        return match.group(0)

    return _DYNAMIC_VAR_RE.sub(_replacer, value)


def resolve_dynamic_vars(actions: list[Action]) -> list[Action]:
    """Return copies of ``actions`` with ``{{$variable}}`` tokens resolved.

    A single snapshot of dynamic values is used so the same
    ``{{$timestamp}}`` appears in every action of a flow (e.g. a first
    name and an email derived from one submission).
    """
    resolved = _build_dynamic_vars()
    out = []
    for action in actions:
        if action.value and _DYNAMIC_VAR_RE.search(action.value):
            action = action.model_copy(
                update={"value": _resolve_dynamic_vars(action.value, resolved)}
            )
        out.append(action)
    return out


def _require(action: Action, field: str) -> str:
    value = getattr(action, field)
    if not value:
        raise ValueError(f"{action.action_type} action requires a {field}")
    return value


async def run_action(page: Page, action: Action, timeout: int = 10000) -> None:
    """Perform one form flow step on ``page``.

    ``timeout`` bounds every selector lookup, in milliseconds.

    Raises:
        ValueError: If the action type is unknown or a required field is empty.
    """
    logger.debug("Step %s: selector=%s value=%s %s",
                 action.action_type, action.selector, action.value,
                 action.description or "")

    match action.action_type:
        case "navigate":
            url = action.value or action.selector or ""
            logger.debug("Opening %s", url)
            await page.goto(url, wait_until="domcontentloaded", timeout=timeout)

        case "click":
            selector = _require(action, "selector")
            await human_delay(page, min_ms=50, max_ms=250)
            await page.click(selector, timeout=timeout)

        case "fill":
            selector = _require(action, "selector")
            await human_delay(page, min_ms=80, max_ms=300)
            await page.fill(selector, action.value or "", timeout=timeout)

        case "select":
            selector = _require(action, "selector")
            await human_delay(page, min_ms=50, max_ms=250)
            await page.select_option(selector, value=action.value or "", timeout=timeout)

        case "hover":
            await page.hover(_require(action, "selector"), timeout=timeout)

        case "wait":
            if action.selector:
                await page.wait_for_selector(action.selector, timeout=timeout)
            else:
                await page.wait_for_timeout(int(action.value) if action.value else 1000)

        case "wait_for_url":
            await page.wait_for_url(_require(action, "value"), timeout=timeout)

        case "block_resources":
            extensions = [e.strip() for e in (action.value or "").split(",") if e.strip()]
            if not extensions:
                raise ValueError("block_resources action requires comma-separated extensions")
            await block_resources(page, extensions)

        case _:
            raise ValueError(f"Unknown action type: {action.action_type}")
