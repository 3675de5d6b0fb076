"""Menu link check — hover a navigation menu and validate its links."""

from __future__ import annotations

import logging

from playwright.async_api import Page

from sitecompare.errors import CheckError
from sitecompare.models.checks import MenuCheck
from sitecompare.models.results import MenuCheckResult

logger = logging.getLogger(__name__)


async def verify_menu(page: Page, menu: MenuCheck) -> MenuCheckResult:
    """Check that a menu is visible, opens submenus and only holds real links.

    Links with an empty href are reported as warnings in ``invalid_links``;
    a hidden menu, or one without submenus or links, fails the check.
    """
    result = MenuCheckResult(name=menu.name)
    try:
        await _verify(page, menu, result)
    except Exception as e:
        logger.error("Menu '%s' check failed: %s", menu.name, e)
        result.error = str(e)
    return result


async def _verify(page: Page, menu: MenuCheck, result: MenuCheckResult) -> None:
    logger.debug("Locating the '%s' menu...", menu.name)
    menu_element = page.locator(menu.menu_selector)
    if not await menu_element.is_visible():
        raise CheckError(f"The '{menu.name}' menu is not visible.")
    result.visible = True

    await menu_element.hover()

    result.submenu_count = await page.locator(menu.submenu_selector).count()
    if result.submenu_count == 0:
        raise CheckError(f"No submenus found for '{menu.name}' menu.")

    links = page.locator(menu.links_selector)
    result.link_count = await links.count()
    if result.link_count == 0:
        raise CheckError(f"No links found in the '{menu.name}' menu.")
    logger.info("Found %d submenus and %d links in the '%s' menu",
                result.submenu_count, result.link_count, menu.name)

    for i in range(result.link_count):
        link = links.nth(i)
        text = (await link.text_content() or "").strip()
        href = await link.get_attribute("href")
        if not href or not href.strip():
            logger.warning("Link '%s' in '%s' menu does not have a valid href attribute.",
                           text, menu.name)
            result.invalid_links.append(text)
        else:
            logger.debug("Link '%s' in '%s' menu is valid with href: %s", text, menu.name, href)

    if result.invalid_links:
        logger.warning("'%s' menu has %d links without href",
                       menu.name, len(result.invalid_links))
    else:
        logger.info("All links in the '%s' menu are valid.", menu.name)
