"""Pytest configuration and shared fixtures."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
from PIL import Image
from playwright.async_api import Browser, BrowserContext, Page

from sitecompare.models.checks import Action, FormFlow, MenuCheck
from sitecompare.models.config import DeviceConfig, EnvironmentConfig, SuiteConfig
from sitecompare.models.results import ComparisonResult, VisualRunResult


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def device_config() -> DeviceConfig:
    """Create a desktop device configuration."""
    return DeviceConfig(name="Desktop", width=1280, height=800)


@pytest.fixture
def menu_check() -> MenuCheck:
    """Create a menu check definition."""
    return MenuCheck(
        name="Online Programs",
        menu_selector="#mega-menu-item-7306 > a.mega-menu-link",
        submenu_selector="#mega-menu-item-7306 ul.mega-sub-menu",
        links_selector="#mega-menu-item-7306 ul.mega-sub-menu a.mega-menu-link",
    )


@pytest.fixture
def form_flow() -> FormFlow:
    """Create a request-info form flow."""
    return FormFlow(
        name="Request Info",
        start_url="/programs/mba/",
        steps=[
            Action(action_type="click", selector="button.request-info-popup"),
            Action(action_type="block_resources", value=".png,.jpg,.css,.js"),
            Action(action_type="select", selector="#input_6_1", value="MBA-FIN"),
            Action(action_type="fill", selector="#input_6_2", value="John{{$timestamp}}"),
            Action(action_type="fill", selector="#input_6_6", value="john{{$timestamp}}@example.com"),
        ],
        submit_selector="#gform_submit_button_6",
        expect_navigation=True,
        expected_url_fragment="/confirmation/",
        confirmation_selector="h1.header2",
        expected_confirmation_text="Thanks for your submission!",
    )


@pytest.fixture
def suite_config(tmp_path: Path, device_config: DeviceConfig) -> SuiteConfig:
    """Create a suite configuration writing into a temporary directory."""
    return SuiteConfig(
        staging=EnvironmentConfig(base_url="https://staging.example.com"),
        prod=EnvironmentConfig(base_url="https://www.example.com"),
        pages=["/", "/about/", "/programs/mba/"],
        devices=[device_config],
        screenshots_dir=str(tmp_path / "screenshots"),
        report_dir=str(tmp_path / "reports"),
        soft_deadline_ms=50,
    )


@pytest.fixture
def temp_config_file(suite_config: SuiteConfig, tmp_path: Path) -> Path:
    """Write the suite configuration to a JSON file."""
    path = tmp_path / "sitecompare.json"
    with open(path, "w") as f:
        json.dump(suite_config.model_dump(), f)
    return path


# ============================================================================
# Result Fixtures
# ============================================================================


@pytest.fixture
def visual_run() -> VisualRunResult:
    """Create a visual run with one result per status."""
    return VisualRunResult(
        device="Desktop",
        viewport_width=1280,
        viewport_height=800,
        staging_url="https://staging.example.com",
        prod_url="https://www.example.com",
        started_at="2025-01-01T00:00:00Z",
        completed_at="2025-01-01T00:02:00Z",
        results=[
            ComparisonResult(page_path="/", similarity_percentage=99.5),
            ComparisonResult(page_path="/about/", similarity_percentage=80.25),
            ComparisonResult(page_path="/contact/", similarity_percentage="Size mismatch"),
            ComparisonResult(page_path="/broken/", similarity_percentage="Error",
                             error="Cannot decode image"),
        ],
    )


# ============================================================================
# Playwright Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_page() -> AsyncMock:
    """Create a mock Playwright page."""
    page = AsyncMock(spec=Page)
    page.url = "https://staging.example.com"
    page.screenshot = AsyncMock()
    page.goto = AsyncMock()
    page.click = AsyncMock()
    page.fill = AsyncMock()
    page.select_option = AsyncMock()
    page.hover = AsyncMock()
    page.route = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.wait_for_url = AsyncMock()
    page.wait_for_timeout = AsyncMock()
    page.text_content = AsyncMock(return_value="")
    page.expect_navigation = MagicMock()
    return page


@pytest.fixture
def mock_context(mock_page: AsyncMock) -> AsyncMock:
    """Create a mock Playwright browser context."""
    context = AsyncMock(spec=BrowserContext)
    context.new_page = AsyncMock(return_value=mock_page)
    context.close = AsyncMock()
    return context


@pytest.fixture
def mock_browser(mock_context: AsyncMock) -> AsyncMock:
    """Create a mock Playwright browser."""
    browser = AsyncMock(spec=Browser)
    browser.new_context = AsyncMock(return_value=mock_context)
    return browser


# ============================================================================
# Image Helpers
# ============================================================================


def create_png(path: Path, size: tuple[int, int], color=(255, 255, 255, 255)) -> Path:
    """Write a solid-color RGBA PNG."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", size, color).save(path, format="PNG")
    return path


@pytest.fixture
def make_png():
    """Fixture that provides the create_png function."""
    return create_png
