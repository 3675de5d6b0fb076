"""Tests for the broken image check."""

from unittest.mock import AsyncMock, Mock

import pytest

from sitecompare.checks.broken_images import check_broken_images

PAGE_URL = "https://staging.example.com/about/"


def _page_with_images(srcs: list, statuses: dict | None = None, errors: dict | None = None) -> AsyncMock:
    """Build a page whose <img> elements carry ``srcs`` and whose fetches
    answer with ``statuses`` (url -> code) or raise ``errors`` (url -> exc)."""
    statuses = statuses or {}
    errors = errors or {}

    images = Mock()
    images.count = AsyncMock(return_value=len(srcs))
    elements = [Mock(get_attribute=AsyncMock(return_value=src)) for src in srcs]
    images.nth = Mock(side_effect=lambda i: elements[i])

    async def get(url):
        if url in errors:
            raise errors[url]
        return Mock(status=statuses.get(url, 200), dispose=AsyncMock())

    page = AsyncMock()
    page.locator = Mock(return_value=images)
    page.request = Mock()
    page.request.get = AsyncMock(side_effect=get)
    return page


@pytest.mark.asyncio
class TestCheckBrokenImages:
    """Tests for check_broken_images."""

    async def test_all_images_load(self):
        page = _page_with_images(["https://cdn.example.com/a.png", "/img/b.png"])

        result = await check_broken_images(page, PAGE_URL)

        page.goto.assert_called_once_with(PAGE_URL, wait_until="domcontentloaded")
        page.locator.assert_called_once_with("img")
        assert result.passed
        assert result.image_count == 2
        assert result.checked == 2

    async def test_relative_and_protocol_relative_urls_resolved(self):
        page = _page_with_images(["logo.png", "//cdn.example.com/c.png"])

        await check_broken_images(page, PAGE_URL)

        fetched = [c.args[0] for c in page.request.get.call_args_list]
        assert fetched == [
            "https://staging.example.com/about/logo.png",
            "https://cdn.example.com/c.png",
        ]

    async def test_missing_src_is_broken(self):
        page = _page_with_images([None, ""])

        result = await check_broken_images(page, PAGE_URL)

        assert not result.passed
        assert [b.index for b in result.broken] == [1, 2]
        assert result.broken[0].reason == "Missing src attribute"
        page.request.get.assert_not_called()

    async def test_non_200_is_broken(self):
        page = _page_with_images(
            ["https://cdn.example.com/ok.png", "https://cdn.example.com/gone.png"],
            statuses={"https://cdn.example.com/gone.png": 404},
        )

        result = await check_broken_images(page, PAGE_URL)

        assert len(result.broken) == 1
        assert result.broken[0].index == 2
        assert result.broken[0].url == "https://cdn.example.com/gone.png"
        assert result.broken[0].reason == "HTTP 404"

    async def test_request_error_is_broken(self):
        url = "https://cdn.example.com/timeout.png"
        page = _page_with_images([url], errors={url: TimeoutError("timed out")})

        result = await check_broken_images(page, PAGE_URL)

        assert result.broken[0].reason == "timed out"

    async def test_excluded_urls_skipped(self):
        page = _page_with_images([
            "https://bat.bing.com/action/0?ti=1",
            "https://example.com/tracking/pixel.gif",
            "https://cdn.example.com/a.png",
        ])

        result = await check_broken_images(page, PAGE_URL, ["bat.bing.com", "tracking"])

        assert result.skipped == 2
        assert result.checked == 1
        assert page.request.get.call_count == 1

    async def test_navigation_failure_recorded(self):
        page = _page_with_images([])
        page.goto = AsyncMock(side_effect=RuntimeError("net::ERR_NAME_NOT_RESOLVED"))

        result = await check_broken_images(page, PAGE_URL)

        assert not result.passed
        assert "ERR_NAME_NOT_RESOLVED" in result.error

    async def test_page_without_images(self):
        result = await check_broken_images(_page_with_images([]), PAGE_URL)

        assert result.passed
        assert result.image_count == 0
