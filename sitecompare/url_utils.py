"""Shared URL utilities — join environment URLs and derive screenshot names."""

from __future__ import annotations

from urllib.parse import urljoin


def join_url(base_url: str, page_path: str) -> str:
    """Append a relative page path to an environment base URL.

    Absolute URLs are returned unchanged.
    """
    if page_path.startswith(("http://", "https://")):
        return page_path
    if not page_path:
        return base_url
    return base_url.rstrip("/") + "/" + page_path.lstrip("/")


def page_slug(page_path: str) -> str:
    """File stem for a page's screenshots: every '/' becomes '_'."""
    return page_path.replace("/", "_")


def resolve_image_url(src: str, page_url: str) -> str:
    """Turn an <img src> into an absolute URL."""
    if src.startswith("//"):
        return f"https:{src}"
    if not src.startswith("http"):
        return urljoin(page_url, src)
    return src


def is_excluded(url: str, patterns: list[str]) -> bool:
    """True if the URL contains any of the substring patterns."""
    return any(p in url for p in patterns)
