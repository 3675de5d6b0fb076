"""Exception types raised by the comparison pipeline and site checks."""

from __future__ import annotations


class SiteCompareError(Exception):
    """Base class for all sitecompare errors."""


class DecodeError(SiteCompareError):
    """A screenshot file is missing or is not a decodable raster image."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        message = f"Cannot decode image {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class DimensionMismatchError(SiteCompareError):
    """Two images handed to the pixel differ have different sizes."""

    def __init__(self, size_a: tuple[int, int], size_b: tuple[int, int]):
        self.size_a = size_a
        self.size_b = size_b
        super().__init__(
            f"Image sizes differ: {size_a[0]}x{size_a[1]} vs {size_b[0]}x{size_b[1]}"
        )


class ReportError(SiteCompareError):
    """Report generation failed; the run has no usable output."""


class CheckError(SiteCompareError):
    """A menu or form check found the page in an unexpected state."""
