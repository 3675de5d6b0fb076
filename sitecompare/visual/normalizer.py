"""Image normalizer — contain-fit screenshots onto a fixed canvas in place."""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from sitecompare.errors import DecodeError

logger = logging.getLogger(__name__)

CANONICAL_WIDTH = 1280
CANONICAL_HEIGHT = 800
PAD_COLOR = (255, 255, 255, 0)


def load_rgba(path: str | Path) -> Image.Image:
    """Read an image fully into memory as RGBA, raising DecodeError on failure."""
    try:
        with Image.open(path) as img:
            img.load()
            return img.convert("RGBA")
    except (FileNotFoundError, UnidentifiedImageError, OSError) as e:
        raise DecodeError(str(path), str(e)) from e


def normalize_image(
    path: str | Path, width: int = CANONICAL_WIDTH, height: int = CANONICAL_HEIGHT
) -> None:
    """Resize the PNG at ``path`` to exactly ``width`` x ``height``.

    Aspect ratio is preserved; the leftover area is padded with transparent
    white and the image is centered.
    """
    img = load_rgba(path)
    original = img.size
    resized = ImageOps.pad(
        img,
        (width, height),
        method=Image.Resampling.LANCZOS,
        color=PAD_COLOR,
        centering=(0.5, 0.5),
    )
    resized.save(path, format="PNG")
    logger.debug("Normalized %s from %dx%d to %dx%d",
                 path, original[0], original[1], width, height)
