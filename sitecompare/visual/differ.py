"""Pixel differ — perceptual per-pixel comparison of two equally sized images.

Colors are compared in YIQ space after blending each pixel over white by its
alpha, the same metric pixelmatch uses. A pixel counts as mismatched when
its weighted YIQ distance exceeds ``35215 * threshold ** 2`` (35215 being the
largest possible distance) and it is not an anti-aliased edge pixel.

Anti-aliasing detection follows pixelmatch: a differing pixel is excused when,
in either image, it sits between a darker and a brighter neighbour, has at
most two identical neighbours, and that darker or brighter neighbour lies in
a flat region (three or more identical neighbours) in both images.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from PIL import Image

from sitecompare.errors import DimensionMismatchError

MAX_YIQ_DELTA = 35215.0
DEFAULT_THRESHOLD = 0.1

MISMATCH_COLOR = (255, 0, 0, 255)
ANTIALIAS_COLOR = (255, 255, 0, 255)
MATCH_ALPHA = 0.1

# Neighbour offsets (dx, dy), x-major like pixelmatch; tie-breaking depends on it
_NEIGHBOURS = [(dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1) if dx or dy]


@dataclass
class DiffResult:
    mismatched_pixels: int
    diff_image: Image.Image
    antialiased_pixels: int = 0

    @property
    def total_pixels(self) -> int:
        return self.diff_image.width * self.diff_image.height


def _blend_over_white(rgba: np.ndarray) -> np.ndarray:
    alpha = rgba[..., 3:4] / 255.0
    return 255.0 + (rgba[..., :3] - 255.0) * alpha


def _luma(rgb: np.ndarray) -> np.ndarray:
    return rgb[..., 0] * 0.29889531 + rgb[..., 1] * 0.58662247 + rgb[..., 2] * 0.11448223


def _yiq_delta(rgb_a: np.ndarray, rgb_b: np.ndarray) -> np.ndarray:
    def chroma(rgb):
        r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
        i = r * 0.59597799 - g * 0.27417610 - b * 0.32180189
        q = r * 0.21147017 - g * 0.52261711 + b * 0.31114694
        return i, q

    y = _luma(rgb_a) - _luma(rgb_b)
    i_a, q_a = chroma(rgb_a)
    i_b, q_b = chroma(rgb_b)
    i = i_a - i_b
    q = q_a - q_b
    return 0.5053 * y * y + 0.299 * i * i + 0.1957 * q * q


def _on_border(ys: np.ndarray, xs: np.ndarray, height: int, width: int) -> np.ndarray:
    return (xs == 0) | (xs == width - 1) | (ys == 0) | (ys == height - 1)


def _has_many_siblings(raw: np.ndarray) -> np.ndarray:
    """Per pixel: True when more than two neighbours are identical to it.

    A pixel on the image border starts with one sibling counted.
    """
    height, width = raw.shape[:2]
    ys, xs = np.indices((height, width))
    zeroes = _on_border(ys, xs, height, width).astype(np.int64)
    # -1 never equals a channel value, so padding adds no siblings
    padded = np.pad(raw, ((1, 1), (1, 1), (0, 0)), constant_values=-1.0)
    for dx, dy in _NEIGHBOURS:
        neighbour = padded[1 + dy:1 + dy + height, 1 + dx:1 + dx + width]
        zeroes += np.all(neighbour == raw, axis=2)
    return zeroes > 2


def _antialiased(
    luma: np.ndarray,
    many_self: np.ndarray,
    many_other: np.ndarray,
    ys: np.ndarray,
    xs: np.ndarray,
) -> np.ndarray:
    """Anti-aliasing test for the pixels at (``ys``, ``xs``) of one image."""
    height, width = luma.shape
    zeroes = _on_border(ys, xs, height, width).astype(np.int64)
    centre = luma[ys, xs]

    deltas = np.zeros((len(_NEIGHBOURS), len(ys)))
    for k, (dx, dy) in enumerate(_NEIGHBOURS):
        ny, nx = ys + dy, xs + dx
        valid = (ny >= 0) & (ny < height) & (nx >= 0) & (nx < width)
        delta = centre - luma[np.clip(ny, 0, height - 1), np.clip(nx, 0, width - 1)]
        delta = np.where(valid, delta, 0.0)
        zeroes += valid & (delta == 0)
        deltas[k] = delta

    offsets = np.array(_NEIGHBOURS)
    columns = np.arange(len(ys))
    darkest = deltas.argmin(axis=0)
    brightest = deltas.argmax(axis=0)

    def flat_in_both(choice: np.ndarray) -> np.ndarray:
        sy = np.clip(ys + offsets[choice, 1], 0, height - 1)
        sx = np.clip(xs + offsets[choice, 0], 0, width - 1)
        return many_self[sy, sx] & many_other[sy, sx]

    return (
        (zeroes <= 2)
        & (deltas[darkest, columns] < 0)
        & (deltas[brightest, columns] > 0)
        & (flat_in_both(darkest) | flat_in_both(brightest))
    )


def pixel_diff(
    image_a: Image.Image,
    image_b: Image.Image,
    threshold: float = DEFAULT_THRESHOLD,
    include_aa: bool = False,
) -> DiffResult:
    """Count perceptually mismatched pixels and build a diff image.

    Args:
        image_a: Baseline image.
        image_b: Candidate image, same size as ``image_a``.
        threshold: Tolerance in [0, 1]; smaller is stricter.
        include_aa: Count anti-aliased pixels as mismatches instead of
            excusing them (drawn yellow in the diff image).

    Raises:
        DimensionMismatchError: If the images differ in size.
    """
    if image_a.size != image_b.size:
        raise DimensionMismatchError(image_a.size, image_b.size)
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"threshold must be within [0, 1], got {threshold}")

    raw_a = np.asarray(image_a.convert("RGBA"), dtype=np.float64)
    raw_b = np.asarray(image_b.convert("RGBA"), dtype=np.float64)

    identical = np.all(raw_a == raw_b, axis=2)
    blended_a = _blend_over_white(raw_a)
    blended_b = _blend_over_white(raw_b)
    delta = _yiq_delta(blended_a, blended_b)
    over = ~identical & (delta > MAX_YIQ_DELTA * threshold * threshold)

    antialiased = np.zeros_like(over)
    if not include_aa and over.any():
        ys, xs = np.nonzero(over)
        many_a = _has_many_siblings(raw_a)
        many_b = _has_many_siblings(raw_b)
        antialiased[ys, xs] = (
            _antialiased(_luma(blended_a), many_a, many_b, ys, xs)
            | _antialiased(_luma(blended_b), many_b, many_a, ys, xs)
        )
    mismatched = over & ~antialiased

    # Matching pixels: baseline luma faded toward white
    gray = 255.0 + (_luma(blended_a) - 255.0) * MATCH_ALPHA
    out = np.empty(raw_a.shape, dtype=np.uint8)
    out[..., :3] = np.clip(np.rint(gray), 0, 255).astype(np.uint8)[..., None]
    out[..., 3] = 255
    out[antialiased] = ANTIALIAS_COLOR
    out[mismatched] = MISMATCH_COLOR

    return DiffResult(
        mismatched_pixels=int(mismatched.sum()),
        diff_image=Image.fromarray(out),
        antialiased_pixels=int(antialiased.sum()),
    )
