"""Comparator — normalize a baseline/candidate pair, diff it, score it."""

from __future__ import annotations

import logging
from pathlib import Path

from sitecompare.models.results import SIZE_MISMATCH, Similarity

from .differ import DEFAULT_THRESHOLD, pixel_diff
from .normalizer import CANONICAL_HEIGHT, CANONICAL_WIDTH, load_rgba, normalize_image

logger = logging.getLogger(__name__)


def compare_screenshots(
    baseline_path: str | Path,
    candidate_path: str | Path,
    diff_path: str | Path,
    width: int = CANONICAL_WIDTH,
    height: int = CANONICAL_HEIGHT,
    threshold: float = DEFAULT_THRESHOLD,
) -> Similarity:
    """Return the similarity percentage of two screenshots, or "Size mismatch".

    Both files are resized in place to the canonical resolution first, so
    concurrent calls on the same paths are not safe. The diff image is
    written to ``diff_path``.

    Raises:
        DecodeError: If either screenshot is missing or unreadable.
    """
    normalize_image(baseline_path, width, height)
    normalize_image(candidate_path, width, height)

    baseline = load_rgba(baseline_path)
    candidate = load_rgba(candidate_path)

    if baseline.size != candidate.size:
        logger.error("Size mismatch for %s and %s", baseline_path, candidate_path)
        return SIZE_MISMATCH

    result = pixel_diff(baseline, candidate, threshold=threshold)

    diff_path = Path(diff_path)
    diff_path.parent.mkdir(parents=True, exist_ok=True)
    result.diff_image.save(diff_path, format="PNG")

    total = result.total_pixels
    matched = total - result.mismatched_pixels
    similarity = matched / total * 100
    logger.debug("%s vs %s: %d/%d pixels differ, %d anti-aliased (%.2f%% similar)",
                 baseline_path, candidate_path, result.mismatched_pixels, total,
                 result.antialiased_pixels, similarity)
    return similarity
