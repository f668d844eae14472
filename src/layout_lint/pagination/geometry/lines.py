"""Line clustering by vertical position.

All positions are in points with a bottom-left origin, so larger y values are
higher on the page.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from layout_lint.pagination.extractor.text_items import TextItem

# Approximate height of one rendered line of body text.
LINE_BUCKET_SIZE = 12.0


def count_distinct_lines(positions: Iterable[float], tolerance: float) -> int:
    """Count text lines by greedily clustering vertical positions.

    Positions are sorted ascending, then each one joins the first cluster
    whose representative lies within ``tolerance`` (and becomes that
    cluster's new representative), otherwise it starts a new cluster.

    This is a single pass, not an equivalence relation: a chain of values
    each within ``tolerance`` of the previous one collapses into one line
    even when its ends are further apart than ``tolerance``.

    Args:
        positions: Vertical positions in any order.
        tolerance: Maximum distance to a representative, in points.

    Returns:
        The number of clusters.
    """
    representatives: list[float] = []
    for value in sorted(positions):
        for index, representative in enumerate(representatives):
            if abs(value - representative) <= tolerance:
                representatives[index] = value
                break
        else:
            representatives.append(value)
    return len(representatives)


def line_key(y: float, bucket_size: float = LINE_BUCKET_SIZE) -> float:
    """Snap a vertical position to its line bucket.

    Halves round upwards (towards +inf) so keys are stable for negative and
    positive positions alike.
    """
    return math.floor(y / bucket_size + 0.5) * bucket_size


def group_lines(
    items: Iterable[TextItem], bucket_size: float = LINE_BUCKET_SIZE
) -> dict[float, list[TextItem]]:
    """Group text items into approximate rendered lines.

    Args:
        items: Text items to group.
        bucket_size: Vertical resolution of a line, in points.

    Returns:
        Mapping of line key to the items on that line, in input order.
    """
    lines: dict[float, list[TextItem]] = {}
    for item in items:
        lines.setdefault(line_key(item.y, bucket_size), []).append(item)
    return lines


def line_text(items: Sequence[TextItem]) -> str:
    """Concatenate the text of the items making up one line."""
    return "".join(item.text for item in items)


def top_down(lines: dict[float, list[TextItem]]) -> list[float]:
    """Return line keys ordered from the top of the page to the bottom."""
    return sorted(lines, reverse=True)


def line_gaps(positions: Sequence[float]) -> list[float]:
    """Vertical distance between each pair of adjacent top-down positions."""
    return [upper - lower for upper, lower in zip(positions, positions[1:])]


def paragraph_breaks(
    gaps: Sequence[float], gap_threshold: float, factor: float = 1.5
) -> list[int]:
    """Find gaps that separate paragraphs.

    The mean gap is taken as normal line spacing; a gap is a break when it is
    more than ``factor`` times the mean, or larger than ``gap_threshold``.

    Args:
        gaps: Adjacent line gaps, top-down.
        gap_threshold: Absolute gap (points) that always counts as a break.
        factor: Multiple of the mean gap that counts as a break.

    Returns:
        Indices into ``gaps`` of every break, ascending. Index ``i`` is the
        gap between line ``i`` and line ``i + 1``.
    """
    if not gaps:
        return []
    mean_gap = sum(gaps) / len(gaps)
    return [
        index
        for index, gap in enumerate(gaps)
        if gap > mean_gap * factor or gap > gap_threshold
    ]
