"""Geometric primitives shared by the layout rules."""

from .bands import BandSplit, Edge, in_margin_bands, split_bands, touched_edges
from .lines import (
    LINE_BUCKET_SIZE,
    count_distinct_lines,
    group_lines,
    line_gaps,
    line_key,
    line_text,
    paragraph_breaks,
    top_down,
)

__all__ = [
    "LINE_BUCKET_SIZE",
    "BandSplit",
    "Edge",
    "count_distinct_lines",
    "group_lines",
    "in_margin_bands",
    "line_gaps",
    "line_key",
    "line_text",
    "paragraph_breaks",
    "split_bands",
    "top_down",
    "touched_edges",
]
