"""Positioned text items, the unit every content rule works on."""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict

from layout_lint.pagination.extractor.pymupdf_types import (
    BlockDict,
    SpanDict,
    TextPageDict,
)


class TextItem(BaseModel):
    """A run of text placed on a page.

    Coordinates are in points with the origin at the bottom-left corner of
    the page, so ``y`` grows upwards. ``y`` is the baseline of the text.

    Attributes:
        text: The string content (may be empty or whitespace only).
        x: Left edge of the run.
        y: Baseline of the run.
        width: Advance width, or None when the source did not provide one.
        height: Run height, or None when the source did not provide one.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    x: float
    y: float
    width: float | None = None
    height: float | None = None

    @property
    def is_blank(self) -> bool:
        """True when the text is empty or whitespace only."""
        return not self.text.strip()

    @classmethod
    def from_span_dict(cls, span: SpanDict, page_height: float) -> TextItem:
        """Create a TextItem from a PyMuPDF span, flipping to a bottom-left origin.

        Args:
            span: A span from page.get_text("dict").
            page_height: Height of the coordinate space the span lives in.
        """
        x0, y0, x1, y1 = span["bbox"]
        origin_x, origin_y = span.get("origin", (x0, y1))
        width = x1 - x0
        height = y1 - y0
        return cls(
            text=span.get("text", ""),
            x=origin_x,
            y=page_height - origin_y,
            width=width if width > 0 else None,
            height=height if height > 0 else None,
        )


def _iter_spans(blocks: list[BlockDict]) -> Iterator[SpanDict]:
    for block in blocks:
        # Skip image blocks (type 1), only process text blocks (type 0)
        if block.get("type") != 0:
            continue
        for line in block.get("lines", []):
            yield from line.get("spans", [])


def text_items_from_textpage(textpage: TextPageDict) -> list[TextItem]:
    """Convert a page.get_text("dict") result into TextItems in content order."""
    page_height = textpage["height"]
    return [
        TextItem.from_span_dict(span, page_height)
        for span in _iter_spans(textpage.get("blocks", []))
        if span.get("bbox")
    ]
