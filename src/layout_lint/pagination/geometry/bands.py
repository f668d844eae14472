"""Edge proximity and horizontal band tests."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from pydantic import BaseModel, ConfigDict

from layout_lint.pagination.extractor.text_items import TextItem


class Edge(Enum):
    """A page edge, listed in the order they are tested."""

    LEFT = "left"
    RIGHT = "right"
    BOTTOM = "bottom"
    TOP = "top"


def touched_edges(
    item: TextItem,
    page_width: float,
    page_height: float,
    margin: float,
    *,
    default_height: float = 12.0,
) -> list[Edge]:
    """Return every page edge the item's box comes within ``margin`` of.

    Each edge is tested independently, so an item in a corner touches two.
    A missing width counts as zero, a missing height as ``default_height``.

    Args:
        item: The text item to test.
        page_width: Page width in points.
        page_height: Page height in points.
        margin: Distance from each edge, in points, that counts as touching.
        default_height: Height assumed when the item has none.
    """
    width = item.width or 0.0
    height = item.height or default_height

    edges: list[Edge] = []
    if item.x < margin:
        edges.append(Edge.LEFT)
    if item.x + width > page_width - margin:
        edges.append(Edge.RIGHT)
    if item.y < margin:
        edges.append(Edge.BOTTOM)
    if item.y + height > page_height - margin:
        edges.append(Edge.TOP)
    return edges


class BandSplit(BaseModel):
    """Text items partitioned into header, content and footer bands."""

    model_config = ConfigDict(frozen=True)

    header: tuple[TextItem, ...] = ()
    content: tuple[TextItem, ...] = ()
    footer: tuple[TextItem, ...] = ()


def split_bands(
    items: Iterable[TextItem],
    page_height: float,
    header_margin: float,
    footer_margin: float,
) -> BandSplit:
    """Partition items by baseline into header, content and footer bands.

    Footer is ``[0, footer_margin)``, header is
    ``(page_height - header_margin, page_height]`` and the content band is
    everything in between, boundaries included.
    """
    content_top = page_height - header_margin
    header: list[TextItem] = []
    content: list[TextItem] = []
    footer: list[TextItem] = []
    for item in items:
        if item.y < footer_margin:
            footer.append(item)
        elif item.y > content_top:
            header.append(item)
        else:
            content.append(item)
    return BandSplit(header=tuple(header), content=tuple(content), footer=tuple(footer))


def in_margin_bands(y: float, page_height: float, ratio: float) -> bool:
    """True when y lies in the top or bottom ``ratio`` of the page height."""
    return y > page_height * (1 - ratio) or y < page_height * ratio
