"""Structured per-page metadata extracted from a document handle."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from annotated_types import Ge
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from layout_lint.pagination.extractor.document import PaginatedDocument

logger = logging.getLogger(__name__)

# Type alias for non-negative floats
NonNegativeFloat = Annotated[float, Ge(0)]


class PageMetadata(BaseModel):
    """Geometry of a single page.

    Attributes:
        number: The page number (1-indexed).
        width: Unscaled viewport width in points.
        height: Unscaled viewport height in points.
        rotation: Page rotation in degrees.
    """

    model_config = ConfigDict(frozen=True)

    number: Annotated[int, Ge(1)]
    width: NonNegativeFloat
    height: NonNegativeFloat
    rotation: int = 0

    @property
    def area(self) -> float:
        return self.width * self.height


class DocumentMetadata(BaseModel):
    """Page count, ordered page geometry and document info."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    page_count: int = 0
    pages: tuple[PageMetadata, ...] = ()
    info: dict[str, Any] = Field(default_factory=dict)


def extract_metadata(document: PaginatedDocument) -> DocumentMetadata:
    """Visit pages 1..N in order and collect their geometry plus document info.

    Reading the document info is best-effort: any failure yields an empty map.
    Failures reading page geometry propagate, since without them no rule can run.

    Args:
        document: An open document handle.

    Returns:
        The document's metadata.
    """
    page_count = document.page_count
    pages: list[PageMetadata] = []
    for number in range(1, page_count + 1):
        viewport = document.page_viewport(number)
        pages.append(
            PageMetadata(
                number=number,
                width=viewport.width,
                height=viewport.height,
                rotation=viewport.rotation,
            )
        )

    try:
        info = document.info() or {}
    except Exception as e:
        logger.debug("Could not read document info: %s", e)
        info = {}

    logger.debug("Extracted metadata for %d page(s)", page_count)
    return DocumentMetadata(page_count=page_count, pages=tuple(pages), info=info)
