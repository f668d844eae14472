"""Access to a parsed paginated document.

The validation engine never talks to PyMuPDF directly. It works against the
small ``PaginatedDocument`` protocol below, which supplies page count, page
viewports, per-page text items and best-effort document info.
``PyMuPDFDocument`` is the production implementation.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, Protocol

import pymupdf
from pydantic import BaseModel, ConfigDict

from layout_lint.pagination.extractor.pymupdf_types import (
    DocumentMetadataDict,
    TextPageDict,
)
from layout_lint.pagination.extractor.text_items import (
    TextItem,
    text_items_from_textpage,
)

logger = logging.getLogger(__name__)


class DocumentLoadError(Exception):
    """Raised when document bytes cannot be opened or parsed."""


class PageViewport(BaseModel):
    """Unscaled page geometry as displayed (rotation already applied)."""

    model_config = ConfigDict(frozen=True)

    width: float
    height: float
    rotation: int = 0


class PaginatedDocument(Protocol):
    """What the validator needs from a parsed document.

    Page numbers are 1-indexed throughout.
    """

    @property
    def page_count(self) -> int: ...

    def page_viewport(self, number: int) -> PageViewport: ...

    def page_text_items(self, number: int) -> list[TextItem] | None:
        """Return the page's text items, or None if no text content was returned."""
        ...

    def info(self) -> dict[str, Any]: ...


class PyMuPDFDocument:
    """PaginatedDocument backed by a pymupdf.Document.

    Not safe for concurrent use: PyMuPDF documents must not be shared between
    threads, so every validation run opens its own handle.

    Example usage:
        with open_document(pdf_bytes) as document:
            print(document.page_count)
    """

    def __init__(self, doc: pymupdf.Document) -> None:
        self._doc = doc

    def __enter__(self) -> PyMuPDFDocument:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._doc.close()

    @property
    def page_count(self) -> int:
        return len(self._doc)

    def _page(self, number: int) -> pymupdf.Page:
        if number < 1 or number > len(self._doc):
            raise IndexError(f"Page {number} out of range 1-{len(self._doc)}")
        return self._doc[number - 1]

    def page_viewport(self, number: int) -> PageViewport:
        page = self._page(number)
        rect = page.rect
        return PageViewport(width=rect.width, height=rect.height, rotation=page.rotation)

    def page_text_items(self, number: int) -> list[TextItem] | None:
        page = self._page(number)
        # flags=0 keeps extraction fast; we only need span text and geometry.
        textpage: TextPageDict | None = page.get_text("dict", flags=0)  # type: ignore[assignment]
        if not textpage or "blocks" not in textpage:
            return None
        items = text_items_from_textpage(textpage)
        logger.debug("Page %d: %d text items", number, len(items))
        return items

    def info(self) -> dict[str, Any]:
        metadata: DocumentMetadataDict = self._doc.metadata or {}  # type: ignore[assignment]
        return {key: value for key, value in metadata.items() if value}


def open_document(data: bytes) -> PyMuPDFDocument:
    """Open PDF bytes with PyMuPDF.

    Args:
        data: Raw bytes of a complete PDF document.

    Returns:
        An open PyMuPDFDocument. Use it as a context manager to close it.

    Raises:
        DocumentLoadError: If the bytes are empty, not a PDF, damaged beyond
            repair, or encrypted with a non-empty password.
    """
    if not data:
        raise DocumentLoadError("document is empty")

    try:
        doc = pymupdf.open(stream=data, filetype="pdf")
    except Exception as e:
        raise DocumentLoadError(str(e) or e.__class__.__name__) from e

    # An empty user password is how most "protected" PDFs are shipped.
    if doc.needs_pass and not doc.authenticate(""):
        doc.close()
        raise DocumentLoadError("document is encrypted")

    if len(doc) == 0:
        doc.close()
        raise DocumentLoadError("document has no pages")

    return PyMuPDFDocument(doc)
