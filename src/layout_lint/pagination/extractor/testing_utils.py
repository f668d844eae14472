from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pymupdf

from layout_lint.pagination.extractor.document import PageViewport
from layout_lint.pagination.extractor.text_items import TextItem


@dataclass
class _FakePage:
    width: float
    height: float
    rotation: int = 0
    items: list[TextItem] | None = field(default_factory=list)
    text_error: Exception | None = None


class FakeDocument:
    """In-memory PaginatedDocument for tests."""

    def __init__(self, pages: list[_FakePage], info: dict[str, Any]) -> None:
        self._pages = pages
        self._info = info
        self.text_requests: list[int] = []

    @property
    def page_count(self) -> int:
        return len(self._pages)

    def page_viewport(self, number: int) -> PageViewport:
        page = self._pages[number - 1]
        return PageViewport(width=page.width, height=page.height, rotation=page.rotation)

    def page_text_items(self, number: int) -> list[TextItem] | None:
        self.text_requests.append(number)
        page = self._pages[number - 1]
        if page.text_error is not None:
            raise page.text_error
        return None if page.items is None else list(page.items)

    def info(self) -> dict[str, Any]:
        return dict(self._info)


class DocumentBuilder:
    """Builder for creating in-memory documents for testing.

    Text is added to the most recently added page.

    Example:
        document = (
            DocumentBuilder()
            .add_page(595, 842)
            .add_text("Hello", x=72, y=700)
            .build()
        )
    """

    def __init__(self) -> None:
        self._pages: list[_FakePage] = []
        self._info: dict[str, Any] = {}

    def add_page(
        self, width: float = 595, height: float = 842, rotation: int = 0
    ) -> DocumentBuilder:
        """Add an empty page."""
        self._pages.append(_FakePage(width=width, height=height, rotation=rotation))
        return self

    def add_pages(
        self, count: int, width: float = 595, height: float = 842
    ) -> DocumentBuilder:
        """Add several empty pages of the same size."""
        for _ in range(count):
            self.add_page(width, height)
        return self

    def add_text(
        self,
        text: str,
        x: float = 72,
        y: float = 400,
        width: float | None = None,
        height: float | None = None,
    ) -> DocumentBuilder:
        """Add a text item to the last page."""
        page = self._last_page()
        if page.items is None:
            page.items = []
        page.items.append(
            TextItem(text=text, x=x, y=y, width=width, height=height)
        )
        return self

    def add_paragraph(
        self,
        lines: list[str],
        top: float,
        x: float = 72,
        leading: float = 14,
    ) -> DocumentBuilder:
        """Add consecutive lines going down the page from ``top``."""
        for index, line in enumerate(lines):
            self.add_text(line, x=x, y=top - index * leading, width=len(line) * 5.0)
        return self

    def without_text_content(self) -> DocumentBuilder:
        """Make the last page return no text content at all."""
        self._last_page().items = None
        return self

    def fail_text_extraction(self, error: Exception) -> DocumentBuilder:
        """Make text retrieval on the last page raise ``error``."""
        self._last_page().text_error = error
        return self

    def with_info(self, **info: Any) -> DocumentBuilder:
        self._info.update(info)
        return self

    def build(self) -> FakeDocument:
        return FakeDocument(list(self._pages), dict(self._info))

    def _last_page(self) -> _FakePage:
        if not self._pages:
            raise ValueError("add_page() must be called before adding text")
        return self._pages[-1]


def make_pdf_bytes(
    pages: list[tuple[float, float, list[tuple[float, float, str]]]],
    *,
    title: str | None = None,
) -> bytes:
    """Write a real PDF with PyMuPDF.

    Args:
        pages: One (width, height, texts) tuple per page, where each text is
            (x, y, string) with y measured from the bottom of the page.
        title: Optional document title stored in the PDF metadata.

    Returns:
        The PDF file contents.
    """
    doc = pymupdf.open()
    try:
        for width, height, texts in pages:
            page = doc.new_page(width=width, height=height)
            for x, y, text in texts:
                # insert_text takes the baseline point in top-left coordinates
                page.insert_text((x, height - y), text, fontsize=11)
        if title is not None:
            doc.set_metadata({"title": title})
        return doc.tobytes()
    finally:
        doc.close()
