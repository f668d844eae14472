from .document import (
    DocumentLoadError,
    PageViewport,
    PaginatedDocument,
    PyMuPDFDocument,
    open_document,
)
from .metadata import DocumentMetadata, PageMetadata, extract_metadata
from .text_items import TextItem

__all__ = [
    "DocumentLoadError",
    "DocumentMetadata",
    "PageMetadata",
    "PageViewport",
    "PaginatedDocument",
    "PyMuPDFDocument",
    "TextItem",
    "extract_metadata",
    "open_document",
]
