"""Type definitions for PyMuPDF (pymupdf) data structures.

See https://pymupdf.readthedocs.io/en/latest/textpage.html#page-dictionary
"""

from typing import NotRequired, TypedDict

# Type alias for single coordinates (x, y)
PointLikeTuple = tuple[float, float]

# Type alias for bounding box coordinates (x0, y0, x1, y1)
RectLikeTuple = tuple[float, float, float, float]


class SpanDict(TypedDict):
    """Type definition for a text span in PyMuPDF dict output.

    See https://pymupdf.readthedocs.io/en/latest/textpage.html#dictionary-structure-of-extractdict-and-extractrawdict
    """

    bbox: RectLikeTuple
    text: str
    font: NotRequired[str]  # font name
    size: NotRequired[float]  # font size in points
    flags: NotRequired[int]  # font flags (bitmap: superscript, italic, serif, etc.)
    color: NotRequired[int]  # text color as RGB integer
    ascender: NotRequired[float]  # font ascender
    descender: NotRequired[float]  # font descender
    origin: NotRequired[PointLikeTuple]  # baseline origin (x, y), top-left based


class LineDict(TypedDict):
    """Type definition for a text line in PyMuPDF dict output."""

    spans: list[SpanDict]
    bbox: NotRequired[RectLikeTuple]  # line bounding box
    wmode: NotRequired[int]  # writing mode (0=horizontal, 1=vertical)
    dir: NotRequired[PointLikeTuple]  # writing direction vector


class BlockDict(TypedDict):
    """Type definition for a block in PyMuPDF dict output.

    Text blocks have type 0, image blocks type 1.
    """

    number: int
    type: int
    bbox: RectLikeTuple
    lines: NotRequired[list[LineDict]]


class TextPageDict(TypedDict):
    """Type definition for PyMuPDF page.get_text('dict') return value."""

    width: float
    height: float
    blocks: list[BlockDict]


class DocumentMetadataDict(TypedDict, total=False):
    """Type definition for PyMuPDF Document.metadata.

    See https://pymupdf.readthedocs.io/en/latest/document.html#Document.metadata
    """

    format: str
    title: str
    author: str
    subject: str
    keywords: str
    creator: str
    producer: str
    creationDate: str
    modDate: str
    trapped: str
    encryption: str | None
