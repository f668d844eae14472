"""Individual validation rules for document layout.

Every rule has the same signature: it receives its (snapshotted) Rule, the
open document and the extracted metadata, and returns its results in order.
Rules that find nothing return exactly one aggregate pass result.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable
from typing import Any, Final

from layout_lint.pagination.extractor.document import PaginatedDocument
from layout_lint.pagination.extractor.metadata import DocumentMetadata
from layout_lint.pagination.extractor.text_items import TextItem
from layout_lint.pagination.geometry import (
    count_distinct_lines,
    group_lines,
    in_margin_bands,
    line_gaps,
    line_text,
    paragraph_breaks,
    split_bands,
    top_down,
    touched_edges,
)
from layout_lint.pagination.utils import truncate_text

from .page_sizes import resolve_page_size
from .types import ResultStatus, Rule, RuleId, Severity, ValidationResult

logger = logging.getLogger(__name__)

RuleFunction = Callable[[Rule, PaginatedDocument, DocumentMetadata], list[ValidationResult]]

# Width of one character when a text item has no width of its own.
DEFAULT_CHAR_WIDTH: Final = 6.0
# Height of a text item that has no height of its own (~12pt font).
DEFAULT_ITEM_HEIGHT: Final = 12.0
# Two baselines closer than this belong to the same line when counting lines.
LINE_TOLERANCE: Final = 2.0

# Page numbers are looked for in the top and bottom tenth of the page.
PAGE_NUMBER_BAND_RATIO: Final = 0.1
# Numbers above page_count * factor are not treated as page numbers.
# Override per run with the "maxNumberFactor" config key.
PAGE_NUMBER_MAX_FACTOR: Final = 2

# A gap this many times the mean line gap starts a new paragraph.
PARAGRAPH_BREAK_FACTOR: Final = 1.5
# Lines at least this long are treated as full lines, never orphans/widows.
SHORT_LINE_LENGTH: Final = 80
MIN_CONTENT_LINES: Final = 3

_PAGE_NUMBER_RE = re.compile(r"[0-9]+")
_HEADING_RE = re.compile(r"^[=#\d]+[.)]")
_SENTENCE_END_RE = re.compile(r"[.!?]$")
_BLANK_MARKERS = ("blank", "intentionally left")


def _result(
    rule: Rule,
    status: ResultStatus,
    message: str,
    *,
    page: int | None = None,
    details: dict[str, Any] | None = None,
    severity: Severity | None = None,
) -> ValidationResult:
    return ValidationResult(
        rule_id=rule.id.value,
        rule_name=rule.name,
        status=status,
        severity=severity or rule.severity,
        message=message,
        page=page,
        details=details or {},
    )


def _status_for_severity(severity: Severity) -> ResultStatus:
    """Status used by heuristic rules, which report at their own severity."""
    if severity == Severity.ERROR:
        return ResultStatus.FAIL
    if severity == Severity.WARNING:
        return ResultStatus.WARNING
    return ResultStatus.INFO


def _size(width: float, height: float) -> dict[str, float]:
    return {"width": width, "height": height}


def _dims(width: float, height: float) -> str:
    """Format page dimensions rounded to whole points, halves rounding up."""
    return f"{math.floor(width + 0.5)}×{math.floor(height + 0.5)}"


def _page_text(document: PaginatedDocument, number: int) -> list[TextItem]:
    items = document.page_text_items(number)
    if items is None:
        raise ValueError(f"No text content returned for page {number}")
    return items


# =============================================================================
# Document-level rules
# =============================================================================


def validate_page_count_min(
    rule: Rule, document: PaginatedDocument, metadata: DocumentMetadata
) -> list[ValidationResult]:
    """The document must have at least ``minPages`` pages."""
    min_pages = rule.config["minPages"]
    page_count = metadata.page_count
    details = {"actual": page_count, "required": min_pages}

    if page_count < min_pages:
        return [
            _result(
                rule,
                ResultStatus.FAIL,
                f"Document has {page_count} page(s), but requires at least {min_pages}",
                details=details,
            )
        ]
    return [
        _result(
            rule,
            ResultStatus.PASS,
            f"Page count ({page_count}) meets minimum requirement ({min_pages})",
            details=details,
        )
    ]


def validate_page_count_max(
    rule: Rule, document: PaginatedDocument, metadata: DocumentMetadata
) -> list[ValidationResult]:
    """The document must have at most ``maxPages`` pages."""
    max_pages = rule.config["maxPages"]
    page_count = metadata.page_count
    details = {"actual": page_count, "limit": max_pages}

    if page_count > max_pages:
        return [
            _result(
                rule,
                ResultStatus.FAIL,
                f"Document has {page_count} page(s), but maximum allowed is {max_pages}",
                details=details,
            )
        ]
    return [
        _result(
            rule,
            ResultStatus.PASS,
            f"Page count ({page_count}) within limit ({max_pages})",
            details=details,
        )
    ]


def validate_page_size(
    rule: Rule, document: PaginatedDocument, metadata: DocumentMetadata
) -> list[ValidationResult]:
    """Every page must match the expected size, in either orientation."""
    config = rule.config
    size_name = config["expectedSize"]
    tolerance = config["tolerance"]
    expected = resolve_page_size(
        size_name, config.get("customWidth"), config.get("customHeight")
    )

    if expected is None:
        return [
            _result(
                rule,
                ResultStatus.WARNING,
                f"Unknown page size: {size_name}",
                details={"requestedSize": size_name},
                severity=Severity.INFO,
            )
        ]

    expected_size = _size(expected.width, expected.height)
    results: list[ValidationResult] = []
    for page in metadata.pages:
        if expected.matches(page.width, page.height, tolerance):
            continue
        results.append(
            _result(
                rule,
                ResultStatus.FAIL,
                f"Page {page.number} size ({_dims(page.width, page.height)}) does not "
                f"match {size_name} ({expected.width:g}×{expected.height:g})",
                page=page.number,
                details={
                    "actual": _size(page.width, page.height),
                    "expected": expected_size,
                    "sizeName": size_name,
                },
            )
        )

    if not results:
        results.append(
            _result(
                rule,
                ResultStatus.PASS,
                f"All {metadata.page_count} page(s) match expected size ({size_name})",
                details={"expected": expected_size, "sizeName": size_name},
            )
        )
    return results


def validate_page_size_consistency(
    rule: Rule, document: PaginatedDocument, metadata: DocumentMetadata
) -> list[ValidationResult]:
    """Every page must match page 1's dimensions within tolerance."""
    tolerance = rule.config["tolerance"]

    if len(metadata.pages) <= 1:
        return [
            _result(
                rule,
                ResultStatus.PASS,
                "Single page document - consistency check not applicable",
            )
        ]

    first = metadata.pages[0]
    reference = _size(first.width, first.height)
    results: list[ValidationResult] = []
    for page in metadata.pages[1:]:
        if (
            abs(page.width - first.width) <= tolerance
            and abs(page.height - first.height) <= tolerance
        ):
            continue
        results.append(
            _result(
                rule,
                ResultStatus.WARNING,
                f"Page {page.number} has different dimensions "
                f"({_dims(page.width, page.height)}) than page 1 "
                f"({_dims(first.width, first.height)})",
                page=page.number,
                details={
                    "pageSize": _size(page.width, page.height),
                    "referenceSize": reference,
                },
            )
        )

    if not results:
        results.append(
            _result(
                rule,
                ResultStatus.PASS,
                f"All {metadata.page_count} pages have consistent dimensions",
                details={"dimensions": reference},
            )
        )
    return results


# =============================================================================
# Content rules (need per-page text)
# =============================================================================


def _covered_area(items: list[TextItem]) -> float:
    """Rough area covered by non-blank text, estimating missing sizes."""
    area = 0.0
    for item in items:
        if item.is_blank:
            continue
        width = item.width or len(item.text) * DEFAULT_CHAR_WIDTH
        height = item.height or DEFAULT_ITEM_HEIGHT
        area += width * height
    return area


def validate_near_empty_pages(
    rule: Rule, document: PaginatedDocument, metadata: DocumentMetadata
) -> list[ValidationResult]:
    """Flag pages whose text covers less than ``minContentRatio`` of the page.

    Pages with no text items at all are left to the blank-page rule.
    """
    config = rule.config
    min_ratio = config["minContentRatio"]
    exclude_first = config.get("excludeFirstPage", False)
    exclude_last = config.get("excludeLastPage", False)

    results: list[ValidationResult] = []
    for page in metadata.pages:
        if exclude_first and page.number == 1:
            continue
        if exclude_last and page.number == metadata.page_count:
            continue
        if page.area <= 0:
            logger.debug("Page %d has no area, skipping", page.number)
            continue

        items = _page_text(document, page.number)
        ratio = _covered_area(items) / page.area
        if ratio < min_ratio and items:
            results.append(
                _result(
                    rule,
                    ResultStatus.WARNING,
                    f"Page {page.number} appears to have very little content "
                    f"({ratio * 100:.1f}% filled)",
                    page=page.number,
                    details={
                        "contentRatio": ratio,
                        "textItems": len(items),
                        "lineCount": count_distinct_lines(
                            (i.y for i in items if not i.is_blank), LINE_TOLERANCE
                        ),
                        "threshold": min_ratio,
                    },
                )
            )

    if not results:
        results.append(
            _result(
                rule,
                ResultStatus.PASS,
                "No near-empty pages detected",
                details={"threshold": min_ratio},
            )
        )
    return results


def _is_intentional_blank(items: list[TextItem]) -> bool:
    full_text = " ".join(item.text for item in items).lower()
    return any(marker in full_text for marker in _BLANK_MARKERS)


def validate_blank_pages(
    rule: Rule, document: PaginatedDocument, metadata: DocumentMetadata
) -> list[ValidationResult]:
    """Flag pages without any non-whitespace text."""
    allow_intentional = rule.config.get("allowIntentionalBlanks", False)

    results: list[ValidationResult] = []
    for page in metadata.pages:
        items = _page_text(document, page.number)
        if any(not item.is_blank for item in items):
            continue
        if allow_intentional and _is_intentional_blank(items):
            continue
        results.append(
            _result(
                rule,
                ResultStatus.WARNING,
                f"Page {page.number} appears to be blank",
                page=page.number,
            )
        )

    if not results:
        results.append(
            _result(rule, ResultStatus.PASS, "No unexpected blank pages detected")
        )
    return results


def _page_number_candidates(
    items: list[TextItem], page_height: float, max_value: int
) -> list[int]:
    numbers: list[int] = []
    for item in items:
        text = item.text.strip()
        if not _PAGE_NUMBER_RE.fullmatch(text):
            continue
        if not in_margin_bands(item.y, page_height, PAGE_NUMBER_BAND_RATIO):
            continue
        value = int(text)
        if 0 < value <= max_value:
            numbers.append(value)
    return numbers


def validate_page_number_sequence(
    rule: Rule, document: PaginatedDocument, metadata: DocumentMetadata
) -> list[ValidationResult]:
    """Check printed page numbers found in header/footer bands for gaps."""
    config = rule.config
    start_number = config.get("startNumber", 1)
    check_gaps = config.get("checkForGaps", True)
    max_value = metadata.page_count * config.get(
        "maxNumberFactor", PAGE_NUMBER_MAX_FACTOR
    )

    numbers: list[int] = []
    for page in metadata.pages:
        numbers.extend(
            _page_number_candidates(
                _page_text(document, page.number), page.height, max_value
            )
        )

    if not numbers:
        return [
            _result(
                rule,
                ResultStatus.INFO,
                "No page numbers detected in header/footer areas",
                severity=Severity.INFO,
            )
        ]

    numbers.sort()
    results: list[ValidationResult] = []
    if check_gaps:
        for before, after in zip(numbers, numbers[1:]):
            if after - before > 1:
                results.append(
                    _result(
                        rule,
                        ResultStatus.WARNING,
                        f"Gap in page numbering: {before} → {after}",
                        details={"before": before, "after": after},
                    )
                )

    if numbers[0] != start_number:
        results.append(
            _result(
                rule,
                ResultStatus.INFO,
                f"Page numbering starts at {numbers[0]} instead of {start_number}",
                details={"actual": numbers[0], "expected": start_number},
                severity=Severity.INFO,
            )
        )

    if not results:
        results.append(
            _result(rule, ResultStatus.PASS, "Page numbering sequence is correct")
        )
    return results


# Number of overflowing items included in a result's details.
MAX_OVERFLOW_SAMPLES: Final = 5


def validate_content_overflow(
    rule: Rule, document: PaginatedDocument, metadata: DocumentMetadata
) -> list[ValidationResult]:
    """Flag pages with text within ``marginThreshold`` points of an edge."""
    margin = rule.config["marginThreshold"]

    results: list[ValidationResult] = []
    for page in metadata.pages:
        hits: list[dict[str, Any]] = []
        for item in _page_text(document, page.number):
            if item.is_blank:
                continue
            for edge in touched_edges(
                item,
                page.width,
                page.height,
                margin,
                default_height=DEFAULT_ITEM_HEIGHT,
            ):
                hits.append(
                    {"edge": edge.value, "x": item.x, "y": item.y, "text": item.text[:20]}
                )

        if not hits:
            continue

        directions = list(dict.fromkeys(hit["edge"] for hit in hits))
        results.append(
            _result(
                rule,
                ResultStatus.WARNING,
                f"Page {page.number}: Content near {', '.join(directions)} edge(s) "
                f"(within {margin}pt of boundary)",
                page=page.number,
                details={
                    "directions": directions,
                    "itemCount": len(hits),
                    "threshold": margin,
                    "samples": hits[:MAX_OVERFLOW_SAMPLES],
                },
            )
        )

    if not results:
        results.append(
            _result(
                rule,
                ResultStatus.PASS,
                f"All content within {margin}pt margin threshold",
                details={"threshold": margin},
            )
        )
    return results


def _fragment_label(line_count: int) -> str:
    return "single line" if line_count == 1 else f"{line_count}-line fragment"


def _line_details(
    kind: str, text: str, gap: float, mean_gap: float, y: float
) -> dict[str, Any]:
    return {
        "type": kind,
        "gap": gap,
        "avgGap": mean_gap,
        "lineText": text[:50],
        "yPosition": y,
    }


def validate_orphan_widow(
    rule: Rule, document: PaginatedDocument, metadata: DocumentMetadata
) -> list[ValidationResult]:
    """Flag short paragraph fragments isolated at the top or bottom of the content band.

    The top fragment is the run of lines before the first paragraph break, the
    bottom fragment the run after the last one. A fragment shorter than
    ``minLinesTop`` / ``minLinesBottom`` lines is a candidate; the text
    heuristics then decide. Header and footer bands are ignored, and pages
    with fewer than three content lines are skipped.
    """
    config = rule.config
    min_lines_top = config.get("minLinesTop", 2)
    min_lines_bottom = config.get("minLinesBottom", 2)
    header_margin = config.get("headerMargin", 72)
    footer_margin = config.get("footerMargin", 72)
    gap_threshold = config.get("lineGapThreshold", 24)
    status = _status_for_severity(rule.severity)

    results: list[ValidationResult] = []
    for page in metadata.pages:
        items = [i for i in _page_text(document, page.number) if not i.is_blank]
        content = split_bands(items, page.height, header_margin, footer_margin).content
        lines = group_lines(content)
        positions = top_down(lines)
        if len(positions) < MIN_CONTENT_LINES:
            continue

        gaps = line_gaps(positions)
        mean_gap = sum(gaps) / len(gaps)
        breaks = paragraph_breaks(gaps, gap_threshold, PARAGRAPH_BREAK_FACTOR)
        if not breaks:
            continue

        # Orphan: can't happen on the first page.
        top_fragment = breaks[0] + 1
        if page.number > 1 and top_fragment < min_lines_top:
            text = line_text(lines[positions[0]])
            label = _fragment_label(top_fragment)
            if len(text) < SHORT_LINE_LENGTH and not _HEADING_RE.match(text):
                results.append(
                    _result(
                        rule,
                        status,
                        f"Page {page.number}: Potential orphan - {label} "
                        f'"{truncate_text(text, 30)}" at content area top',
                        page=page.number,
                        details=_line_details(
                            "orphan", text, gaps[breaks[0]], mean_gap, positions[0]
                        ),
                    )
                )

        # Widow: the last page has no next page to continue onto.
        bottom_fragment = len(positions) - (breaks[-1] + 1)
        if page.number < metadata.page_count and bottom_fragment < min_lines_bottom:
            text = line_text(lines[positions[-1]])
            label = _fragment_label(bottom_fragment)
            if len(text) < SHORT_LINE_LENGTH and not _SENTENCE_END_RE.search(text):
                results.append(
                    _result(
                        rule,
                        status,
                        f"Page {page.number}: Potential widow - {label} "
                        f'"{truncate_text(text, 30)}" at content area bottom',
                        page=page.number,
                        details=_line_details(
                            "widow", text, gaps[breaks[-1]], mean_gap, positions[-1]
                        ),
                    )
                )

    if not results:
        results.append(
            _result(
                rule,
                ResultStatus.PASS,
                "No orphan/widow issues detected in content areas",
                details={
                    "headerMargin": header_margin,
                    "footerMargin": footer_margin,
                    "note": "Header and footer areas were excluded from analysis",
                },
            )
        )
    return results


def validate_text_extraction(
    rule: Rule, document: PaginatedDocument, metadata: DocumentMetadata
) -> list[ValidationResult]:
    """Text retrieval must succeed on every page."""
    problems: list[tuple[int, str]] = []
    for page in metadata.pages:
        try:
            items = document.page_text_items(page.number)
        except Exception as e:
            logger.debug("Page %d: text extraction raised %r", page.number, e)
            problems.append((page.number, str(e) or e.__class__.__name__))
            continue
        if items is None:
            problems.append((page.number, "No text content returned"))

    if not problems:
        return [
            _result(
                rule,
                ResultStatus.PASS,
                f"Text can be extracted from all {metadata.page_count} page(s)",
            )
        ]
    return [
        _result(
            rule,
            ResultStatus.WARNING,
            f"Page {number}: Text extraction issue - {error}",
            page=number,
            details={"error": error},
        )
        for number, error in problems
    ]


RULE_IMPLEMENTATIONS: Final[dict[RuleId, RuleFunction]] = {
    RuleId.PAGE_COUNT_MIN: validate_page_count_min,
    RuleId.PAGE_COUNT_MAX: validate_page_count_max,
    RuleId.PAGE_SIZE: validate_page_size,
    RuleId.PAGE_SIZE_CONSISTENCY: validate_page_size_consistency,
    RuleId.NEAR_EMPTY_PAGE: validate_near_empty_pages,
    RuleId.BLANK_PAGE: validate_blank_pages,
    RuleId.PAGE_NUMBER_SEQUENCE: validate_page_number_sequence,
    RuleId.CONTENT_OVERFLOW: validate_content_overflow,
    RuleId.ORPHAN_WIDOW: validate_orphan_widow,
    RuleId.TEXT_EXTRACTION: validate_text_extraction,
}

_unhandled = set(RuleId) - RULE_IMPLEMENTATIONS.keys()
if _unhandled:
    raise AssertionError(
        f"Rules without implementation: {sorted(r.value for r in _unhandled)}"
    )
