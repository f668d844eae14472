"""Tests for the individual layout rules."""

from typing import Any

import pytest

from layout_lint.pagination.extractor.metadata import extract_metadata
from layout_lint.pagination.extractor.testing_utils import DocumentBuilder, FakeDocument

from .registry import get_default_rules
from .rules import RULE_IMPLEMENTATIONS
from .types import ResultStatus, Rule, RuleId, Severity, ValidationResult


def make_rule(rule_id: RuleId, severity: Severity | None = None, **config: Any) -> Rule:
    """A default rule with config overrides applied."""
    rule = next(r for r in get_default_rules() if r.id == rule_id)
    rule.config.update(config)
    if severity is not None:
        rule.severity = severity
    return rule


def run_rule(
    rule_id: RuleId,
    document: FakeDocument,
    severity: Severity | None = None,
    **config: Any,
) -> list[ValidationResult]:
    rule = make_rule(rule_id, severity, **config)
    return RULE_IMPLEMENTATIONS[rule_id](rule, document, extract_metadata(document))


def statuses(results: list[ValidationResult]) -> list[ResultStatus]:
    return [r.status for r in results]


def test_every_rule_id_has_an_implementation() -> None:
    assert set(RULE_IMPLEMENTATIONS) == set(RuleId)


class TestPageCount:
    def test_min_at_boundary_passes(self) -> None:
        document = DocumentBuilder().add_pages(2).build()
        results = run_rule(RuleId.PAGE_COUNT_MIN, document, minPages=2)

        assert statuses(results) == [ResultStatus.PASS]
        assert results[0].message == "Page count (2) meets minimum requirement (2)"

    def test_min_below_fails(self) -> None:
        document = DocumentBuilder().add_pages(1).build()
        results = run_rule(RuleId.PAGE_COUNT_MIN, document, minPages=2)

        assert statuses(results) == [ResultStatus.FAIL]
        assert results[0].severity == Severity.ERROR
        assert results[0].message == (
            "Document has 1 page(s), but requires at least 2"
        )
        assert results[0].details == {"actual": 1, "required": 2}
        assert results[0].page is None

    def test_max_at_boundary_passes(self) -> None:
        document = DocumentBuilder().add_pages(3).build()
        results = run_rule(RuleId.PAGE_COUNT_MAX, document, maxPages=3)
        assert statuses(results) == [ResultStatus.PASS]
        assert results[0].message == "Page count (3) within limit (3)"

    def test_max_above_fails(self) -> None:
        document = DocumentBuilder().add_pages(150).build()
        results = run_rule(RuleId.PAGE_COUNT_MAX, document)

        assert statuses(results) == [ResultStatus.FAIL]
        assert results[0].is_error
        assert results[0].details == {"actual": 150, "limit": 100}
        assert results[0].message == (
            "Document has 150 page(s), but maximum allowed is 100"
        )


class TestPageSize:
    def test_portrait_and_landscape_pass(self) -> None:
        document = DocumentBuilder().add_page(595, 842).add_page(842, 595).build()
        results = run_rule(RuleId.PAGE_SIZE, document)

        assert statuses(results) == [ResultStatus.PASS]
        assert results[0].message == "All 2 page(s) match expected size (A4)"
        assert results[0].details == {
            "expected": {"width": 595, "height": 842},
            "sizeName": "A4",
        }

    def test_outside_tolerance_fails(self) -> None:
        document = DocumentBuilder().add_page(595, 842).add_page(595, 850).build()
        results = run_rule(RuleId.PAGE_SIZE, document)

        assert statuses(results) == [ResultStatus.FAIL]
        assert results[0].page == 2
        assert results[0].severity == Severity.WARNING
        assert results[0].message == (
            "Page 2 size (595×850) does not match A4 (595×842)"
        )

    def test_square_page_against_a4(self) -> None:
        document = DocumentBuilder().add_page(300, 300).build()
        results = run_rule(RuleId.PAGE_SIZE, document)

        assert len(results) == 1
        assert results[0].status == ResultStatus.FAIL
        assert results[0].page == 1
        assert results[0].details["actual"] == {"width": 300, "height": 300}
        assert results[0].details["sizeName"] == "A4"

    def test_one_result_per_mismatched_page(self) -> None:
        document = (
            DocumentBuilder()
            .add_page(612, 792)
            .add_page(595, 842)
            .add_page(612, 1008)
            .build()
        )
        results = run_rule(RuleId.PAGE_SIZE, document)
        assert [r.page for r in results] == [1, 3]

    def test_other_standard_size(self) -> None:
        document = DocumentBuilder().add_page(612, 792).build()
        results = run_rule(RuleId.PAGE_SIZE, document, expectedSize="Letter")
        assert statuses(results) == [ResultStatus.PASS]

    def test_custom_size(self) -> None:
        document = DocumentBuilder().add_page(400, 600).build()
        results = run_rule(
            RuleId.PAGE_SIZE,
            document,
            expectedSize="custom",
            customWidth=400,
            customHeight=600,
        )
        assert statuses(results) == [ResultStatus.PASS]

    def test_unknown_size_is_info_warning(self) -> None:
        document = DocumentBuilder().add_page().build()
        results = run_rule(RuleId.PAGE_SIZE, document, expectedSize="Foo")

        assert len(results) == 1
        assert results[0].status == ResultStatus.WARNING
        assert results[0].severity == Severity.INFO
        assert results[0].message == "Unknown page size: Foo"
        assert results[0].details == {"requestedSize": "Foo"}

    def test_custom_without_dimensions_is_unknown(self) -> None:
        document = DocumentBuilder().add_page().build()
        results = run_rule(RuleId.PAGE_SIZE, document, expectedSize="custom")
        assert results[0].message == "Unknown page size: custom"


class TestPageSizeConsistency:
    @pytest.mark.parametrize("tolerance", [0, 1, 100])
    def test_single_page_always_passes(self, tolerance: float) -> None:
        document = DocumentBuilder().add_page(300, 300).build()
        results = run_rule(
            RuleId.PAGE_SIZE_CONSISTENCY, document, tolerance=tolerance
        )

        assert statuses(results) == [ResultStatus.PASS]
        assert results[0].message == (
            "Single page document - consistency check not applicable"
        )

    def test_within_tolerance_is_one_aggregate_pass(self) -> None:
        document = DocumentBuilder().add_page(595, 842).add_page(595.5, 842.8).build()
        results = run_rule(RuleId.PAGE_SIZE_CONSISTENCY, document)

        assert statuses(results) == [ResultStatus.PASS]
        assert results[0].message == "All 2 pages have consistent dimensions"
        assert results[0].details == {"dimensions": {"width": 595, "height": 842}}

    def test_different_page_warns(self) -> None:
        document = (
            DocumentBuilder()
            .add_page(595, 842)
            .add_page(595, 842)
            .add_page(612, 792)
            .build()
        )
        results = run_rule(RuleId.PAGE_SIZE_CONSISTENCY, document)

        assert statuses(results) == [ResultStatus.WARNING]
        assert results[0].page == 3
        assert results[0].message == (
            "Page 3 has different dimensions (612×792) than page 1 (595×842)"
        )
        assert results[0].details == {
            "pageSize": {"width": 612, "height": 792},
            "referenceSize": {"width": 595, "height": 842},
        }


class TestNearEmptyPages:
    def test_sparse_page_warns(self) -> None:
        document = (
            DocumentBuilder()
            .add_page()
            .add_text("Hello", y=700)
            .add_page()
            .add_text("Goodbye", y=700)
            .build()
        )
        results = run_rule(RuleId.NEAR_EMPTY_PAGE, document)

        # Last page is excluded by default.
        assert [r.page for r in results] == [1]
        result = results[0]
        assert result.status == ResultStatus.WARNING
        assert result.message == (
            "Page 1 appears to have very little content (0.1% filled)"
        )
        assert result.details["textItems"] == 1
        assert result.details["lineCount"] == 1
        assert result.details["threshold"] == 0.05

    def test_full_page_passes(self) -> None:
        document = (
            DocumentBuilder()
            .add_page()
            .add_text("Body", y=400, width=500, height=60)
            .build()
        )
        results = run_rule(RuleId.NEAR_EMPTY_PAGE, document, excludeLastPage=False)

        assert statuses(results) == [ResultStatus.PASS]
        assert results[0].message == "No near-empty pages detected"

    def test_page_without_items_is_left_to_blank_rule(self) -> None:
        document = DocumentBuilder().add_page().build()
        results = run_rule(RuleId.NEAR_EMPTY_PAGE, document, excludeLastPage=False)
        assert statuses(results) == [ResultStatus.PASS]

    def test_whitespace_only_page_warns(self) -> None:
        document = DocumentBuilder().add_page().add_text("   ").build()
        results = run_rule(RuleId.NEAR_EMPTY_PAGE, document, excludeLastPage=False)

        assert statuses(results) == [ResultStatus.WARNING]
        assert results[0].details["contentRatio"] == 0
        assert results[0].details["lineCount"] == 0

    def test_exclude_first_page(self) -> None:
        document = (
            DocumentBuilder()
            .add_page()
            .add_text("Title")
            .add_page()
            .add_text("Body", width=500, height=60)
            .build()
        )
        results = run_rule(
            RuleId.NEAR_EMPTY_PAGE,
            document,
            excludeFirstPage=True,
            excludeLastPage=False,
        )
        assert statuses(results) == [ResultStatus.PASS]

    def test_line_count_clusters_close_baselines(self) -> None:
        document = (
            DocumentBuilder()
            .add_page()
            .add_text("a", y=700)
            .add_text("b", y=701)
            .add_text("c", y=650)
            .build()
        )
        results = run_rule(RuleId.NEAR_EMPTY_PAGE, document, excludeLastPage=False)
        assert results[0].details["lineCount"] == 2

    def test_missing_text_content_raises(self) -> None:
        document = DocumentBuilder().add_page().without_text_content().build()
        with pytest.raises(ValueError):
            run_rule(RuleId.NEAR_EMPTY_PAGE, document, excludeLastPage=False)


class TestBlankPages:
    def test_page_without_items_warns(self) -> None:
        document = (
            DocumentBuilder()
            .add_page()
            .add_text("Some text")
            .add_page()
            .build()
        )
        results = run_rule(
            RuleId.BLANK_PAGE, document, allowIntentionalBlanks=False
        )

        assert len(results) == 1
        assert results[0].status == ResultStatus.WARNING
        assert results[0].page == 2
        assert results[0].message == "Page 2 appears to be blank"

    def test_whitespace_items_count_as_blank(self) -> None:
        document = DocumentBuilder().add_page().add_text("  ").add_text("\t").build()
        results = run_rule(RuleId.BLANK_PAGE, document)
        assert statuses(results) == [ResultStatus.WARNING]

    def test_intentional_blank_text_never_warns(self) -> None:
        document = (
            DocumentBuilder()
            .add_page()
            .add_text("This page intentionally left blank")
            .build()
        )
        results = run_rule(RuleId.BLANK_PAGE, document, allowIntentionalBlanks=True)

        assert statuses(results) == [ResultStatus.PASS]
        assert results[0].message == "No unexpected blank pages detected"

    def test_blank_page_without_marker_warns(self) -> None:
        builder = DocumentBuilder()
        for _ in range(4):
            builder.add_page().add_text("Chapter text")
        document = builder.add_page().build()

        results = run_rule(RuleId.BLANK_PAGE, document, allowIntentionalBlanks=True)

        assert [(r.status, r.page) for r in results] == [(ResultStatus.WARNING, 5)]

    def test_missing_text_content_raises(self) -> None:
        document = DocumentBuilder().add_page().without_text_content().build()
        with pytest.raises(ValueError):
            run_rule(RuleId.BLANK_PAGE, document)


class TestPageNumberSequence:
    @staticmethod
    def numbered(*numbers: str, y: float = 30) -> FakeDocument:
        builder = DocumentBuilder()
        for number in numbers:
            builder.add_page().add_text("Body text", y=400).add_text(number, y=y)
        return builder.build()

    def test_correct_sequence_passes(self) -> None:
        results = run_rule(RuleId.PAGE_NUMBER_SEQUENCE, self.numbered("1", "2", "3"))

        assert statuses(results) == [ResultStatus.PASS]
        assert results[0].message == "Page numbering sequence is correct"

    def test_header_numbers_count(self) -> None:
        document = self.numbered("1", "2", y=800)
        results = run_rule(RuleId.PAGE_NUMBER_SEQUENCE, document)
        assert statuses(results) == [ResultStatus.PASS]

    def test_gap_warns(self) -> None:
        results = run_rule(RuleId.PAGE_NUMBER_SEQUENCE, self.numbered("1", "2", "4"))

        assert statuses(results) == [ResultStatus.WARNING]
        assert results[0].message == "Gap in page numbering: 2 → 4"
        assert results[0].details == {"before": 2, "after": 4}
        assert results[0].page is None

    def test_gaps_ignored_when_disabled(self) -> None:
        document = self.numbered("1", "2", "4")
        results = run_rule(RuleId.PAGE_NUMBER_SEQUENCE, document, checkForGaps=False)
        assert statuses(results) == [ResultStatus.PASS]

    def test_unexpected_start_is_info(self) -> None:
        results = run_rule(RuleId.PAGE_NUMBER_SEQUENCE, self.numbered("3", "4"))

        assert len(results) == 1
        assert results[0].status == ResultStatus.INFO
        assert results[0].severity == Severity.INFO
        assert results[0].message == "Page numbering starts at 3 instead of 1"
        assert results[0].details == {"actual": 3, "expected": 1}

    def test_no_numbers_found(self) -> None:
        document = DocumentBuilder().add_pages(2).build()
        results = run_rule(RuleId.PAGE_NUMBER_SEQUENCE, document)

        assert statuses(results) == [ResultStatus.INFO]
        assert results[0].severity == Severity.INFO
        assert results[0].message == "No page numbers detected in header/footer areas"

    def test_body_numbers_ignored(self) -> None:
        results = run_rule(
            RuleId.PAGE_NUMBER_SEQUENCE, self.numbered("1", "2", y=400)
        )
        assert statuses(results) == [ResultStatus.INFO]

    def test_out_of_range_numbers_ignored(self) -> None:
        document = self.numbered("1", "99")
        results = run_rule(RuleId.PAGE_NUMBER_SEQUENCE, document)
        assert statuses(results) == [ResultStatus.PASS]

    def test_range_factor_is_configurable(self) -> None:
        document = self.numbered("1", "99")
        results = run_rule(RuleId.PAGE_NUMBER_SEQUENCE, document, maxNumberFactor=50)
        assert results[0].message == "Gap in page numbering: 1 → 99"

    @pytest.mark.parametrize("text", ["0", "1a", "-1", "²"])
    def test_non_page_numbers_ignored(self, text: str) -> None:
        results = run_rule(RuleId.PAGE_NUMBER_SEQUENCE, self.numbered(text))
        assert statuses(results) == [ResultStatus.INFO]


class TestContentOverflow:
    def test_content_inside_margins_passes(self) -> None:
        document = DocumentBuilder().add_page().add_text("Body", x=72, y=400).build()
        results = run_rule(RuleId.CONTENT_OVERFLOW, document)

        assert statuses(results) == [ResultStatus.PASS]
        assert results[0].message == "All content within 20pt margin threshold"

    def test_left_edge(self) -> None:
        document = DocumentBuilder().add_page().add_text("Edge", x=10, y=400).build()
        results = run_rule(RuleId.CONTENT_OVERFLOW, document)

        assert statuses(results) == [ResultStatus.WARNING]
        assert results[0].page == 1
        assert results[0].message == (
            "Page 1: Content near left edge(s) (within 20pt of boundary)"
        )

    def test_corner_reports_each_edge(self) -> None:
        document = (
            DocumentBuilder()
            .add_page()
            .add_text("Corner", x=5, y=5, width=50)
            .add_text("Also left", x=5, y=400)
            .build()
        )
        results = run_rule(RuleId.CONTENT_OVERFLOW, document)

        details = results[0].details
        assert details["directions"] == ["left", "bottom"]
        assert details["itemCount"] == 3
        assert details["samples"][0] == {
            "edge": "left",
            "x": 5,
            "y": 5,
            "text": "Corner",
        }
        assert results[0].message == (
            "Page 1: Content near left, bottom edge(s) (within 20pt of boundary)"
        )

    def test_blank_items_ignored(self) -> None:
        document = DocumentBuilder().add_page().add_text("  ", x=0, y=0).build()
        results = run_rule(RuleId.CONTENT_OVERFLOW, document)
        assert statuses(results) == [ResultStatus.PASS]

    def test_one_result_per_page(self) -> None:
        document = (
            DocumentBuilder()
            .add_page()
            .add_text("ok", x=72, y=400)
            .add_page()
            .add_text("right", x=560, y=400, width=30)
            .build()
        )
        results = run_rule(RuleId.CONTENT_OVERFLOW, document)
        assert [(r.page, r.details["directions"]) for r in results] == [(2, ["right"])]

    def test_custom_margin(self) -> None:
        document = DocumentBuilder().add_page().add_text("Edge", x=10, y=400).build()
        results = run_rule(RuleId.CONTENT_OVERFLOW, document, marginThreshold=5)
        assert statuses(results) == [ResultStatus.PASS]


class TestOrphanWidow:
    @staticmethod
    def page_with_lines(
        builder: DocumentBuilder, lines: list[tuple[float, str]]
    ) -> DocumentBuilder:
        builder.add_page()
        for y, text in lines:
            builder.add_text(text, y=y)
        return builder

    ORPHAN_PAGE = [
        (696, "continued text"),
        (648, "A new paragraph starts here and"),
        (636, "runs on for several lines of"),
        (624, "ordinary body text until it"),
        (612, "finally ends."),
    ]
    WIDOW_PAGE = [
        (696, "Body text that fills the page"),
        (684, "with several lines of prose"),
        (672, "and then finishes its paragraph"),
        (660, "with a full stop."),
        (612, "The next paragraph begins"),
    ]
    PLAIN_PAGE = [
        (696, "An ordinary paragraph of text"),
        (684, "that flows down the page with"),
        (672, "regular spacing between lines"),
        (660, "and no isolated fragments."),
    ]

    def build(self, *pages: list[tuple[float, str]]) -> FakeDocument:
        builder = DocumentBuilder()
        for lines in pages:
            self.page_with_lines(builder, lines)
        return builder.build()

    def test_orphan(self) -> None:
        document = self.build(self.PLAIN_PAGE, self.ORPHAN_PAGE, self.PLAIN_PAGE)
        results = run_rule(RuleId.ORPHAN_WIDOW, document)

        assert len(results) == 1
        result = results[0]
        assert result.status == ResultStatus.INFO
        assert result.severity == Severity.INFO
        assert result.page == 2
        assert result.message == (
            'Page 2: Potential orphan - single line "continued text" '
            "at content area top"
        )
        assert result.details == {
            "type": "orphan",
            "gap": 48,
            "avgGap": 21,
            "lineText": "continued text",
            "yPosition": 696,
        }

    def test_no_orphan_on_first_page(self) -> None:
        document = self.build(self.ORPHAN_PAGE, self.PLAIN_PAGE)
        results = run_rule(RuleId.ORPHAN_WIDOW, document)
        assert statuses(results) == [ResultStatus.PASS]

    def test_heading_is_not_an_orphan(self) -> None:
        heading_page = [(696, "2. Results"), *self.ORPHAN_PAGE[1:]]
        document = self.build(self.PLAIN_PAGE, heading_page, self.PLAIN_PAGE)
        results = run_rule(RuleId.ORPHAN_WIDOW, document)
        assert statuses(results) == [ResultStatus.PASS]

    def test_widow(self) -> None:
        document = self.build(self.WIDOW_PAGE, self.PLAIN_PAGE)
        results = run_rule(RuleId.ORPHAN_WIDOW, document)

        assert len(results) == 1
        assert results[0].page == 1
        assert results[0].details["type"] == "widow"
        assert results[0].details["yPosition"] == 612
        assert results[0].message == (
            'Page 1: Potential widow - single line "The next paragraph begins" '
            "at content area bottom"
        )

    def test_no_widow_on_last_page(self) -> None:
        document = self.build(self.PLAIN_PAGE, self.WIDOW_PAGE)
        results = run_rule(RuleId.ORPHAN_WIDOW, document)
        assert statuses(results) == [ResultStatus.PASS]

    def test_sentence_end_is_not_a_widow(self) -> None:
        finished = [*self.WIDOW_PAGE[:-1], (612, "A short closing line.")]
        document = self.build(finished, self.PLAIN_PAGE)
        results = run_rule(RuleId.ORPHAN_WIDOW, document)
        assert statuses(results) == [ResultStatus.PASS]

    def test_status_follows_severity(self) -> None:
        document = self.build(self.WIDOW_PAGE, self.PLAIN_PAGE)

        warning = run_rule(RuleId.ORPHAN_WIDOW, document, severity=Severity.WARNING)
        error = run_rule(RuleId.ORPHAN_WIDOW, document, severity=Severity.ERROR)

        assert statuses(warning) == [ResultStatus.WARNING]
        assert statuses(error) == [ResultStatus.FAIL]

    def test_long_line_truncated_in_message(self) -> None:
        orphan_page = [(696, "x" * 40), *self.ORPHAN_PAGE[1:]]
        document = self.build(self.PLAIN_PAGE, orphan_page, self.PLAIN_PAGE)
        results = run_rule(RuleId.ORPHAN_WIDOW, document)

        assert f'"{"x" * 30}..."' in results[0].message
        assert results[0].details["lineText"] == "x" * 40

    def test_fewer_than_three_lines_never_reported(self) -> None:
        short_page = [(696, "one line"), (500, "far below")]
        document = self.build(self.PLAIN_PAGE, short_page, self.PLAIN_PAGE)
        results = run_rule(RuleId.ORPHAN_WIDOW, document)
        assert statuses(results) == [ResultStatus.PASS]

    def test_header_and_footer_excluded(self) -> None:
        page = [(800, "Running header"), *self.PLAIN_PAGE, (30, "2")]
        document = self.build(self.PLAIN_PAGE, page, self.PLAIN_PAGE)
        results = run_rule(RuleId.ORPHAN_WIDOW, document)

        assert statuses(results) == [ResultStatus.PASS]
        assert results[0].details == {
            "headerMargin": 72,
            "footerMargin": 72,
            "note": "Header and footer areas were excluded from analysis",
        }

    def test_min_lines_top_widens_fragment(self) -> None:
        two_line_top = [
            (696, "continued text"),
            (684, "and a bit more"),
            (636, "A new paragraph starts here and"),
            (624, "runs on for several lines of"),
            (612, "ordinary body text."),
        ]
        document = self.build(self.PLAIN_PAGE, two_line_top, self.PLAIN_PAGE)

        assert statuses(run_rule(RuleId.ORPHAN_WIDOW, document)) == [
            ResultStatus.PASS
        ]
        results = run_rule(RuleId.ORPHAN_WIDOW, document, minLinesTop=3)
        assert results[0].details["type"] == "orphan"
        assert results[0].message == (
            'Page 2: Potential orphan - 2-line fragment "continued text" '
            "at content area top"
        )


class TestTextExtraction:
    def test_all_pages_extractable(self) -> None:
        document = DocumentBuilder().add_pages(2).build()
        results = run_rule(RuleId.TEXT_EXTRACTION, document)

        assert statuses(results) == [ResultStatus.PASS]
        assert results[0].message == "Text can be extracted from all 2 page(s)"

    def test_missing_content(self) -> None:
        document = DocumentBuilder().add_page().add_page().without_text_content().build()
        results = run_rule(RuleId.TEXT_EXTRACTION, document)

        assert len(results) == 1
        assert results[0].status == ResultStatus.WARNING
        assert results[0].page == 2
        assert results[0].message == (
            "Page 2: Text extraction issue - No text content returned"
        )
        assert results[0].details == {"error": "No text content returned"}

    def test_extraction_error(self) -> None:
        document = (
            DocumentBuilder()
            .add_page()
            .fail_text_extraction(RuntimeError("corrupt stream"))
            .add_page()
            .fail_text_extraction(RuntimeError("bad font"))
            .build()
        )
        results = run_rule(RuleId.TEXT_EXTRACTION, document)

        assert [r.message for r in results] == [
            "Page 1: Text extraction issue - corrupt stream",
            "Page 2: Text extraction issue - bad font",
        ]
