"""Tests for line clustering."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from layout_lint.pagination.extractor.text_items import TextItem
from layout_lint.pagination.geometry.lines import (
    count_distinct_lines,
    group_lines,
    line_gaps,
    line_key,
    line_text,
    paragraph_breaks,
    top_down,
)


def item(text: str, y: float, x: float = 72) -> TextItem:
    return TextItem(text=text, x=x, y=y)


class TestCountDistinctLines:
    def test_empty(self) -> None:
        assert count_distinct_lines([], tolerance=2) == 0

    def test_single_value(self) -> None:
        assert count_distinct_lines([100], tolerance=2) == 1

    def test_separate_lines(self) -> None:
        assert count_distinct_lines([700, 686, 672], tolerance=2) == 3

    def test_jitter_within_tolerance_merges(self) -> None:
        """Items on the same baseline with sub-point jitter count once."""
        assert count_distinct_lines([700.0, 700.4, 699.8, 686.0], tolerance=1) == 2

    def test_order_independent_input(self) -> None:
        values = [10, 30, 11, 29, 50]
        assert count_distinct_lines(values, 2) == count_distinct_lines(
            sorted(values, reverse=True), 2
        )

    def test_transitive_chain_merges(self) -> None:
        """A chain of close values merges even though its ends are far apart."""
        assert count_distinct_lines([0.0, 0.8, 1.6, 2.4], tolerance=1) == 1

    def test_boundary_is_inclusive(self) -> None:
        assert count_distinct_lines([10, 12], tolerance=2) == 1
        assert count_distinct_lines([10, 12.01], tolerance=2) == 2


class TestLineKey:
    @pytest.mark.parametrize(
        ("y", "expected"),
        [(0, 0), (5.9, 0), (6, 12), (17.9, 12), (18, 24), (700, 696)],
    )
    def test_rounds_to_bucket(self, y: float, expected: float) -> None:
        assert line_key(y) == expected

    def test_custom_bucket(self) -> None:
        assert line_key(26, bucket_size=10) == 30


class TestGroupLines:
    def test_items_on_same_line_grouped(self) -> None:
        lines = group_lines([item("Hello ", 700), item("world", 701), item("Next", 686)])
        assert len(lines) == 2
        assert line_text(lines[line_key(700)]) == "Hello world"

    def test_top_down_order(self) -> None:
        lines = group_lines([item("b", 300), item("a", 700), item("c", 100)])
        keys = top_down(lines)
        assert [line_text(lines[k]) for k in keys] == ["a", "b", "c"]


class TestLineGaps:
    def test_gaps(self) -> None:
        assert line_gaps([700, 688, 640]) == [12, 48]

    def test_single_line_has_no_gaps(self) -> None:
        assert line_gaps([700]) == []


class TestParagraphBreaks:
    def test_no_gaps(self) -> None:
        assert paragraph_breaks([], gap_threshold=24) == []

    def test_uniform_spacing_has_no_breaks(self) -> None:
        assert paragraph_breaks([12, 12, 12, 12], gap_threshold=24) == []

    def test_gap_relative_to_mean(self) -> None:
        # mean = 15, 1.5x mean = 22.5 -> only the 24 gap breaks
        assert paragraph_breaks([12, 12, 24, 12], gap_threshold=100) == [2]

    def test_absolute_threshold(self) -> None:
        # All gaps equal, but every gap exceeds the absolute threshold
        assert paragraph_breaks([30, 30], gap_threshold=24) == [0, 1]


# --- Property Tests ---

positions = st.floats(
    min_value=-1000, max_value=1000, allow_nan=False, allow_infinity=False
)
tolerances = st.floats(min_value=0, max_value=50, allow_nan=False)


@given(st.lists(positions), tolerances)
def test_count_distinct_lines_bounds(values, tolerance):
    count = count_distinct_lines(values, tolerance)
    assert count <= len(values)
    assert (count == 0) == (len(values) == 0)


@given(st.lists(positions), tolerances, st.randoms())
def test_count_distinct_lines_ignores_input_order(values, tolerance, rnd):
    shuffled = list(values)
    rnd.shuffle(shuffled)
    assert count_distinct_lines(shuffled, tolerance) == count_distinct_lines(
        values, tolerance
    )


@given(st.lists(positions, min_size=1))
def test_zero_tolerance_counts_distinct_values(values):
    assert count_distinct_lines(values, 0) == len(set(values))


@given(positions)
def test_line_key_is_nearest_bucket(y):
    key = line_key(y)
    assert abs(key - y) <= 6 + 1e-9
    assert line_key(key) == key


@given(st.lists(positions, min_size=2, unique=True))
def test_line_gaps_are_positive_top_down(values):
    ordered = sorted(values, reverse=True)
    gaps = line_gaps(ordered)
    assert len(gaps) == len(values) - 1
    assert all(gap > 0 for gap in gaps)
