"""Validation summary printing and formatting."""

from .types import ResultStatus, ValidationResult, ValidationSummary

# ANSI color codes
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
RESET = "\033[0m"

# Order in which result groups are printed.
STATUS_ORDER = (
    ResultStatus.FAIL,
    ResultStatus.WARNING,
    ResultStatus.INFO,
    ResultStatus.PASS,
)

_SYMBOLS = {
    ResultStatus.FAIL: "✗",
    ResultStatus.WARNING: "⚠",
    ResultStatus.INFO: "ℹ",
    ResultStatus.PASS: "✓",
}

_COLORS = {
    ResultStatus.FAIL: RED,
    ResultStatus.WARNING: YELLOW,
    ResultStatus.INFO: "",
    ResultStatus.PASS: GREEN,
}


def format_summary_line(summary: ValidationSummary) -> str:
    """One-line tally of a validation run."""
    return (
        f"Summary: {summary.passed} passed, {summary.failed} failed, "
        f"{summary.warnings} warnings ({summary.total_rules} rules)"
    )


def format_result(result: ValidationResult, *, use_color: bool = True) -> str:
    """Format one result as a single line with its status symbol."""
    color = _COLORS[result.status] if use_color else ""
    reset = RESET if color else ""
    return f"{color}{_SYMBOLS[result.status]} [{result.rule_id}] {result.message}{reset}"


def print_summary(summary: ValidationSummary, *, use_color: bool = True) -> None:
    """Print a validation summary in a human-readable format.

    Results are grouped by status, most serious first. Details are only shown
    for results that are not passes.

    Args:
        summary: The summary to print
        use_color: Whether to use ANSI colors in output
    """
    print("=== Validation Results ===")

    for status in STATUS_ORDER:
        results = [r for r in summary.results if r.status == status]
        for result in results:
            print(format_result(result, use_color=use_color))
            if status == ResultStatus.PASS:
                continue
            if result.page is not None:
                print(f"    Page: {result.page}")
            if result.details:
                print(f"    Details: {result.details}")

    print()
    verdict = "VALID" if summary.valid else f"INVALID ({summary.error_count} error(s))"
    if use_color:
        verdict = f"{GREEN if summary.valid else RED}{verdict}{RESET}"
    print(f"Result: {verdict}")
    print(format_summary_line(summary))
