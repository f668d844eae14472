"""Layout validation for paginated documents.

This module provides the rule registry, the individual layout rules and the
engine that runs them against a document.
"""

from .page_sizes import (
    PAGE_SIZES,
    PageSize,
    get_available_page_sizes,
    get_page_size_dimensions,
)
from .printer import format_summary_line, print_summary
from .registry import RuleRegistry, get_default_rules
from .rules import RULE_IMPLEMENTATIONS
from .runner import PaginationValidator, create_validator, quick_validate
from .types import (
    ResultStatus,
    Rule,
    RuleId,
    Severity,
    ValidationResult,
    ValidationSummary,
)

__all__ = [
    # Types
    "ResultStatus",
    "Rule",
    "RuleId",
    "Severity",
    "ValidationResult",
    "ValidationSummary",
    # Engine
    "PaginationValidator",
    "RuleRegistry",
    "RULE_IMPLEMENTATIONS",
    "create_validator",
    "quick_validate",
    "get_default_rules",
    # Page sizes
    "PAGE_SIZES",
    "PageSize",
    "get_available_page_sizes",
    "get_page_size_dimensions",
    # Printer
    "format_summary_line",
    "print_summary",
]
