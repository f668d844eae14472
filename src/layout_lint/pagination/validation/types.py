"""Validation types and data structures."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from layout_lint.pagination.extractor.metadata import DocumentMetadata
from layout_lint.pagination.utils import SerializationMixin


class Severity(Enum):
    """Importance class of a rule."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ResultStatus(Enum):
    """Outcome of a single check."""

    PASS = "pass"
    FAIL = "fail"
    WARNING = "warning"
    INFO = "info"


class RuleId(Enum):
    """Every rule kind the engine knows how to run."""

    PAGE_COUNT_MIN = "page-count-min"
    PAGE_COUNT_MAX = "page-count-max"
    PAGE_SIZE = "page-size"
    PAGE_SIZE_CONSISTENCY = "page-size-consistency"
    NEAR_EMPTY_PAGE = "near-empty-page"
    BLANK_PAGE = "blank-page"
    PAGE_NUMBER_SEQUENCE = "page-number-sequence"
    CONTENT_OVERFLOW = "content-overflow"
    ORPHAN_WIDOW = "orphan-widow"
    TEXT_EXTRACTION = "text-extraction"


_CAMEL_CASE = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Rule(SerializationMixin, BaseModel):
    """A named, independently configurable check.

    Attributes:
        id: Which check this is; fixed for the lifetime of the rule.
        name: Human-readable rule name
        description: What the rule checks
        severity: Severity reported when the rule finds a problem
        enabled: Whether validation runs this rule
        config: Rule-specific settings, interpreted only by the rule itself
    """

    model_config = ConfigDict(
        validate_assignment=True, alias_generator=to_camel, populate_by_name=True
    )

    id: RuleId = Field(frozen=True)
    name: str
    description: str = ""
    severity: Severity
    enabled: bool = True
    config: dict[str, Any] = Field(default_factory=dict)


class ValidationResult(SerializationMixin, BaseModel):
    """A single finding (or pass) produced by a rule.

    Attributes:
        rule_id: Id of the rule that produced it ("pdf-load" for load failures)
        rule_name: Human-readable name of that rule
        status: Outcome of the check
        severity: Severity of the finding
        message: Human-readable description
        page: Affected page number (1-indexed), or None for document-level results
        details: Structured extra information
    """

    model_config = ConfigDict(frozen=True, **_CAMEL_CASE)

    rule_id: str
    rule_name: str
    status: ResultStatus
    severity: Severity
    message: str
    page: int | None = None
    details: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        """True for a failure of an error-severity check."""
        return self.status == ResultStatus.FAIL and self.severity == Severity.ERROR


class ValidationSummary(SerializationMixin, BaseModel):
    """Everything one validation run produced.

    Attributes:
        valid: False iff any result is an error-severity failure
        total_rules: Number of rules enabled when the run started
        passed: Count of pass results
        failed: Count of fail results
        warnings: Count of warning results
        results: All results, in rule order
        metadata: The document metadata the rules ran against
    """

    model_config = ConfigDict(frozen=True, **_CAMEL_CASE)

    valid: bool
    total_rules: int
    passed: int = 0
    failed: int = 0
    warnings: int = 0
    results: tuple[ValidationResult, ...] = ()
    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)

    @classmethod
    def from_results(
        cls,
        results: Sequence[ValidationResult],
        *,
        total_rules: int,
        metadata: DocumentMetadata,
    ) -> ValidationSummary:
        """Aggregate results into a summary."""
        statuses = [r.status for r in results]
        return cls(
            valid=not any(r.is_error for r in results),
            total_rules=total_rules,
            passed=statuses.count(ResultStatus.PASS),
            failed=statuses.count(ResultStatus.FAIL),
            warnings=statuses.count(ResultStatus.WARNING),
            results=tuple(results),
            metadata=metadata,
        )

    @property
    def error_count(self) -> int:
        """Count of error-severity failures."""
        return sum(1 for r in self.results if r.is_error)

    def results_for(self, rule_id: RuleId | str) -> list[ValidationResult]:
        """All results produced by one rule."""
        key = rule_id.value if isinstance(rule_id, RuleId) else rule_id
        return [r for r in self.results if r.rule_id == key]
