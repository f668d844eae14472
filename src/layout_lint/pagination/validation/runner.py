"""Validation engine that runs the enabled rules against a document."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Mapping
from typing import Any

from layout_lint.pagination.extractor.document import (
    DocumentLoadError,
    PaginatedDocument,
    open_document,
)
from layout_lint.pagination.extractor.metadata import DocumentMetadata, extract_metadata

from .registry import RuleRegistry
from .rules import RULE_IMPLEMENTATIONS
from .types import ResultStatus, Rule, RuleId, Severity, ValidationResult, ValidationSummary

logger = logging.getLogger(__name__)

# Pseudo-rule reported when the document cannot be opened at all.
LOAD_RULE_ID = "pdf-load"
LOAD_RULE_NAME = "PDF Loading"


def _load_failure(error: Exception, *, total_rules: int) -> ValidationSummary:
    message = str(error) or error.__class__.__name__
    result = ValidationResult(
        rule_id=LOAD_RULE_ID,
        rule_name=LOAD_RULE_NAME,
        status=ResultStatus.FAIL,
        severity=Severity.ERROR,
        message=f"Failed to load PDF: {message}",
        details={"error": message},
    )
    return ValidationSummary.from_results(
        [result], total_rules=total_rules, metadata=DocumentMetadata()
    )


def run_rule(
    rule: Rule, document: PaginatedDocument, metadata: DocumentMetadata
) -> list[ValidationResult]:
    """Run a single rule, turning any exception into an info-severity failure."""
    try:
        return RULE_IMPLEMENTATIONS[rule.id](rule, document, metadata)
    except Exception as e:
        logger.warning("Rule %s failed: %s", rule.id.value, e, exc_info=True)
        message = str(e) or e.__class__.__name__
        return [
            ValidationResult(
                rule_id=rule.id.value,
                rule_name=rule.name,
                status=ResultStatus.FAIL,
                severity=Severity.INFO,
                message=f"Rule execution failed: {message}",
                details={"error": message},
            )
        ]


class PaginationValidator:
    """Checks documents against a configurable set of layout rules.

    Each run reads a snapshot of the enabled rules taken when it starts, so
    rule changes made during a run only affect later runs. A single validator
    may be shared between threads as long as each run gets its own document.

    Example usage:
        validator = PaginationValidator()
        validator.set_rule_config("page-size", {"expectedSize": "Letter"})
        summary = validator.validate(pdf_bytes)
        if not summary.valid:
            ...
    """

    def __init__(self, registry: RuleRegistry | None = None) -> None:
        self._registry = registry if registry is not None else RuleRegistry()
        self._summary_lock = threading.Lock()
        self._last_summary: ValidationSummary | None = None

    @property
    def registry(self) -> RuleRegistry:
        return self._registry

    @property
    def rules(self) -> list[Rule]:
        return self._registry.get_rules()

    def get_rules(self) -> list[Rule]:
        return self._registry.get_rules()

    def update_rule(self, rule_id: RuleId | str, fields: Mapping[str, Any]) -> None:
        self._registry.update_rule(rule_id, fields)

    def set_rule_enabled(self, rule_id: RuleId | str, enabled: bool) -> None:
        self._registry.set_rule_enabled(rule_id, enabled)

    def set_rule_config(self, rule_id: RuleId | str, config: Mapping[str, Any]) -> None:
        self._registry.set_rule_config(rule_id, config)

    def reset_rules(self) -> None:
        self._registry.reset_rules()

    @property
    def last_summary(self) -> ValidationSummary | None:
        """Summary of the most recently completed run, if any."""
        with self._summary_lock:
            return self._last_summary

    def validate(self, data: bytes) -> ValidationSummary:
        """Validate a document given as raw bytes.

        Never raises for bad input: a document that cannot be opened yields a
        summary holding a single ``pdf-load`` failure.

        Args:
            data: The complete document file contents.

        Returns:
            The summary of all enabled rules' results.
        """
        return self._store(self._compute(data))

    def validate_document(self, document: PaginatedDocument) -> ValidationSummary:
        """Validate an already-open document.

        The caller keeps ownership of ``document`` and must not use it from
        another run at the same time.
        """
        return self._store(self._run(self._registry.snapshot(), document))

    async def validate_async(self, data: bytes) -> ValidationSummary:
        """Validate in a worker thread.

        Wrap with ``asyncio.wait_for`` for a timeout; a cancelled run leaves
        ``last_summary`` untouched by that run.
        """
        summary = await asyncio.to_thread(self._compute, data)
        return self._store(summary)

    def _compute(self, data: bytes) -> ValidationSummary:
        rules = self._registry.snapshot()
        try:
            document = open_document(data)
        except DocumentLoadError as e:
            logger.error("Failed to load document: %s", e)
            return _load_failure(e, total_rules=len(rules))

        with document:
            return self._run(rules, document)

    def _run(self, rules: list[Rule], document: PaginatedDocument) -> ValidationSummary:
        try:
            metadata = extract_metadata(document)
        except Exception as e:
            logger.error("Failed to read document pages: %s", e)
            return _load_failure(e, total_rules=len(rules))

        results: list[ValidationResult] = []
        for rule in rules:
            logger.debug("Running rule %s", rule.id.value)
            results.extend(run_rule(rule, document, metadata))

        summary = ValidationSummary.from_results(
            results, total_rules=len(rules), metadata=metadata
        )
        logger.debug(
            "Validated %d page(s): %d passed, %d failed, %d warnings",
            metadata.page_count,
            summary.passed,
            summary.failed,
            summary.warnings,
        )
        return summary

    def _store(self, summary: ValidationSummary) -> ValidationSummary:
        with self._summary_lock:
            self._last_summary = summary
        return summary


def create_validator() -> PaginationValidator:
    """Create a validator with the default rules."""
    return PaginationValidator()


def quick_validate(data: bytes) -> ValidationSummary:
    """Validate a document with the default rules."""
    return create_validator().validate(data)
