"""The set of rules a validator runs, and the built-in defaults."""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Final

from pydantic import ValidationError

from .types import Rule, RuleId

logger = logging.getLogger(__name__)

# Built-in rule table. Ids, severities and config defaults are part of the
# published behaviour; registries always work on copies of this data.
DEFAULT_RULE_DATA: Final[tuple[Mapping[str, Any], ...]] = (
    {
        "id": "page-count-min",
        "name": "Minimum Page Count",
        "description": "Ensures document has at least the specified number of pages",
        "severity": "error",
        "enabled": False,
        "config": {"minPages": 1},
    },
    {
        "id": "page-count-max",
        "name": "Maximum Page Count",
        "description": "Ensures document does not exceed the specified number of pages",
        "severity": "error",
        "enabled": True,
        "config": {"maxPages": 100},
    },
    {
        "id": "page-size",
        "name": "Page Size Validation",
        "description": "Validates that all pages match the expected dimensions",
        "severity": "warning",
        "enabled": True,
        "config": {
            "expectedSize": "A4",
            "tolerance": 5,
            "customWidth": None,
            "customHeight": None,
        },
    },
    {
        "id": "page-size-consistency",
        "name": "Consistent Page Sizes",
        "description": "Ensures all pages have the same dimensions",
        "severity": "warning",
        "enabled": True,
        "config": {"tolerance": 1},
    },
    {
        "id": "near-empty-page",
        "name": "Near-Empty Page Detection",
        "description": "Detects pages with very little content",
        "severity": "warning",
        "enabled": True,
        "config": {
            "minContentRatio": 0.05,
            "excludeFirstPage": False,
            "excludeLastPage": True,
        },
    },
    {
        "id": "blank-page",
        "name": "Blank Page Detection",
        "description": "Detects completely blank pages",
        "severity": "warning",
        "enabled": True,
        "config": {"allowIntentionalBlanks": True},
    },
    {
        "id": "page-number-sequence",
        "name": "Page Number Sequence",
        "description": "Validates page numbering is sequential",
        "severity": "info",
        "enabled": False,
        "config": {"startNumber": 1, "checkForGaps": True},
    },
    {
        "id": "content-overflow",
        "name": "Content Overflow Detection",
        "description": "Detects content that may overflow page boundaries",
        "severity": "warning",
        "enabled": True,
        "config": {"marginThreshold": 20},
    },
    {
        "id": "orphan-widow",
        "name": "Orphan/Widow Detection",
        "description": (
            "Detects single lines at page start/end (orphans/widows) in content area"
        ),
        "severity": "info",
        "enabled": False,
        "config": {
            "minLinesTop": 2,
            "minLinesBottom": 2,
            "headerMargin": 72,
            "footerMargin": 72,
            "lineGapThreshold": 24,
        },
    },
    {
        "id": "text-extraction",
        "name": "Text Extractability",
        "description": "Ensures text can be extracted from all pages",
        "severity": "info",
        "enabled": True,
        "config": {},
    },
)

# Fields update_rule() may change. The id is the rule's identity.
UPDATABLE_FIELDS: Final = frozenset(
    {"name", "description", "severity", "enabled", "config"}
)


def get_default_rules() -> list[Rule]:
    """Return a fresh, independent copy of the built-in rules."""
    return [Rule.model_validate(copy.deepcopy(dict(data))) for data in DEFAULT_RULE_DATA]


def _key(rule_id: RuleId | str) -> str:
    return rule_id.value if isinstance(rule_id, RuleId) else rule_id


class RuleRegistry:
    """Holds the rules a validator runs, in order.

    The registry is only changed through its explicit methods; validation
    runs read it through ``snapshot()``. Unknown rule ids are ignored rather
    than raised, so callers can apply settings written for other versions.

    Example usage:
        registry = RuleRegistry()
        registry.set_rule_enabled("orphan-widow", True)
        registry.set_rule_config("page-size", {"expectedSize": "Letter"})
    """

    def __init__(self, rules: Iterable[Rule] | None = None) -> None:
        """Create a registry.

        Args:
            rules: Rules to hold (deep-copied). If None, the built-in defaults.

        Raises:
            ValueError: If two rules share an id.
        """
        self._lock = threading.Lock()
        if rules is None:
            self._rules = get_default_rules()
        else:
            self._rules = [rule.model_copy(deep=True) for rule in rules]
            ids = [rule.id for rule in self._rules]
            duplicates = sorted({i.value for i in ids if ids.count(i) > 1})
            if duplicates:
                raise ValueError(f"Duplicate rule ids: {', '.join(duplicates)}")

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.get_rules())

    def __len__(self) -> int:
        return len(self._rules)

    def get_rules(self) -> list[Rule]:
        """The current rules, in run order.

        The list is new, the Rule objects are the live ones.
        """
        with self._lock:
            return list(self._rules)

    def get_rule(self, rule_id: RuleId | str) -> Rule | None:
        with self._lock:
            return self._find(rule_id)

    def update_rule(self, rule_id: RuleId | str, fields: Mapping[str, Any]) -> None:
        """Shallow-merge ``fields`` into the matching rule.

        Unknown ids are a no-op. Fields outside UPDATABLE_FIELDS are ignored
        with a warning, and an update that fails validation (for example an
        unknown severity) leaves the rule unchanged.
        """
        with self._lock:
            rule = self._find(rule_id)
            if rule is None:
                logger.debug("Ignoring update for unknown rule %r", _key(rule_id))
                return
            self._apply(rule, fields)

    def set_rule_enabled(self, rule_id: RuleId | str, enabled: bool) -> None:
        self.update_rule(rule_id, {"enabled": enabled})

    def set_rule_config(self, rule_id: RuleId | str, config: Mapping[str, Any]) -> None:
        """Shallow-merge ``config`` into the matching rule's config."""
        with self._lock:
            rule = self._find(rule_id)
            if rule is None:
                logger.debug("Ignoring config for unknown rule %r", _key(rule_id))
                return
            self._apply(rule, {"config": {**rule.config, **config}})

    def _find(self, rule_id: RuleId | str) -> Rule | None:
        # Caller holds self._lock.
        key = _key(rule_id)
        return next((r for r in self._rules if r.id.value == key), None)

    @staticmethod
    def _apply(rule: Rule, fields: Mapping[str, Any]) -> None:
        updates = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        ignored = sorted(set(fields) - UPDATABLE_FIELDS)
        if ignored:
            logger.warning(
                "Rule %s: ignoring non-updatable field(s) %s", rule.id.value, ignored
            )
        if not updates:
            return

        try:
            merged = Rule.model_validate({**rule.model_dump(), **updates})
        except ValidationError as e:
            logger.warning("Rule %s: invalid update ignored: %s", rule.id.value, e)
            return
        for name in updates:
            setattr(rule, name, getattr(merged, name))

    def reset_rules(self) -> None:
        """Replace every rule with a fresh copy of the built-in defaults.

        Rule objects handed out before the reset are detached and keep their
        old values.
        """
        with self._lock:
            self._rules = get_default_rules()

    def snapshot(self) -> list[Rule]:
        """Deep copies of the enabled rules, in run order."""
        with self._lock:
            return [rule.model_copy(deep=True) for rule in self._rules if rule.enabled]
