"""CLI support for the layout validator."""

from .config import ProcessingConfig, RuleSetting, parse_arguments, parse_rule_setting
from .io import (
    apply_rule_overrides,
    load_json,
    load_rules,
    open_compressed,
    save_summary_json,
    summaries_to_json,
)

__all__ = [
    "ProcessingConfig",
    "RuleSetting",
    "parse_arguments",
    "parse_rule_setting",
    "apply_rule_overrides",
    "load_json",
    "load_rules",
    "open_compressed",
    "save_summary_json",
    "summaries_to_json",
]
