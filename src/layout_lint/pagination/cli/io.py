"""Input/Output operations for the command line tool."""

import bz2
import gzip
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from layout_lint.pagination.validation import RuleRegistry, ValidationSummary

logger = logging.getLogger(__name__)


def open_compressed(path: Path, mode: str = "rt", **kwargs):
    """Open a file, automatically detecting compression.

    Supports uncompressed files, gzip .gz, and bz2 .bz2 files.
    Works like the built-in open() but handles compressed files transparently.

    Args:
        path: Path to file (compressed or uncompressed)
        mode: File mode (e.g., 'rt', 'rb', 'wt', 'wb')
        **kwargs: Additional arguments passed to the opener (e.g., encoding)

    Returns:
        File handle (text or binary mode depending on mode parameter)
    """
    if path.suffix == ".bz2":
        return bz2.open(path, mode, **kwargs)
    elif path.suffix == ".gz":
        return gzip.open(path, mode, **kwargs)
    else:
        return open(path, mode, **kwargs)


def load_json(path: Path) -> Any:
    """Load JSON from file, automatically detecting compression.

    Raises:
        ValueError: If the file contains invalid JSON
    """
    try:
        with open_compressed(path, "rt", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(
            f"Failed to parse JSON from {path}: {e.msg} at line {e.lineno}, "
            f"column {e.colno}"
        ) from e


def load_rules(path: Path) -> list[dict[str, Any]]:
    """Load rule overrides from a JSON file.

    The file holds a list of rule objects (camelCase keys). Only ``id`` is
    required; the output of ``--list-rules --json`` is a valid rules file.
    A top-level ``{"rules": [...]}`` object is also accepted.

    Raises:
        ValueError: If the file is not valid JSON or not a list of rule
            objects with an ``id``.
    """
    data = load_json(path)
    if isinstance(data, Mapping) and "rules" in data:
        data = data["rules"]
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of rules")

    rules: list[dict[str, Any]] = []
    for index, entry in enumerate(data):
        if not isinstance(entry, Mapping) or not isinstance(entry.get("id"), str):
            raise ValueError(f"{path}: rule #{index + 1} must be an object with an id")
        rules.append(dict(entry))
    logger.info("Loaded %d rule override(s) from %s", len(rules), path)
    return rules


def apply_rule_overrides(
    registry: RuleRegistry, overrides: list[dict[str, Any]]
) -> None:
    """Apply rule objects to a registry.

    ``config`` is merged into the rule's existing config; every other field
    replaces the current value. Unknown rule ids are ignored.
    """
    for override in overrides:
        fields = dict(override)
        rule_id = fields.pop("id")
        config = fields.pop("config", None)
        if registry.get_rule(rule_id) is None:
            logger.warning("Ignoring unknown rule %r", rule_id)
            continue
        if fields:
            registry.update_rule(rule_id, fields)
        if config:
            registry.set_rule_config(rule_id, config)


def summaries_to_json(summaries: Mapping[Path, ValidationSummary]) -> Any:
    """JSON-ready form of one or more summaries.

    A single summary is returned as-is; several are keyed by file path.
    """
    if len(summaries) == 1:
        return next(iter(summaries.values())).to_dict()
    return {str(path): summary.to_dict() for path, summary in summaries.items()}


def save_summary_json(summaries: Mapping[Path, ValidationSummary], path: Path) -> None:
    """Save summaries as JSON, compressing by file extension."""
    with open_compressed(path, "wt", encoding="utf-8") as f:
        json.dump(summaries_to_json(summaries), f, indent="\t")
    logger.info("Saved summary JSON to %s", path)
