"""CLI configuration and argument parsing."""

from __future__ import annotations

import argparse
import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from layout_lint.pagination.validation import RuleId, get_available_page_sizes
from layout_lint.pagination.validation.page_sizes import CUSTOM_SIZE


@dataclass(frozen=True)
class RuleSetting:
    """A single ``RULE_ID.KEY=VALUE`` override from the command line."""

    rule_id: str
    key: str
    value: Any


def parse_rule_setting(text: str) -> RuleSetting:
    """Parse ``RULE_ID.KEY=VALUE``.

    VALUE is read as JSON when possible (numbers, booleans, null, lists),
    otherwise it is kept as a plain string.

    Raises:
        argparse.ArgumentTypeError: If the text is not of that form.
    """
    target, sep, raw_value = text.partition("=")
    rule_id, dot, key = target.partition(".")
    if not sep or not dot or not rule_id or not key:
        raise argparse.ArgumentTypeError(
            f"expected RULE_ID.KEY=VALUE, got {text!r}"
        )
    try:
        value = json.loads(raw_value)
    except json.JSONDecodeError:
        value = raw_value
    return RuleSetting(rule_id=rule_id, key=key, value=value)


@dataclass
class ProcessingConfig:
    """Configuration for a validation run."""

    pdf_paths: list[Path]
    rules_file: Path | None = None
    enable: list[str] = field(default_factory=list)
    disable: list[str] = field(default_factory=list)
    settings: list[RuleSetting] = field(default_factory=list)
    page_size: str | None = None

    # Output flags
    json_output: bool = False
    output: Path | None = None
    use_color: bool = True
    list_rules: bool = False
    list_page_sizes: bool = False

    jobs: int = 1
    log_level: str = "WARNING"

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> ProcessingConfig:
        """Create config from parsed arguments.

        Args:
            args: Parsed command-line arguments

        Returns:
            ProcessingConfig instance
        """
        return cls(
            pdf_paths=[Path(p) for p in args.pdf_paths],
            rules_file=args.rules,
            enable=list(args.enable or []),
            disable=list(args.disable or []),
            settings=list(args.set or []),
            page_size=args.page_size,
            json_output=args.json,
            output=args.output,
            use_color=args.color,
            list_rules=args.list_rules,
            list_page_sizes=args.list_page_sizes,
            jobs=args.jobs,
            log_level=args.log_level,
        )


def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse and return command-line arguments.

    Args:
        argv: Arguments to parse. Defaults to sys.argv[1:].

    Returns:
        Parsed arguments namespace
    """
    rule_ids = [rule_id.value for rule_id in RuleId]

    parser = argparse.ArgumentParser(
        prog="layout-lint",
        description=(
            "Check PDF files for layout problems: page count, page size, "
            "blank or near-empty pages, content near the edges and more."
        ),
        allow_abbrev=False,
    )

    # Basic arguments
    parser.add_argument(
        "pdf_paths",
        nargs="*",
        help="Path(s) to one or more PDF files to validate.",
    )

    # Rule options group
    rule_group = parser.add_argument_group("rule options")
    rule_group.add_argument(
        "--rules",
        type=Path,
        metavar="FILE",
        help=(
            "JSON file with a list of rule overrides, e.g. "
            '[{"id": "page-size", "config": {"expectedSize": "Letter"}}]. '
            "Compressed .gz and .bz2 files are supported."
        ),
    )
    rule_group.add_argument(
        "--enable",
        action="append",
        choices=rule_ids,
        metavar="RULE_ID",
        help="Enable a rule. May be repeated.",
    )
    rule_group.add_argument(
        "--disable",
        action="append",
        choices=rule_ids,
        metavar="RULE_ID",
        help="Disable a rule. May be repeated.",
    )
    rule_group.add_argument(
        "--set",
        action="append",
        type=parse_rule_setting,
        metavar="RULE_ID.KEY=VALUE",
        help=(
            "Set one rule config value, e.g. 'page-count-max.maxPages=20'. "
            "VALUE is parsed as JSON where possible. May be repeated."
        ),
    )
    rule_group.add_argument(
        "--page-size",
        choices=[*get_available_page_sizes(), CUSTOM_SIZE],
        help="Expected page size (shortcut for --set page-size.expectedSize=NAME).",
    )

    # Output options group
    output_group = parser.add_argument_group("output options")
    output_group.add_argument(
        "--json",
        action="store_true",
        help="Print the validation summary as JSON instead of a report.",
    )
    output_group.add_argument(
        "--output",
        type=Path,
        metavar="FILE",
        help="Also save the summary JSON to FILE (.gz/.bz2 are compressed).",
    )
    output_group.add_argument(
        "--color",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Use ANSI colors in the report.",
    )
    output_group.add_argument(
        "--list-rules",
        action="store_true",
        help="List the configured rules and exit.",
    )
    output_group.add_argument(
        "--list-page-sizes",
        action="store_true",
        help="List the standard page sizes and exit.",
    )

    parser.add_argument(
        "--jobs",
        type=_positive_int,
        default=1,
        help="Number of files to validate concurrently (default: 1).",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Set the logging level (default: WARNING).",
    )

    return parser.parse_args(argv)
