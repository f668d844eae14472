"""Main CLI entry point for the layout validator."""

import json
import logging
from functools import partial
from pathlib import Path

from tqdm.contrib.concurrent import thread_map

from layout_lint.pagination.cli import (
    ProcessingConfig,
    apply_rule_overrides,
    load_rules,
    parse_arguments,
    save_summary_json,
    summaries_to_json,
)
from layout_lint.pagination.validation import (
    PAGE_SIZES,
    PaginationValidator,
    ValidationSummary,
    print_summary,
)

logger = logging.getLogger(__name__)


def _setup_logging(log_level: str) -> None:
    """Configure logging based on level.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _validate_pdf_path(pdf_path: Path) -> bool:
    """Validate that the PDF file exists.

    Args:
        pdf_path: Path to PDF file

    Returns:
        True if file exists, False otherwise
    """
    if not pdf_path.is_file():
        logger.error("File not found: %s", pdf_path)
        return False
    return True


def _configure_rules(validator: PaginationValidator, config: ProcessingConfig) -> None:
    """Apply the rules file, then the individual command-line overrides.

    Raises:
        OSError: If the rules file cannot be read.
        ValueError: If the rules file is not a valid list of rules.
    """
    if config.rules_file is not None:
        apply_rule_overrides(validator.registry, load_rules(config.rules_file))

    for rule_id in config.enable:
        validator.set_rule_enabled(rule_id, True)
    for rule_id in config.disable:
        validator.set_rule_enabled(rule_id, False)
    for setting in config.settings:
        if validator.registry.get_rule(setting.rule_id) is None:
            logger.warning("Ignoring --set for unknown rule %r", setting.rule_id)
            continue
        validator.set_rule_config(setting.rule_id, {setting.key: setting.value})
    if config.page_size is not None:
        validator.set_rule_config("page-size", {"expectedSize": config.page_size})


def _print_rules(validator: PaginationValidator, *, as_json: bool) -> None:
    rules = validator.get_rules()
    if as_json:
        print(json.dumps([rule.to_dict() for rule in rules], indent="\t"))
        return
    for rule in rules:
        state = "on " if rule.enabled else "off"
        print(f"[{state}] {rule.id.value:<22} {rule.severity.value:<8} {rule.name}")
        if rule.config:
            print(f"      {json.dumps(rule.config)}")


def _print_page_sizes() -> None:
    for name, size in PAGE_SIZES.items():
        print(f"{name:<10} {size.width:g} × {size.height:g} pt")


def _validate_file(validator: PaginationValidator, pdf_path: Path) -> ValidationSummary:
    logger.info("Validating %s", pdf_path)
    return validator.validate(pdf_path.read_bytes())


def _validate_all(
    validator: PaginationValidator, pdf_paths: list[Path], jobs: int
) -> list[ValidationSummary]:
    """Validate files in input order, several at a time when jobs > 1."""
    if jobs > 1 and len(pdf_paths) > 1:
        return thread_map(
            partial(_validate_file, validator),
            pdf_paths,
            max_workers=jobs,
            desc="Validating",
            unit="file",
        )
    return [_validate_file(validator, path) for path in pdf_paths]


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the layout validator CLI.

    Returns:
        0 if every document is valid, 1 if any is not, 2 on usage errors.
    """
    args = parse_arguments(argv)
    config = ProcessingConfig.from_args(args)
    _setup_logging(config.log_level)

    validator = PaginationValidator()
    try:
        _configure_rules(validator, config)
    except (OSError, ValueError) as e:
        logger.error("Could not load rules: %s", e)
        return 2

    if config.list_page_sizes:
        _print_page_sizes()
    if config.list_rules:
        _print_rules(validator, as_json=config.json_output)
    if config.list_page_sizes or config.list_rules:
        return 0

    if not config.pdf_paths:
        logger.error("No PDF files given")
        return 2
    pdf_paths = list(dict.fromkeys(config.pdf_paths))
    if len(pdf_paths) < len(config.pdf_paths):
        logger.warning(
            "Ignoring %d repeated file(s)", len(config.pdf_paths) - len(pdf_paths)
        )
    for pdf_path in pdf_paths:
        if not _validate_pdf_path(pdf_path):
            return 2

    try:
        results = _validate_all(validator, pdf_paths, config.jobs)
    except OSError as e:
        logger.error("Could not read file: %s", e)
        return 2
    summaries = dict(zip(pdf_paths, results, strict=True))

    if config.json_output:
        print(json.dumps(summaries_to_json(summaries), indent="\t"))
    else:
        for pdf_path, summary in summaries.items():
            if len(summaries) > 1:
                print(f"\n{pdf_path}")
            print_summary(summary, use_color=config.use_color)

    if config.output is not None:
        save_summary_json(summaries, config.output)

    return 0 if all(summary.valid for summary in summaries.values()) else 1


if __name__ == "__main__":
    raise SystemExit(main())
