"""Run the exchange over a single template or a directory of templates."""

import os
from pathlib import Path
from typing import Any

from auto_l18n.analyzers.extractor import ensure_parser
from auto_l18n.analyzers.finder import InvalidArgumentError
from auto_l18n.analyzers.ignore import load_ignore_patterns, should_ignore
from auto_l18n.exchange.keys import namespace_for
from auto_l18n.exchange.replacer import exchange_text_for_placeholders
from auto_l18n.logging import log_operation, logger, progress_bar
from auto_l18n.models.findings import BatchResult, ExchangeResult, I18nConfig


def collect_templates(root: Path, pattern: str, recursive: bool = False) -> list[Path]:
    """List template files under root matching pattern.

    Args:
        root: Directory to search.
        pattern: Glob such as "*.html.erb".
        recursive: Search subdirectories too.

    Returns:
        Sorted matching files, ignored directories excluded.
    """
    patterns = load_ignore_patterns(root)
    matches = root.rglob(pattern) if recursive else root.glob(pattern)
    return sorted(
        path for path in matches
        if path.is_file() and not should_ignore(path, root, patterns)
    )


def auto_internationalize(
    path: str | os.PathLike[str],
    config: I18nConfig | None = None,
    parser: Any = None,
) -> BatchResult:
    """Exchange hardcoded text in one template or every template in a directory.

    Files are processed one at a time; each exchange reads and rewrites the
    locale file, so keys accumulate across files.

    Args:
        path: Template file or directory.
        config: Options; defaults to I18nConfig().
        parser: Markup parser shared by every file.

    Returns:
        BatchResult with totals and per-file results.

    Raises:
        InvalidArgumentError: If path is not a string or does not exist.
        MissingCapabilityError: If no usable markup parser is available.
    """
    config = config or I18nConfig()
    if not isinstance(path, (str, os.PathLike)):
        raise InvalidArgumentError(f"Path must be a string, got {type(path).__name__}")
    target = Path(path)
    if not target.exists():
        raise InvalidArgumentError(f"Path does not exist: {target}")
    parser = ensure_parser(parser, config.parser_features)

    if target.is_file():
        return _aggregate([exchange_text_for_placeholders(target, config, parser)])

    templates = collect_templates(target, config.file_pattern, config.recursive)
    if not templates:
        logger.warning("  No files matching %s under %s", config.file_pattern, target)

    results: list[ExchangeResult] = []
    with log_operation("auto_internationalize", {"root": target, "files": len(templates)}):
        for template in progress_bar(templates, desc="Templates", total=len(templates), unit="files"):
            file_config = config
            if config.namespace_from_path and not config.namespace:
                file_config = config.model_copy(update={"namespace": namespace_for(template, target)})
            results.append(exchange_text_for_placeholders(template, file_config, parser))

    return _aggregate(results)


def _aggregate(results: list[ExchangeResult]) -> BatchResult:
    return BatchResult(
        files_processed=len(results),
        total_replaced=sum(r.replaced_count for r in results),
        total_keys=sum(r.added_key_count for r in results),
        files=results,
    )
