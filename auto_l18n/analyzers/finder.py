"""Find hardcoded, human-visible text in a single template file.

Pipeline: raw text -> pre-processor (ERB literals + directive elision)
-> HTML parser -> structural extractor -> deduplication.
"""

import os
from pathlib import Path
from typing import Any

from auto_l18n.analyzers.extractor import ensure_parser, extract
from auto_l18n.analyzers.line_index import LineIndex
from auto_l18n.analyzers.preprocess import preprocess
from auto_l18n.logging import logger
from auto_l18n.models.findings import Finding, I18nConfig


class InvalidArgumentError(ValueError):
    """Raised for a path argument that is not a string or does not exist."""


def validate_path(path: Any, require_file: bool = True) -> Path:
    """Check a user-supplied path before any I/O happens.

    Args:
        path: Candidate path (str or os.PathLike).
        require_file: If True, directories are rejected.

    Returns:
        The path as a Path.

    Raises:
        InvalidArgumentError: If path is the wrong type, missing, or a
            directory where a file is required.
    """
    if not isinstance(path, (str, os.PathLike)):
        raise InvalidArgumentError(f"Path must be a string, got {type(path).__name__}")
    resolved = Path(path)
    if not resolved.exists():
        raise InvalidArgumentError(f"Path does not exist: {resolved}")
    if require_file and not resolved.is_file():
        raise InvalidArgumentError(f"Not a file: {resolved}")
    return resolved


def read_template(path: Path) -> str:
    """Read a template as UTF-8, replacing undecodable bytes."""
    return path.read_text(encoding="utf-8", errors="replace")


def dedupe(findings: list[Finding]) -> list[Finding]:
    """Collapse findings with the same (text, kind), keeping the first one.

    Args:
        findings: Findings in extraction order.

    Returns:
        First occurrences, in their original order.
    """
    seen: set[tuple[str, str]] = set()
    unique: list[Finding] = []
    for finding in findings:
        key = (finding.text, finding.kind)
        if key in seen:
            continue
        seen.add(key)
        unique.append(finding)
    return unique


def find_findings(content: str, config: I18nConfig, parser: Any) -> list[Finding]:
    """Run the full extraction pipeline over template content.

    Args:
        content: Raw template content.
        config: Active configuration.
        parser: Markup parser with a parse(markup) method.

    Returns:
        Deduplicated findings.
    """
    line_index = LineIndex.build(content)
    pre = preprocess(content, config, line_index)
    tree = parser.parse(pre.markup)
    findings = pre.findings + extract(tree, content, line_index, config)
    return dedupe(findings)


def find_text(
    path: str | os.PathLike[str],
    config: I18nConfig | None = None,
    parser: Any = None,
) -> list[Finding] | list[str]:
    """Find hardcoded text in a template file.

    Args:
        path: Template file.
        config: Options; defaults to I18nConfig().
        parser: Markup parser to use; built from config.parser_features
            when None.

    Returns:
        Findings when config.structured is True, otherwise the distinct
        finding texts.

    Raises:
        InvalidArgumentError: If path is invalid.
        MissingCapabilityError: If no usable markup parser is available.
    """
    config = config or I18nConfig()
    template = validate_path(path)
    parser = ensure_parser(parser, config.parser_features)

    findings = find_findings(read_template(template), config, parser)
    logger.debug("  %s: %d findings", template, len(findings))

    if config.structured:
        return findings
    return list(dict.fromkeys(f.text for f in findings))
