"""Exchange hardcoded text in a template for translation lookups.

Each finding is mapped back to a span of the original file content by
positional string matching, then all edits are applied in descending
offset order so an edit never shifts a span that is still pending.
Spans inside ERB or HTML comments and directive code are never rewritten,
nor are <script> bodies for text node and attribute findings.

Replacement forms:
    text node          Welcome            -> <%= t("key") %>
    attribute          alt="Close"        -> alt="<%= t("key") %>"
    ERB code literal   <%= link_to "Hi" %> -> <%= link_to t("key") %>
    <script> literal   "Saved"            -> "<%= j t("key") %>"

Strings found in JSON data attributes are reported but never replaced.
"""

import html
import os
import re
import shutil
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from auto_l18n.analyzers.extractor import SCRIPT_SOURCE, ensure_parser, iter_script_literal_spans
from auto_l18n.analyzers.finder import find_findings, read_template, validate_path
from auto_l18n.analyzers.preprocess import (
    ERB_COMMENT_RE,
    ERB_DIRECTIVE_RE,
    HTML_COMMENT_RE,
    SCRIPTING_SOURCE,
    is_translation_code,
    iter_quoted_literals,
    unescape,
)
from auto_l18n.exchange.keys import generate_key
from auto_l18n.exchange.locale import load_locale_tree, save_locale_tree, set_nested_key
from auto_l18n.logging import log_operation, logger
from auto_l18n.models.findings import (
    ExchangeResult,
    Finding,
    FindingKind,
    I18nConfig,
    Replacement,
)

BACKUP_SUFFIX = ".bak"

SCRIPT_ELEMENT_RE = re.compile(r"<script\b[^>]*>(?P<body>.*?)</script\s*>", re.IGNORECASE | re.DOTALL)
_SOURCE_ATTR_RE = re.compile(r"\[(?P<attr>[^\]]+)\]$")


class ReplacementMissError(Exception):
    """Raised when a finding cannot be mapped back to the template content."""


@dataclass(frozen=True)
class Edit:
    """Replace content[start:end] with replacement."""

    start: int
    end: int
    replacement: str

    def overlaps(self, other: "Edit") -> bool:
        return self.start < other.end and other.start < self.end


def erb_output(key: str) -> str:
    return f'<%= t("{key}") %>'


def _prev_char(content: str, index: int) -> str:
    while index > 0 and content[index - 1].isspace():
        index -= 1
    return content[index - 1] if index > 0 else ""


def _next_char(content: str, index: int) -> str:
    while index < len(content) and content[index].isspace():
        index += 1
    return content[index] if index < len(content) else ""


def _text_node_edits(content: str, finding: Finding, key: str) -> Iterator[Edit]:
    needle = finding.context.strip()
    start = content.find(needle)
    while start >= 0:
        end = start + len(needle)
        if _prev_char(content, start) in ("", ">") and _next_char(content, end) in ("", "<"):
            yield Edit(start, end, erb_output(key))
        start = content.find(needle, start + 1)


def _attribute_edits(content: str, finding: Finding, key: str) -> Iterator[Edit]:
    match = _SOURCE_ATTR_RE.search(finding.source)
    if match is None:
        return
    attr_re = re.compile(
        rf"(?<![\w:-]){re.escape(match.group('attr'))}\s*=\s*"
        r"(?:\"(?P<dq>[^\"]*)\"|'(?P<sq>[^']*)')",
        re.IGNORECASE,
    )
    for attr in attr_re.finditer(content):
        group = "dq" if attr.group("dq") is not None else "sq"
        if html.unescape(attr.group(group)) == finding.context:
            yield Edit(attr.start(group), attr.end(group), erb_output(key))


def _scripting_literal_edits(content: str, finding: Finding, key: str) -> Iterator[Edit]:
    for directive in ERB_DIRECTIVE_RE.finditer(content):
        if directive.group("flag") == "#":
            continue
        code = directive.group("code")
        if is_translation_code(code):
            continue
        base = directive.start("code")
        for start, end, _delim, body in iter_quoted_literals(code):
            if unescape(body) == finding.context:
                yield Edit(base + start, base + end, f't("{key}")')


def _script_block_edits(content: str, finding: Finding, key: str) -> Iterator[Edit]:
    template = finding.kind == FindingKind.SCRIPT_TEMPLATE_LITERAL
    for element in SCRIPT_ELEMENT_RE.finditer(content):
        base = element.start("body")
        for start, end, delim, body in iter_script_literal_spans(element.group("body")):
            if template != (delim == "`"):
                continue
            value = body if template else unescape(body)
            if value == finding.context:
                # Keep the delimiters, swap the literal's contents
                yield Edit(base + start + 1, base + end - 1, f'<%= j t("{key}") %>')


def candidate_edits(content: str, finding: Finding, key: str) -> Iterator[Edit]:
    """Yield the spans of content where finding could be replaced, in order.

    Raises:
        ReplacementMissError: For kinds that are never replaced.
    """
    if finding.kind == FindingKind.TEXT_NODE:
        return _text_node_edits(content, finding, key)
    if finding.kind == FindingKind.ATTRIBUTE:
        return _attribute_edits(content, finding, key)
    if finding.kind == FindingKind.SCRIPT_LITERAL and finding.source == SCRIPTING_SOURCE:
        return _scripting_literal_edits(content, finding, key)
    if finding.source == SCRIPT_SOURCE and finding.kind in (
        FindingKind.SCRIPT_LITERAL,
        FindingKind.SCRIPT_TEMPLATE_LITERAL,
    ):
        return _script_block_edits(content, finding, key)
    raise ReplacementMissError(f"{finding.kind} findings are not replaceable")


def elided_spans(content: str, include_scripts: bool = True) -> list[Edit]:
    """Regions of content the HTML parser never saw as markup text.

    ERB comments, ERB directives and HTML comments, plus <script> bodies
    when include_scripts is set. Replacements must not land inside them.
    """
    spans = [Edit(m.start(), m.end(), "") for m in ERB_COMMENT_RE.finditer(content)]
    spans.extend(Edit(m.start(), m.end(), "") for m in ERB_DIRECTIVE_RE.finditer(content))
    spans.extend(Edit(m.start(), m.end(), "") for m in HTML_COMMENT_RE.finditer(content))
    if include_scripts:
        spans.extend(
            Edit(m.start("body"), m.end("body"), "") for m in SCRIPT_ELEMENT_RE.finditer(content)
        )
    return spans


def _blocked_for(finding: Finding, markup_blocked: list[Edit], script_blocked: list[Edit]) -> list[Edit]:
    if finding.kind in (FindingKind.TEXT_NODE, FindingKind.ATTRIBUTE):
        return markup_blocked
    if finding.source == SCRIPT_SOURCE:
        return script_blocked
    # Scripting literals live inside directives by definition
    return []


def locate_edit(
    content: str,
    finding: Finding,
    key: str,
    claimed: list[Edit],
    blocked: list[Edit] | None = None,
) -> Edit:
    """First span for finding that overlaps neither a claimed edit nor a blocked region.

    Raises:
        ReplacementMissError: If no such span exists.
    """
    taken = [*claimed, *(blocked or [])]
    for edit in candidate_edits(content, finding, key):
        if not any(edit.overlaps(other) for other in taken):
            return edit
    raise ReplacementMissError(f"{finding.text!r} not found in template content")


def apply_edits(content: str, edits: list[Edit]) -> str:
    """Apply non-overlapping edits, last span first."""
    for edit in sorted(edits, key=lambda e: e.start, reverse=True):
        content = content[: edit.start] + edit.replacement + content[edit.end :]
    return content


def plan_replacements(
    content: str,
    findings: list[Finding],
    namespace: str | None = None,
) -> tuple[str, list[Replacement]]:
    """Generate keys for findings and rewrite content.

    Args:
        content: Original template content.
        findings: Deduplicated findings, in processing order.
        namespace: Optional key prefix.

    Returns:
        (new content, one Replacement per finding).
    """
    markup_blocked = elided_spans(content)
    script_blocked = elided_spans(content, include_scripts=False)
    claimed: list[Edit] = []
    replacements: list[Replacement] = []
    for index, finding in enumerate(findings):
        key = generate_key(finding.text, finding.kind, namespace, index)
        blocked = _blocked_for(finding, markup_blocked, script_blocked)
        try:
            edit = locate_edit(content, finding, key, claimed, blocked)
        except ReplacementMissError as e:
            logger.debug("  not replaced: %s", e)
            replacements.append(
                Replacement(
                    key=key,
                    text=finding.text,
                    kind=finding.kind,
                    line=finding.line,
                    replaced=False,
                    reason=str(e),
                )
            )
            continue
        claimed.append(edit)
        replacements.append(
            Replacement(key=key, text=finding.text, kind=finding.kind, line=finding.line, replaced=True)
        )
    return apply_edits(content, claimed), replacements


def backup_path(template: Path) -> Path:
    return template.with_name(template.name + BACKUP_SUFFIX)


def exchange_text_for_placeholders(
    path: str | os.PathLike[str],
    config: I18nConfig | None = None,
    parser: Any = None,
) -> ExchangeResult:
    """Replace hardcoded text in a template with t() lookups.

    Keys for replaced findings are written into the locale file under
    config.locale. With config.dry_run nothing is written, but the
    result is identical to a live run.

    Args:
        path: Template file.
        config: Options; defaults to I18nConfig().
        parser: Markup parser; built from config.parser_features when None.

    Returns:
        ExchangeResult with counts, staged keys and per-finding outcomes.

    Raises:
        InvalidArgumentError: If path is invalid.
        MissingCapabilityError: If no usable markup parser is available.
    """
    config = config or I18nConfig()
    template = validate_path(path)
    parser = ensure_parser(parser, config.parser_features)

    with log_operation("exchange", {"path": template, "dry_run": config.dry_run}):
        content = read_template(template)
        findings = find_findings(content, config, parser)
        new_content, replacements = plan_replacements(content, findings, config.namespace)

        keys: dict[str, str] = {}
        for replacement in replacements:
            if replacement.replaced:
                keys[replacement.key] = replacement.text
        replaced_count = sum(1 for r in replacements if r.replaced)

        if not config.dry_run and replaced_count:
            if config.backup:
                shutil.copy2(template, backup_path(template))
            template.write_text(new_content, encoding="utf-8")

            tree = load_locale_tree(config.locale_path)
            for key, text in keys.items():
                set_nested_key(tree, key, text, config.locale)
            save_locale_tree(tree, config.locale_path)
            logger.info("  wrote %d keys to %s", len(keys), config.locale_path)

    return ExchangeResult(
        path=str(template),
        replaced_count=replaced_count,
        added_key_count=len(keys),
        keys=keys,
        replacements=replacements,
        dry_run=config.dry_run,
    )
