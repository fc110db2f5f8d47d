"""Lexical pre-processing of ERB templates before HTML parsing.

ERB directives (<% %>, <%= %>, <%# %>) are not valid markup. This module
pulls string literals out of directive code, then replaces every directive
with a placeholder token so the HTML parser sees only markup while text
around the directives keeps its whitespace.

Placeholder tokens are wrapped in reserved glyphs (see filters.PLACEHOLDER_OPEN)
so any candidate that picks one up is rejected later.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from auto_l18n.analyzers.filters import PLACEHOLDER_CLOSE, PLACEHOLDER_OPEN, admit
from auto_l18n.analyzers.line_index import LineIndex
from auto_l18n.models.findings import Finding, FindingKind, I18nConfig

COMMENT_TOKEN = f"{PLACEHOLDER_OPEN}ERB_COMMENT{PLACEHOLDER_CLOSE}"
TRANSLATED_TOKEN = f"{PLACEHOLDER_OPEN}I18N{PLACEHOLDER_CLOSE}"
DIRECTIVE_TOKEN = f"{PLACEHOLDER_OPEN}ERB{PLACEHOLDER_CLOSE}"

SCRIPTING_SOURCE = "scripting block"

# <%# ... %> comments
ERB_COMMENT_RE = re.compile(r"<%#.*?%>", re.DOTALL)

# Any directive; group "code" is the inner code. <%% is an escaped literal.
ERB_DIRECTIVE_RE = re.compile(r"<%(?!%)(?P<flag>[=\-#]?)(?P<code>.*?)-?%>", re.DOTALL)

# A translation call anywhere in the code: t("a"), translate(:b), I18n.t "c"
TRANSLATION_CALL_RE = re.compile(
    r"(?<![\w.@$:])(?:I18n\s*\.\s*)?(?:t|translate)(?:\s*\(|\s+(?=[\"':]))"
)

# Code that *is* a translation call, optionally piped through a helper like raw/j
TRANSLATION_DIRECTIVE_RE = re.compile(
    r"^\s*(?:(?:raw|j|escape_javascript|h|html_escape|sanitize)\s*\(?\s*)?"
    r"(?:I18n\s*\.\s*)?(?:t|translate)(?:\s*\(|\s+[\"':])"
)

# Double- or single-quoted literal with backslash escapes
QUOTED_LITERAL_RE = re.compile(
    r'"(?P<dq>(?:[^"\\]|\\.)*)"|\'(?P<sq>(?:[^\'\\]|\\.)*)\'',
    re.DOTALL,
)

HTML_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


@dataclass
class PreprocessResult:
    """Markup-only view of a template plus literals found in directive code."""

    markup: str
    findings: list[Finding] = field(default_factory=list)


def unescape(value: str) -> str:
    """Resolve backslash escape sequences in a quoted literal body."""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), value)


def iter_quoted_literals(code: str) -> Iterator[tuple[int, int, str, str]]:
    """Yield (start, end, delimiter, body) for each quoted literal in code."""
    for match in QUOTED_LITERAL_RE.finditer(code):
        if match.group("dq") is not None:
            yield match.start(), match.end(), '"', match.group("dq")
        else:
            yield match.start(), match.end(), "'", match.group("sq")


def is_translation_code(code: str) -> bool:
    """True if the directive code contains a translation call."""
    return TRANSLATION_CALL_RE.search(code) is not None


def is_translation_directive(code: str) -> bool:
    """True if the directive code is itself a translation call."""
    return TRANSLATION_DIRECTIVE_RE.match(code) is not None


def extract_scripting_literals(
    content: str,
    config: I18nConfig,
    line_index: LineIndex | None = None,
) -> list[Finding]:
    """Collect string literals from ERB directive code.

    Directives containing a translation call are skipped, they are already
    internationalized. Each literal is positioned at the opening marker of
    its own directive rather than the first directive in the file, so every
    literal in a directive shares that directive's line. Offsets of
    individual literals within the directive are not tracked.

    Args:
        content: Raw template content.
        config: Active configuration.
        line_index: Line index over content.

    Returns:
        Admitted findings of kind script_literal.
    """
    findings: list[Finding] = []
    for directive in ERB_DIRECTIVE_RE.finditer(content):
        if directive.group("flag") == "#":
            continue
        code = directive.group("code")
        if is_translation_code(code):
            continue
        for _start, _end, _delim, body in iter_quoted_literals(code):
            finding = admit(
                unescape(body),
                FindingKind.SCRIPT_LITERAL,
                SCRIPTING_SOURCE,
                directive.start(),
                config,
                line_index,
            )
            if finding is not None:
                findings.append(finding)
    return findings


def _elide_directive(match: re.Match[str]) -> str:
    if is_translation_directive(match.group("code")):
        return TRANSLATED_TOKEN
    return DIRECTIVE_TOKEN


def strip_directives(content: str) -> str:
    """Replace ERB comments, translation calls, other directives and HTML comments.

    Args:
        content: Raw template content.

    Returns:
        Markup-only text ready for the HTML parser.
    """
    markup = ERB_COMMENT_RE.sub(COMMENT_TOKEN, content)
    markup = ERB_DIRECTIVE_RE.sub(_elide_directive, markup)
    return HTML_COMMENT_RE.sub(" ", markup)


def preprocess(
    content: str,
    config: I18nConfig,
    line_index: LineIndex | None = None,
) -> PreprocessResult:
    """Run literal extraction (when enabled) and directive elision.

    Args:
        content: Raw template content.
        config: Active configuration.
        line_index: Line index over content.

    Returns:
        PreprocessResult with the markup-only text and scripting findings.
    """
    findings: list[Finding] = []
    if config.scan_script_code:
        findings = extract_scripting_literals(content, config, line_index)
    return PreprocessResult(markup=strip_directives(content), findings=findings)
