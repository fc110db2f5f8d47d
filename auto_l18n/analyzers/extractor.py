"""Structural extraction of candidate text from parsed template markup.

Walks a BeautifulSoup tree built from the pre-processed markup and collects:
- visible text nodes
- human-facing attributes (alt, title, placeholder, aria-*, label, value)
- string and template literals inside <script> blocks
- strings inside JSON-valued data-* attributes

Every candidate is routed through filters.admit(); nothing here validates text.
"""

import json
import re
from collections.abc import Iterator
from typing import Any

from bs4 import BeautifulSoup, FeatureNotFound, NavigableString, Tag
from bs4.element import PreformattedString

from auto_l18n.analyzers.filters import admit
from auto_l18n.analyzers.line_index import LineIndex
from auto_l18n.analyzers.preprocess import unescape
from auto_l18n.logging import logger
from auto_l18n.models.findings import Finding, FindingKind, I18nConfig

STANDARD_ATTRS = (
    "alt",
    "title",
    "placeholder",
    "aria-label",
    "aria-placeholder",
    "aria-description",
    "label",
)

VALUE_ATTR = "value"

# Containers whose text is never visible copy
SKIP_CONTAINERS = frozenset({"script", "style", "template"})

HIDDEN_ATTR = "hidden"

# Attributes signalling that an element carries JSON in its data-* attributes
DATA_MARKER_ATTRS = (
    "data-controller",
    "data-props",
    "data-react-props",
    "data-react-class",
    "data-component",
    "data-json",
)

SCRIPT_SOURCE = "script block"

# JavaScript string literals: "double", 'single' and `template`
SCRIPT_LITERAL_RE = re.compile(
    r'"(?P<dq>(?:[^"\\\n]|\\.)*)"'
    r"|'(?P<sq>(?:[^'\\\n]|\\.)*)'"
    r"|`(?P<bt>(?:[^`\\]|\\.)*)`",
    re.DOTALL,
)


class MissingCapabilityError(RuntimeError):
    """Raised when the markup parser required for extraction is unavailable."""


class MarkupParser:
    """HTML fragment parser backed by BeautifulSoup.

    Args:
        features: Tree builder name ("html.parser", "lxml", "html5lib").
    """

    def __init__(self, features: str = "html.parser") -> None:
        self.features = features

    def parse(self, markup: str) -> BeautifulSoup:
        """Parse markup into a navigable tree."""
        return BeautifulSoup(markup, self.features)


def get_markup_parser(features: str = "html.parser") -> MarkupParser:
    """Return a parser for the requested tree builder.

    Args:
        features: BeautifulSoup tree builder name.

    Returns:
        A MarkupParser that is known to work in this environment.

    Raises:
        MissingCapabilityError: If the tree builder is not installed.
    """
    parser = MarkupParser(features)
    try:
        parser.parse("")
    except FeatureNotFound as e:
        raise MissingCapabilityError(
            f"HTML tree builder '{features}' is not available. "
            "Install it (e.g. `pip install lxml`) or use 'html.parser'."
        ) from e
    return parser


def ensure_parser(parser: Any, features: str = "html.parser") -> Any:
    """Validate an injected parser, or build the default one.

    Args:
        parser: Object with a callable parse(markup) method, or None.
        features: Tree builder to use when parser is None.

    Returns:
        A usable parser.

    Raises:
        MissingCapabilityError: If parser has no callable parse().
    """
    if parser is None:
        return get_markup_parser(features)
    if not callable(getattr(parser, "parse", None)):
        raise MissingCapabilityError(
            f"Markup parser {type(parser).__name__} does not provide parse(markup)"
        )
    return parser


def extraction_attrs(config: I18nConfig) -> list[str]:
    """Standard attributes + value + configured extras, deduplicated in order."""
    names = [*STANDARD_ATTRS, VALUE_ATTR, *config.extra_attrs]
    return list(dict.fromkeys(name.lower() for name in names))


def locate(raw_text: str, needle: str) -> int | None:
    """Offset of the first occurrence of needle in the raw content.

    Best effort: duplicated strings all resolve to the first occurrence.
    """
    needle = needle.strip()
    if not needle:
        return None
    offset = raw_text.find(needle)
    return offset if offset >= 0 else None


def _attr_value(value: Any) -> str:
    # Multi-valued attributes (class, rel, ...) come back as lists
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def _in_skipped_container(node: NavigableString) -> bool:
    return any(parent.name in SKIP_CONTAINERS for parent in node.parents)


def extract_text_nodes(
    tree: BeautifulSoup,
    raw_text: str,
    line_index: LineIndex,
    config: I18nConfig,
) -> list[Finding]:
    """Collect visible text nodes."""
    findings: list[Finding] = []
    for node in tree.find_all(string=True):
        if isinstance(node, PreformattedString):
            continue
        if not node.strip():
            continue
        if _in_skipped_container(node):
            continue
        parent = node.parent
        if isinstance(parent, Tag) and parent.has_attr(HIDDEN_ATTR):
            continue

        text = str(node)
        parent_name = "document"
        if isinstance(parent, Tag) and parent.name != BeautifulSoup.ROOT_TAG_NAME:
            parent_name = parent.name
        finding = admit(
            text,
            FindingKind.TEXT_NODE,
            f"{parent_name} text",
            locate(raw_text, text),
            config,
            line_index,
        )
        if finding is not None:
            findings.append(finding)
    return findings


def extract_attributes(
    tree: BeautifulSoup,
    raw_text: str,
    line_index: LineIndex,
    config: I18nConfig,
) -> list[Finding]:
    """Collect human-facing attribute values."""
    names = extraction_attrs(config)
    findings: list[Finding] = []
    for element in tree.find_all(lambda tag: any(tag.has_attr(n) for n in names)):
        for name in names:
            if not element.has_attr(name):
                continue
            value = _attr_value(element[name])
            if name == VALUE_ATTR and len(value) < 2:
                continue
            finding = admit(
                value,
                FindingKind.ATTRIBUTE,
                f"{element.name}[{name}]",
                locate(raw_text, value),
                config,
                line_index,
            )
            if finding is not None:
                findings.append(finding)
    return findings


def iter_script_literal_spans(code: str) -> Iterator[tuple[int, int, str, str]]:
    """Yield (start, end, delimiter, body) for each JavaScript string literal.

    Double-quoted, single-quoted and backtick literals are scanned in a
    single left-to-right pass so quotes nested in another literal are not
    reported twice.
    """
    for match in SCRIPT_LITERAL_RE.finditer(code):
        for delim, group in (('"', "dq"), ("'", "sq"), ("`", "bt")):
            body = match.group(group)
            if body is not None:
                yield match.start(), match.end(), delim, body
                break


def iter_script_literals(code: str) -> Iterator[tuple[FindingKind, str]]:
    """Yield (kind, value) for quoted and backtick literals in JavaScript code.

    Quoted literals are unescaped; template literals are returned verbatim.
    """
    for _start, _end, delim, body in iter_script_literal_spans(code):
        if delim == "`":
            yield FindingKind.SCRIPT_TEMPLATE_LITERAL, body
        else:
            yield FindingKind.SCRIPT_LITERAL, unescape(body)


def extract_script_blocks(tree: BeautifulSoup, config: I18nConfig) -> list[Finding]:
    """Collect string literals from inline <script> elements."""
    findings: list[Finding] = []
    for script in tree.find_all("script"):
        code = "".join(str(child) for child in script.contents)
        for kind, value in iter_script_literals(code):
            finding = admit(value, kind, SCRIPT_SOURCE, None, config)
            if finding is not None:
                findings.append(finding)
    return findings


def collect_strings(value: Any) -> list[str]:
    """Recursively collect every string in a decoded JSON document.

    Object keys are not collected, only values.
    """
    if isinstance(value, str):
        return [value]
    if isinstance(value, dict):
        return [s for item in value.values() for s in collect_strings(item)]
    if isinstance(value, list):
        return [s for item in value for s in collect_strings(item)]
    return []


def extract_data_attributes(tree: BeautifulSoup, config: I18nConfig) -> list[Finding]:
    """Collect strings from JSON-valued data-* attributes on marked elements."""
    selector = ", ".join(f"[{name}]" for name in DATA_MARKER_ATTRS)
    findings: list[Finding] = []
    for element in tree.select(selector):
        for name, raw_value in element.attrs.items():
            if not name.startswith(config.data_attr_prefix):
                continue
            try:
                strings = collect_strings(json.loads(_attr_value(raw_value)))
            except (json.JSONDecodeError, RecursionError) as e:
                logger.debug("  skipped %s[%s]: %s", element.name, name, type(e).__name__)
                continue
            for value in strings:
                finding = admit(
                    value,
                    FindingKind.DATA_ATTRIBUTE_STRING,
                    f"{element.name}[{name}]",
                    None,
                    config,
                )
                if finding is not None:
                    findings.append(finding)
    return findings


def extract(
    tree: BeautifulSoup,
    raw_text: str,
    line_index: LineIndex,
    config: I18nConfig,
) -> list[Finding]:
    """Run every structural extraction pass over a parsed template.

    Args:
        tree: Parsed markup (from the pre-processed text).
        raw_text: Original file content, used to recover positions.
        line_index: Line index over raw_text.
        config: Active configuration.

    Returns:
        Findings in extraction order: text nodes, attributes, script
        blocks (when enabled), data attributes.
    """
    findings = extract_text_nodes(tree, raw_text, line_index, config)
    findings.extend(extract_attributes(tree, raw_text, line_index, config))
    if config.scan_embedded_scripts:
        findings.extend(extract_script_blocks(tree, config))
    findings.extend(extract_data_attributes(tree, config))
    logger.debug("  structural extraction produced %d findings", len(findings))
    return findings
