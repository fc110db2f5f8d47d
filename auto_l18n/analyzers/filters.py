"""Candidate filtering: decide whether a string is human-facing text.

Every candidate produced by the pre-processor or the structural extractor
goes through admit(). The rules are precision-biased: replacing text is
destructive to templates, so anything that looks like code, paths,
interpolation or leaked placeholders is rejected.
"""

import re

from auto_l18n.analyzers.line_index import LineIndex
from auto_l18n.logging import logger
from auto_l18n.models.findings import Finding, FindingKind, I18nConfig

# Reserved glyphs wrapping every placeholder token the pre-processor emits.
PLACEHOLDER_OPEN = "⟦"
PLACEHOLDER_CLOSE = "⟧"

INTERPOLATION_MARKERS = ("#{", "%{")

_WHITESPACE_RE = re.compile(r"\s+")
_HAS_WORD_CHAR_RE = re.compile(r"[^\W_]")
_PATH_RE = re.compile(r"^(?:\.{1,2}/|/)?[\w.-]+(?:/[\w.-]+)+/?$")
_OPERATOR_RE = re.compile(r"===|==|!=|<=|>=|=>|->|&&|\|\||\+=|-=")
_FUNCTION_DECL_RE = re.compile(
    r"\bfunction\s*[\w$]*\s*\(|\bdef\s+[A-Za-z_]\w*|[\w$]+\s*\([^()]*\)\s*\{"
)
_VARIABLE_DECL_RE = re.compile(r"\b(?:var|let|const)\s+[A-Za-z_$][\w$]*")

_QUOTE_MAP = str.maketrans({
    "‘": "'",
    "’": "'",
    "‚": "'",
    "‛": "'",
    "“": '"',
    "”": '"',
    "„": '"',
    "‟": '"',
})

# Tailwind-style utility prefixes (used only when skip_css_like is set)
_CSS_UTILITY_PREFIXES = frozenset({
    "flex", "grid", "block", "inline", "hidden",
    "items-", "justify-", "content-", "self-",
    "px-", "py-", "mx-", "my-", "p-", "m-", "w-", "h-", "min-", "max-",
    "text-", "font-", "leading-", "tracking-",
    "bg-", "border-", "rounded-", "shadow-",
    "space-", "gap-", "divide-",
    "btn", "col-", "row", "container",
    "hover:", "focus:", "active:", "disabled:",
    "sm:", "md:", "lg:", "xl:", "2xl:",
})


def normalize_whitespace(value: str) -> str:
    """Collapse whitespace runs to a single space and strip the ends."""
    return _WHITESPACE_RE.sub(" ", value).strip()


def normalize_quotes(value: str) -> str:
    """Replace curly quotes with their straight equivalents."""
    return value.translate(_QUOTE_MAP)


def has_placeholder(value: str) -> bool:
    """Check whether a placeholder glyph leaked into the string."""
    return PLACEHOLDER_OPEN in value or PLACEHOLDER_CLOSE in value


def is_punctuation_only(value: str) -> bool:
    """True if the string has no letters or digits at all."""
    return _HAS_WORD_CHAR_RE.search(value) is None


def has_interpolation(value: str) -> bool:
    """True for embedded-expression syntax like #{name} or %{count}."""
    return any(marker in value for marker in INTERPOLATION_MARKERS)


def is_braced_template(value: str) -> bool:
    """True when the string carries at least two '{' and two '}'."""
    return value.count("{") >= 2 and value.count("}") >= 2


def is_path_like(value: str) -> bool:
    """Check if string looks like a file path or URL path.

    Args:
        value: Normalized string.

    Returns:
        True for shapes like 'images/logo.png', './partials/nav', '/users/new'.
    """
    return _PATH_RE.match(value) is not None


def is_code_like(value: str) -> bool:
    """Check if string looks like leaked code rather than prose.

    Args:
        value: Normalized string.

    Returns:
        True if it contains operator clusters, a function declaration
        shape, or a variable declaration.
    """
    if _OPERATOR_RE.search(value):
        return True
    if _FUNCTION_DECL_RE.search(value):
        return True
    return _VARIABLE_DECL_RE.search(value) is not None


def is_css_class(value: str) -> bool:
    """Check if string looks like a CSS class list (especially Tailwind).

    Args:
        value: String to check.

    Returns:
        True if the string appears to be CSS classes.
    """
    lowered = value.lower()

    # Single utility class (e.g., "animate-spin", "font-medium")
    if " " not in value:
        if "-" in value and not value.startswith(("/", "@", ".")):
            return any(lowered.startswith(p) for p in _CSS_UTILITY_PREFIXES)
        return False

    # Multiple classes (e.g., "flex items-center gap-2")
    parts = lowered.split()
    matches = sum(1 for part in parts if any(part.startswith(p) for p in _CSS_UTILITY_PREFIXES))
    return matches > len(parts) * 0.5


def rejection_reason(normalized: str, config: I18nConfig) -> str | None:
    """Run the rejection rules against an already-normalized candidate.

    Args:
        normalized: Whitespace-normalized candidate.
        config: Active configuration.

    Returns:
        Short reason string if rejected, None if the candidate is admitted.
    """
    if not normalized:
        return "empty"
    if len(normalized) < config.min_length:
        return "too short"
    if has_placeholder(normalized):
        return "placeholder"
    if any(p.search(normalized) for p in config.compiled_ignore_patterns()):
        return "ignored"
    if is_punctuation_only(normalized):
        return "punctuation"
    if has_interpolation(normalized):
        return "interpolation"
    if is_braced_template(normalized):
        return "braces"
    if is_path_like(normalized):
        return "path"
    if is_code_like(normalized):
        return "code"
    if config.skip_css_like and is_css_class(normalized):
        return "css"
    return None


def admit(
    raw: str | None,
    kind: FindingKind,
    source: str,
    position: int | None,
    config: I18nConfig,
    line_index: LineIndex | None = None,
) -> Finding | None:
    """Decide whether a raw candidate is human-facing text.

    Args:
        raw: Candidate string as found in the template (may be None).
        kind: Origin classification.
        source: Human-readable provenance.
        position: Character offset in the raw file, or None if unknown.
        config: Active configuration.
        line_index: Index used to turn position into a line number.

    Returns:
        A Finding when admitted, None when rejected.
    """
    if raw is None:
        return None

    normalized = normalize_whitespace(raw)
    reason = rejection_reason(normalized, config)
    if reason is not None:
        if normalized:
            logger.debug("  rejected %s %r from %s: %s", kind, normalized[:60], source, reason)
        return None

    line = None
    if position is not None:
        line = line_index.line_for(position) if line_index is not None else 1

    return Finding(
        text=normalize_quotes(normalized),
        kind=kind,
        source=source,
        line=line,
        context=raw,
    )
