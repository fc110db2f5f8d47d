"""Translation key generation."""

import re
from pathlib import Path

MAX_KEY_LENGTH = 50
MIN_KEY_LENGTH = 3

_DISALLOWED_RE = re.compile(r"[^\w\s-]|_")
_WHITESPACE_RE = re.compile(r"\s+")
_UNDERSCORES_RE = re.compile(r"_{2,}")
_NAMESPACE_SEGMENT_RE = re.compile(r"[^\w-]+")


def key_base(text: str) -> str:
    """Slug used as the last key segment.

    Lowercases, keeps only letters, digits, whitespace and hyphens, turns
    whitespace into underscores and truncates to MAX_KEY_LENGTH.
    """
    base = _DISALLOWED_RE.sub("", text.lower())
    base = _WHITESPACE_RE.sub("_", base)
    base = _UNDERSCORES_RE.sub("_", base).strip("_")
    return base[:MAX_KEY_LENGTH]


def generate_key(
    text: str,
    kind: str,
    namespace: str | None = None,
    index: int = 0,
) -> str:
    """Derive a translation key for a finding.

    Args:
        text: Normalized finding text.
        kind: Finding kind (kept for callers that key by kind; not part of
            the key).
        namespace: Optional dotted prefix, e.g. "views.posts".
        index: Position of the finding in processing order; used for the
            fallback key when the text yields no usable slug.

    Returns:
        Dotted key such as "views.posts.click_here" or "text_3".

    Example:
        >>> generate_key("Click here!", "text_node", "views.posts", 0)
        'views.posts.click_here'
    """
    base = key_base(text)
    if len(base) < MIN_KEY_LENGTH:
        base = f"text_{index}"
    if namespace:
        return f"{namespace}.{base}"
    return base


def namespace_for(path: Path, root: Path) -> str | None:
    """Dotted namespace from a template's location under root.

    Args:
        path: Template file.
        root: Directory the batch run started from.

    Returns:
        e.g. "posts.index" for root/posts/index.html.erb, or None when the
        path is not under root.
    """
    try:
        rel_path = path.relative_to(root)
    except ValueError:
        return None
    stem = rel_path.name.split(".", 1)[0].lstrip("_")
    segments = [*rel_path.parent.parts, stem]
    cleaned = [_NAMESPACE_SEGMENT_RE.sub("_", s).strip("_").lower() for s in segments]
    cleaned = [s for s in cleaned if s]
    return ".".join(cleaned) or None
