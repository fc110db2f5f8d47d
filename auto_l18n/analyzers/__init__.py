"""Analyzers that locate hardcoded text in ERB templates."""

from auto_l18n.analyzers.extractor import (
    DATA_MARKER_ATTRS,
    STANDARD_ATTRS,
    MarkupParser,
    MissingCapabilityError,
    extract,
    get_markup_parser,
)
from auto_l18n.analyzers.filters import (
    PLACEHOLDER_CLOSE,
    PLACEHOLDER_OPEN,
    admit,
    normalize_whitespace,
)
from auto_l18n.analyzers.finder import (
    InvalidArgumentError,
    dedupe,
    find_text,
)
from auto_l18n.analyzers.ignore import (
    DEFAULT_IGNORES,
    load_ignore_patterns,
    should_ignore,
)
from auto_l18n.analyzers.line_index import LineIndex
from auto_l18n.analyzers.preprocess import PreprocessResult, preprocess

__all__ = [
    "DATA_MARKER_ATTRS",
    "DEFAULT_IGNORES",
    "PLACEHOLDER_CLOSE",
    "PLACEHOLDER_OPEN",
    "STANDARD_ATTRS",
    "InvalidArgumentError",
    "LineIndex",
    "MarkupParser",
    "MissingCapabilityError",
    "PreprocessResult",
    "admit",
    "dedupe",
    "extract",
    "find_text",
    "get_markup_parser",
    "load_ignore_patterns",
    "normalize_whitespace",
    "preprocess",
    "should_ignore",
]
