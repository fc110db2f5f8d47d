"""Key generation, locale staging and in-place template rewriting."""

from auto_l18n.exchange.batch import auto_internationalize, collect_templates
from auto_l18n.exchange.keys import generate_key, namespace_for
from auto_l18n.exchange.locale import (
    get_nested_key,
    load_locale_tree,
    save_locale_tree,
    set_nested_key,
)
from auto_l18n.exchange.replacer import (
    ReplacementMissError,
    exchange_text_for_placeholders,
    plan_replacements,
)

__all__ = [
    "ReplacementMissError",
    "auto_internationalize",
    "collect_templates",
    "exchange_text_for_placeholders",
    "generate_key",
    "get_nested_key",
    "load_locale_tree",
    "namespace_for",
    "plan_replacements",
    "save_locale_tree",
    "set_nested_key",
]
