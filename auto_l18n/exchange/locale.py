"""Locale tree staging and YAML persistence.

A locale tree is keyed by locale code, then by key segments:
{"en": {"views": {"posts": {"click_here": "Click here!"}}}}
"""

from pathlib import Path
from typing import Any

import yaml

from auto_l18n.logging import logger


def load_locale_tree(path: str | Path) -> dict[str, Any]:
    """Read a locale YAML file.

    Args:
        path: Locale file.

    Returns:
        The parsed tree; {} when the file is missing or empty.
    """
    locale_file = Path(path)
    if not locale_file.exists():
        return {}
    with locale_file.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("  %s does not contain a mapping; starting from an empty tree", locale_file)
        return {}
    return data


def save_locale_tree(tree: dict[str, Any], path: str | Path) -> None:
    """Write a locale tree as YAML, creating parent directories.

    Args:
        tree: Locale tree.
        path: Destination file.
    """
    locale_file = Path(path)
    locale_file.parent.mkdir(parents=True, exist_ok=True)
    with locale_file.open("w", encoding="utf-8") as f:
        yaml.safe_dump(
            tree,
            f,
            allow_unicode=True,
            sort_keys=False,
            default_flow_style=False,
        )


def set_nested_key(tree: dict[str, Any], dotted_key: str, value: str, locale: str) -> None:
    """Set tree[locale][a][b][c] = value for dotted_key "a.b.c".

    Intermediate mappings are created on demand and reused when present.
    A leaf already at the path is overwritten.

    Args:
        tree: Locale tree, mutated in place.
        dotted_key: Key path.
        value: Leaf value.
        locale: Top-level locale code.
    """
    node = tree.get(locale)
    if not isinstance(node, dict):
        node = tree[locale] = {}

    *parents, leaf = dotted_key.split(".")
    for segment in parents:
        child = node.get(segment)
        if not isinstance(child, dict):
            if child is not None:
                logger.warning("  Replacing value at %r with a nested mapping", segment)
            child = node[segment] = {}
        node = child
    node[leaf] = value


def get_nested_key(tree: dict[str, Any], dotted_key: str, locale: str) -> Any:
    """Read tree[locale] by dotted path, None if any segment is missing."""
    node: Any = tree.get(locale)
    for segment in dotted_key.split("."):
        if not isinstance(node, dict) or segment not in node:
            return None
        node = node[segment]
    return node
