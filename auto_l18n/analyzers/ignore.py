"""Directory filtering for batch runs over template trees.

Configuration:
    - DEFAULT_IGNORES: Directories never scanned (node_modules, .git, ...)
    - .autol18nignore: Per-project additions using gitignore-style names
"""

import fnmatch
from pathlib import Path

from auto_l18n.logging import logger

# Universal ignore patterns - always excluded
DEFAULT_IGNORES: frozenset[str] = frozenset({
    # Version control
    ".git",
    ".svn",
    ".hg",
    # Dependencies
    "node_modules",
    "vendor",
    "bower_components",
    # Rails build and runtime output
    "tmp",
    "log",
    "public",
    "coverage",
    # Caches
    "__pycache__",
    ".bundle",
    ".sass-cache",
    # IDE
    ".idea",
    ".vscode",
})

IGNORE_FILENAME = ".autol18nignore"


def parse_ignore_file(root: Path) -> set[str]:
    """Parse .autol18nignore if it exists.

    Supports gitignore-style syntax:
    - Lines starting with # are comments
    - Empty lines are ignored
    - Patterns are directory/file names or glob patterns
    - Lines starting with ! are negations (not supported, skipped)

    Args:
        root: Directory being processed.

    Returns:
        Set of patterns from the ignore file, empty if it doesn't exist.
    """
    ignore_file = root / IGNORE_FILENAME
    if not ignore_file.exists():
        return set()

    patterns: set[str] = set()
    try:
        content = ignore_file.read_text(encoding="utf-8")
        for line in content.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("!"):
                logger.debug("  Negation patterns not supported: %s", line)
                continue
            patterns.add(line.rstrip("/"))
    except OSError as e:
        logger.warning("  Failed to read %s: %s", ignore_file, e)

    return patterns


def load_ignore_patterns(root: Path) -> set[str]:
    """Default ignores plus the project's .autol18nignore entries.

    Args:
        root: Directory being processed.

    Returns:
        Combined set of ignore patterns.
    """
    patterns = set(DEFAULT_IGNORES)
    custom = parse_ignore_file(root)
    if custom:
        patterns.update(custom)
        logger.debug("  Loaded %d patterns from %s", len(custom), IGNORE_FILENAME)
    return patterns


def should_ignore(path: Path, root: Path, patterns: set[str]) -> bool:
    """Check if a path under root should be skipped.

    Each component of the path relative to root is matched against the
    patterns, either exactly or as a glob.

    Args:
        path: Path to check.
        root: Directory being processed.
        patterns: Set of ignore patterns.

    Returns:
        True if path should be ignored.
    """
    try:
        rel_path = path.relative_to(root)
    except ValueError:
        # Outside the processed directory
        return True

    for part in rel_path.parts:
        if part in patterns:
            return True
        if any(fnmatch.fnmatch(part, p) for p in patterns):
            return True
    return False
