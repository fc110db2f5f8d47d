"""Data models for text findings, configuration and exchange results.

Pydantic models so results serialize straight to JSON for the CLI.
"""

import os
import re
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

DEFAULT_LOCALE = "en"
DEFAULT_LOCALE_PATH = "config/locales/en.yml"
DEFAULT_FILE_PATTERN = "*.html.erb"


class FindingKind(StrEnum):
    """Where a candidate string came from; drives the replacement strategy."""

    SCRIPT_LITERAL = "script_literal"
    TEXT_NODE = "text_node"
    ATTRIBUTE = "attribute"
    SCRIPT_TEMPLATE_LITERAL = "script_template_literal"
    DATA_ATTRIBUTE_STRING = "data_attribute_string"


class Finding(BaseModel):
    """One hardcoded, human-visible string found in a template."""

    text: str = Field(description="Normalized text (whitespace collapsed, straight quotes)")
    kind: FindingKind = Field(description="Origin classification")
    source: str = Field(description="Provenance, e.g. 'img[alt]' or 'script block'")
    line: int | None = Field(
        default=None, description="Best-effort 1-based line number, None if unknown"
    )
    context: str = Field(description="Original text before normalization")

    model_config = {"frozen": True}


def _env_locale() -> str:
    return os.getenv("AUTO_L18N_LOCALE", DEFAULT_LOCALE)


def _env_locale_path() -> str:
    return os.getenv("AUTO_L18N_LOCALE_PATH", DEFAULT_LOCALE_PATH)


class I18nConfig(BaseModel):
    """Options for finding and exchanging hardcoded text.

    The filter-related fields (min_length, ignore_patterns, extra_attrs,
    scan_script_code, scan_embedded_scripts) govern which candidates are
    admitted; the rest control the exchange and batch stages.
    """

    structured: bool = Field(default=True, description="Return Finding records instead of plain strings")
    min_length: int = Field(default=2, ge=1, description="Minimum normalized text length")
    ignore_patterns: list[str] = Field(
        default_factory=list, description="Regexes; matching candidates are rejected"
    )
    extra_attrs: list[str] = Field(
        default_factory=list, description="Attribute names to extract in addition to the standard set"
    )
    scan_script_code: bool = Field(default=True, description="Extract literals from <% %> code")
    scan_embedded_scripts: bool = Field(default=True, description="Extract literals from <script> blocks")
    locale_path: str = Field(default_factory=_env_locale_path, description="Locale YAML file")
    locale: str = Field(default_factory=_env_locale, description="Top-level locale code")
    namespace: str | None = Field(default=None, description="Dotted prefix for generated keys")
    dry_run: bool = Field(default=False, description="Compute everything, write nothing")
    backup: bool = Field(default=True, description="Write <file>.bak before modifying a template")
    recursive: bool = Field(default=False, description="Descend into subdirectories in batch mode")
    file_pattern: str = Field(default=DEFAULT_FILE_PATTERN, description="Glob for batch mode")
    parser_features: str = Field(default="html.parser", description="BeautifulSoup tree builder")
    data_attr_prefix: str = Field(default="data-", description="Prefix of JSON-valued attributes")
    skip_css_like: bool = Field(default=False, description="Reject CSS utility-class lists")
    namespace_from_path: bool = Field(
        default=False, description="Derive the namespace from each file's relative path in batch mode"
    )

    @field_validator("ignore_patterns")
    @classmethod
    def _check_patterns(cls, value: list[str]) -> list[str]:
        for pattern in value:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid ignore pattern {pattern!r}: {e}") from e
        return value

    def compiled_ignore_patterns(self) -> list[re.Pattern[str]]:
        """Compile ignore_patterns (validated at construction)."""
        return [re.compile(p) for p in self.ignore_patterns]


class Replacement(BaseModel):
    """Outcome of exchanging one finding for a translation lookup."""

    key: str = Field(description="Generated translation key")
    text: str = Field(description="Finding text stored in the locale file")
    kind: FindingKind
    line: int | None = None
    replaced: bool = Field(description="Whether the template was rewritten for this finding")
    reason: str | None = Field(default=None, description="Why the finding was not replaced")


class ExchangeResult(BaseModel):
    """Result of exchanging hardcoded text in a single template."""

    path: str = Field(description="Template file that was processed")
    replaced_count: int = Field(default=0, description="Findings rewritten to t() lookups")
    added_key_count: int = Field(default=0, description="Distinct keys staged into the locale tree")
    keys: dict[str, str] = Field(default_factory=dict, description="Staged key -> text")
    replacements: list[Replacement] = Field(default_factory=list)
    dry_run: bool = False


class BatchResult(BaseModel):
    """Aggregated result of auto-internationalizing a file or directory."""

    files_processed: int = 0
    total_replaced: int = 0
    total_keys: int = 0
    files: list[ExchangeResult] = Field(default_factory=list, description="Per-file details")
