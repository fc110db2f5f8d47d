"""CLI interface for auto-l18n.

Provides commands to find hardcoded text in ERB templates and to exchange
it for translation lookups.
"""

import json
import sys
from collections.abc import Callable
from typing import Any

import click
from dotenv import load_dotenv
from pydantic import ValidationError

# Load .env before importing other auto_l18n modules
# This ensures env vars are set before module-level code reads them
load_dotenv()

from auto_l18n import __version__  # noqa: E402
from auto_l18n.models.findings import (  # noqa: E402
    DEFAULT_FILE_PATTERN,
    I18nConfig,
)


def _filter_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that extracts text."""
    options = [
        click.option("--min-length", type=int, default=2, help="Minimum text length (default: 2)"),
        click.option(
            "--ignore",
            "ignore_patterns",
            multiple=True,
            help="Regex of text to ignore. Can specify multiple.",
        ),
        click.option(
            "--attr",
            "extra_attrs",
            multiple=True,
            help="Extra attribute to extract. Can specify multiple.",
        ),
        click.option("--no-script-code", is_flag=True, help="Skip literals inside <% %> code"),
        click.option("--no-embedded-scripts", is_flag=True, help="Skip literals inside <script> blocks"),
        click.option("--skip-css-like", is_flag=True, help="Reject strings that look like CSS classes"),
        click.option(
            "--parser",
            "parser_features",
            default="html.parser",
            help="HTML tree builder: html.parser, lxml or html5lib (default: html.parser)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _exchange_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by exchange and auto."""
    options = [
        click.option("--locale-path", default=None, help="Locale YAML file (default: config/locales/en.yml)"),
        click.option("--locale", default=None, help="Locale code (default: en)"),
        click.option("--namespace", default=None, help="Dotted key prefix, e.g. views.posts"),
        click.option("--dry-run", is_flag=True, help="Report what would change without writing"),
        click.option("--no-backup", is_flag=True, help="Do not write <file>.bak before modifying"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_config(**kwargs: Any) -> I18nConfig:
    """Map CLI options onto I18nConfig, leaving unset options at their defaults."""
    values: dict[str, Any] = {
        "min_length": kwargs.pop("min_length"),
        "ignore_patterns": list(kwargs.pop("ignore_patterns")),
        "extra_attrs": list(kwargs.pop("extra_attrs")),
        "scan_script_code": not kwargs.pop("no_script_code"),
        "scan_embedded_scripts": not kwargs.pop("no_embedded_scripts"),
        "skip_css_like": kwargs.pop("skip_css_like"),
        "parser_features": kwargs.pop("parser_features"),
    }
    if "no_backup" in kwargs:
        values["backup"] = not kwargs.pop("no_backup")
    values.update({k: v for k, v in kwargs.items() if v is not None})
    try:
        return I18nConfig(**values)
    except ValidationError as e:
        click.echo(f"Invalid options: {e}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="auto-l18n")
def cli() -> None:
    """auto-l18n - move hardcoded template text into locale files."""
    pass


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@_filter_options
@click.option("--plain", is_flag=True, help="Print only the distinct texts")
def find(path: str, plain: bool, **options: Any) -> None:
    """Find hardcoded text in a template.

    PATH: Template file to scan.
    """
    from auto_l18n.analyzers.finder import find_text

    config = _build_config(structured=not plain, **options)
    try:
        found = find_text(path, config)
    except Exception as e:
        click.echo(f"Find failed: {e}", err=True)
        sys.exit(1)

    if plain:
        click.echo(json.dumps(found, indent=2, ensure_ascii=False))
    else:
        click.echo(json.dumps([f.model_dump(mode="json") for f in found], indent=2, ensure_ascii=False))


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@_filter_options
@_exchange_options
def exchange(path: str, **options: Any) -> None:
    """Replace hardcoded text in a template with t() lookups.

    PATH: Template file to rewrite.
    """
    from auto_l18n.exchange.replacer import exchange_text_for_placeholders

    config = _build_config(**options)
    try:
        result = exchange_text_for_placeholders(path, config)
    except Exception as e:
        click.echo(f"Exchange failed: {e}", err=True)
        sys.exit(1)

    if result.dry_run:
        click.echo(f"Dry run: {result.replaced_count} replacements, nothing written", err=True)
    click.echo(result.model_dump_json(indent=2))


@cli.command()
@click.argument("path", type=click.Path(exists=True, resolve_path=True))
@_filter_options
@_exchange_options
@click.option("--recursive", is_flag=True, help="Descend into subdirectories")
@click.option(
    "--pattern",
    "file_pattern",
    default=DEFAULT_FILE_PATTERN,
    help=f"Glob for template files (default: {DEFAULT_FILE_PATTERN})",
)
@click.option(
    "--namespace-from-path",
    is_flag=True,
    help="Derive each file's key namespace from its location",
)
def auto(path: str, **options: Any) -> None:
    """Internationalize a template or every template in a directory.

    PATH: Template file or directory.
    """
    from auto_l18n.exchange.batch import auto_internationalize

    config = _build_config(**options)
    try:
        result = auto_internationalize(path, config)
    except Exception as e:
        click.echo(f"Auto-internationalize failed: {e}", err=True)
        sys.exit(1)

    click.echo(
        f"{result.files_processed} files, {result.total_replaced} replacements, "
        f"{result.total_keys} keys",
        err=True,
    )
    click.echo(result.model_dump_json(indent=2))


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
