"""Pytest configuration and shared fixtures."""

import shutil
import tempfile
from pathlib import Path

import pytest

from auto_l18n.analyzers.extractor import get_markup_parser
from auto_l18n.models.findings import I18nConfig

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def parser():
    """Default html.parser-backed markup parser."""
    return get_markup_parser()


@pytest.fixture
def config(temp_dir: Path) -> I18nConfig:
    """Config whose locale file lives inside the temp directory."""
    return I18nConfig(locale_path=str(temp_dir / "config" / "locales" / "en.yml"), locale="en")


@pytest.fixture
def write_template(temp_dir: Path):
    """Factory writing template content to a file in the temp directory."""

    def _write(content: str, name: str = "page.html.erb") -> Path:
        path = temp_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_views_dir() -> Path:
    """Return path to the read-only sample views fixtures."""
    return FIXTURES_DIR / "sample_views"


@pytest.fixture
def views_copy(temp_dir: Path, sample_views_dir: Path) -> Path:
    """Writable copy of the sample views tree."""
    target = temp_dir / "views"
    shutil.copytree(sample_views_dir, target)
    return target
