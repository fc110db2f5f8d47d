"""auto-l18n - find hardcoded text in ERB templates and move it into locale files."""

# Load .env so AUTO_L18N_LOCALE, AUTO_L18N_LOCALE_PATH, etc. are set
# for any entry point (CLI, pytest, scripts) that imports auto_l18n.
from dotenv import load_dotenv

load_dotenv()

# Keep in sync with pyproject.toml [project] version.
__version__ = "0.1.0"

from auto_l18n.analyzers.finder import find_text  # noqa: E402
from auto_l18n.exchange.batch import auto_internationalize  # noqa: E402
from auto_l18n.exchange.replacer import exchange_text_for_placeholders  # noqa: E402

__all__ = [
    "__version__",
    "auto_internationalize",
    "exchange_text_for_placeholders",
    "find_text",
]
