"""Tests for exchanging hardcoded text for translation lookups."""

from pathlib import Path

import pytest
import yaml

from auto_l18n.analyzers.finder import InvalidArgumentError
from auto_l18n.exchange.replacer import (
    Edit,
    apply_edits,
    backup_path,
    exchange_text_for_placeholders,
    plan_replacements,
)
from auto_l18n.models.findings import Finding, FindingKind, I18nConfig


def _locale(config: I18nConfig) -> dict:
    return yaml.safe_load(Path(config.locale_path).read_text(encoding="utf-8"))


class TestEdits:
    """Tests for edit application."""

    def test_apply_in_descending_order(self):
        """Earlier edits are not shifted by later ones."""
        edits = [Edit(0, 1, "X"), Edit(4, 6, "YZW")]
        assert apply_edits("abcdef", edits) == "XbcdYZW"

    def test_overlaps(self):
        """Overlap is half-open."""
        assert Edit(0, 4, "").overlaps(Edit(3, 6, ""))
        assert not Edit(0, 3, "").overlaps(Edit(3, 6, ""))

    def test_backup_path(self):
        """Backups sit next to the template."""
        assert backup_path(Path("views/index.html.erb")) == Path("views/index.html.erb.bak")


class TestPlanReplacements:
    """Tests for plan_replacements()."""

    def test_positional_fallback_keys(self):
        """Short script strings get index-based keys."""
        content = '<script>a("OK"); b("Go");</script>'
        findings = [
            Finding(text="OK", kind=FindingKind.SCRIPT_LITERAL, source="script block", context="OK"),
            Finding(text="Go", kind=FindingKind.SCRIPT_LITERAL, source="script block", context="Go"),
        ]
        new_content, replacements = plan_replacements(content, findings)
        assert [r.key for r in replacements] == ["text_0", "text_1"]
        assert new_content == '<script>a("<%= j t("text_0") %>"); b("<%= j t("text_1") %>");</script>'

    def test_unmatched_finding(self):
        """Findings that cannot be located are reported, not raised."""
        finding = Finding(text="Ghost", kind=FindingKind.TEXT_NODE, source="p text", context="Ghost")
        new_content, replacements = plan_replacements("<p>Real</p>", [finding])
        assert new_content == "<p>Real</p>"
        assert replacements[0].replaced is False
        assert "not found" in replacements[0].reason


class TestExchange:
    """Tests for exchange_text_for_placeholders()."""

    def test_dry_run_writes_nothing(self, write_template, config):
        """A dry run reports replacements but leaves every file untouched."""
        path = write_template("<h1>Welcome</h1>\n")
        original = path.read_bytes()
        result = exchange_text_for_placeholders(path, config.model_copy(update={"dry_run": True}))

        assert result.dry_run is True
        assert result.replaced_count == 1
        assert result.keys == {"welcome": "Welcome"}
        assert path.read_bytes() == original
        assert not Path(config.locale_path).exists()
        assert not backup_path(path).exists()

    def test_dry_run_keeps_locale_bytes(self, write_template, config):
        """An existing locale file is byte-identical after a dry run."""
        locale_path = Path(config.locale_path)
        locale_path.parent.mkdir(parents=True)
        locale_path.write_text("en:\n  existing: Keep me\n", encoding="utf-8")
        before = locale_path.read_bytes()
        path = write_template("<h1>Welcome</h1>")

        exchange_text_for_placeholders(path, config.model_copy(update={"dry_run": True}))
        assert locale_path.read_bytes() == before

    def test_dry_run_matches_live_run(self, write_template, config):
        """Dry and live runs report the same keys and replacements."""
        content = '<h1>Welcome</h1><img alt="Close"><script>alert("Saved successfully");</script>'
        dry = exchange_text_for_placeholders(
            write_template(content, "dry.html.erb"), config.model_copy(update={"dry_run": True})
        )
        live = exchange_text_for_placeholders(write_template(content, "live.html.erb"), config)

        assert dry.keys == live.keys
        assert dry.replacements == live.replacements
        assert dry.replaced_count == live.replaced_count == 3

    def test_text_node(self, write_template, config):
        """Text nodes become ERB output tags and keys land in the locale file."""
        path = write_template("<h1>Welcome</h1>\n")
        result = exchange_text_for_placeholders(path, config)

        assert path.read_text(encoding="utf-8") == '<h1><%= t("welcome") %></h1>\n'
        assert backup_path(path).read_text(encoding="utf-8") == "<h1>Welcome</h1>\n"
        assert _locale(config) == {"en": {"welcome": "Welcome"}}
        assert result.replaced_count == 1
        assert result.added_key_count == 1

    def test_namespace(self, write_template, config):
        """Namespaced keys are nested in the locale file."""
        path = write_template("<h1>Welcome</h1>")
        result = exchange_text_for_placeholders(path, config.model_copy(update={"namespace": "views.home"}))

        assert result.keys == {"views.home.welcome": "Welcome"}
        assert path.read_text(encoding="utf-8") == '<h1><%= t("views.home.welcome") %></h1>'
        assert _locale(config) == {"en": {"views": {"home": {"welcome": "Welcome"}}}}

    def test_attribute(self, write_template, config):
        """Attribute values are replaced inside their quotes."""
        path = write_template('<img alt="Close" src="x.png">')
        exchange_text_for_placeholders(path, config)
        assert path.read_text(encoding="utf-8") == '<img alt="<%= t("close") %>" src="x.png">'

    def test_scripting_literal(self, write_template, config):
        """Literals in ERB code become t() calls."""
        path = write_template('<p><%= link_to "Sign up", signup_path %></p>')
        exchange_text_for_placeholders(path, config)
        assert path.read_text(encoding="utf-8") == '<p><%= link_to t("sign_up"), signup_path %></p>'

    def test_script_block_literal(self, write_template, config):
        """Script string contents become escaped ERB output."""
        path = write_template('<script>alert("Saved successfully");</script>')
        exchange_text_for_placeholders(path, config)
        assert path.read_text(encoding="utf-8") == (
            '<script>alert("<%= j t("saved_successfully") %>");</script>'
        )

    def test_template_literal(self, write_template, config):
        """Backtick literal contents are replaced too."""
        path = write_template("<script>el.textContent = `Loading data`;</script>")
        exchange_text_for_placeholders(path, config)
        assert path.read_text(encoding="utf-8") == (
            '<script>el.textContent = `<%= j t("loading_data") %>`;</script>'
        )

    def test_multiple_edits(self, write_template, config):
        """Several replacements in one file are all applied."""
        path = write_template('<h1>Welcome</h1><p>Read the guide</p><img alt="Logo image">')
        result = exchange_text_for_placeholders(path, config)

        assert result.replaced_count == 3
        assert path.read_text(encoding="utf-8") == (
            '<h1><%= t("welcome") %></h1>'
            '<p><%= t("read_the_guide") %></p>'
            '<img alt="<%= t("logo_image") %>">'
        )

    def test_data_attribute_not_replaced(self, write_template, config):
        """JSON data attribute strings are reported but never rewritten."""
        content = "<div data-controller=\"toast\" data-toast-message-value='\"Hello there\"'></div>"
        path = write_template(content)
        result = exchange_text_for_placeholders(path, config)

        assert result.replaced_count == 0
        assert result.keys == {}
        assert result.replacements[0].replaced is False
        assert "not replaceable" in result.replacements[0].reason
        assert path.read_text(encoding="utf-8") == content
        assert not backup_path(path).exists()
        assert not Path(config.locale_path).exists()

    def test_duplicate_text_first_occurrence(self, write_template, config):
        """Duplicates collapse to one finding and only the first span is replaced."""
        path = write_template("<p>Save</p>\n<p>Save</p>")
        exchange_text_for_placeholders(path, config)
        assert path.read_text(encoding="utf-8") == '<p><%= t("save") %></p>\n<p>Save</p>'

    def test_skips_html_comment(self, write_template, config):
        """Commented-out markup is not rewritten; the visible copy is."""
        path = write_template("<!-- <p>Welcome</p> -->\n<p>Welcome</p>")
        result = exchange_text_for_placeholders(path, config)

        assert result.replaced_count == 1
        assert path.read_text(encoding="utf-8") == '<!-- <p>Welcome</p> -->\n<p><%= t("welcome") %></p>'

    def test_skips_erb_comment(self, write_template, config):
        """ERB comments stay intact so the template still renders."""
        path = write_template("<%# <p>Welcome</p> %>\n<p>Welcome</p>")
        exchange_text_for_placeholders(path, config)
        assert path.read_text(encoding="utf-8") == '<%# <p>Welcome</p> %>\n<p><%= t("welcome") %></p>'

    def test_skips_commented_attribute(self, write_template, config):
        """Attributes inside HTML comments are not rewritten."""
        path = write_template('<!-- <img alt="Close"> -->\n<img alt="Close">')
        exchange_text_for_placeholders(path, config)
        assert path.read_text(encoding="utf-8") == '<!-- <img alt="Close"> -->\n<img alt="<%= t("close") %>">'

    def test_skips_commented_script(self, write_template, config):
        """Script literals inside HTML comments are not rewritten."""
        content = (
            '<!-- <script>alert("Saved successfully");</script> -->\n'
            '<script>alert("Saved successfully");</script>'
        )
        path = write_template(content)
        exchange_text_for_placeholders(path, config)
        assert path.read_text(encoding="utf-8") == (
            '<!-- <script>alert("Saved successfully");</script> -->\n'
            '<script>alert("<%= j t("saved_successfully") %>");</script>'
        )

    def test_text_node_not_matched_in_script(self, write_template, config):
        """Markup-looking text inside a script body is not a text node span."""
        path = write_template('<script>document.write("<b>Welcome</b>");</script><p>Welcome</p>')
        exchange_text_for_placeholders(path, config)
        assert path.read_text(encoding="utf-8").endswith('<p><%= t("welcome") %></p>')

    def test_only_commented_copy_is_a_miss(self):
        """A finding whose only raw span is commented out is not replaced."""
        finding = Finding(text="Welcome", kind=FindingKind.TEXT_NODE, source="p text", context="Welcome")
        new_content, replacements = plan_replacements("<!-- <p>Welcome</p> -->", [finding])
        assert new_content == "<!-- <p>Welcome</p> -->"
        assert replacements[0].replaced is False

    def test_entity_text_miss(self, write_template, config):
        """Text whose raw form differs from the parsed form is left alone."""
        path = write_template("<p>Tom &amp; Jerry</p>")
        result = exchange_text_for_placeholders(path, config)

        assert result.replaced_count == 0
        assert result.replacements[0].text == "Tom & Jerry"
        assert result.replacements[0].replaced is False
        assert path.read_text(encoding="utf-8") == "<p>Tom &amp; Jerry</p>"

    def test_existing_locale_preserved(self, write_template, config):
        """Existing keys and other locales survive a run."""
        locale_path = Path(config.locale_path)
        locale_path.parent.mkdir(parents=True)
        locale_path.write_text(
            yaml.safe_dump({"en": {"existing": "Keep me"}, "fr": {"existing": "Garde-moi"}}),
            encoding="utf-8",
        )
        path = write_template("<h1>Welcome</h1>")
        exchange_text_for_placeholders(path, config)

        assert _locale(config) == {
            "en": {"existing": "Keep me", "welcome": "Welcome"},
            "fr": {"existing": "Garde-moi"},
        }

    def test_no_backup(self, write_template, config):
        """backup=False skips the .bak file."""
        path = write_template("<h1>Welcome</h1>")
        exchange_text_for_placeholders(path, config.model_copy(update={"backup": False}))
        assert not backup_path(path).exists()

    def test_locale_code(self, write_template, config):
        """Keys are staged under the configured locale."""
        path = write_template("<h1>Bienvenue</h1>")
        exchange_text_for_placeholders(path, config.model_copy(update={"locale": "fr"}))
        assert _locale(config) == {"fr": {"bienvenue": "Bienvenue"}}

    def test_invalid_path(self, temp_dir: Path, config):
        """Missing templates are invalid arguments."""
        with pytest.raises(InvalidArgumentError):
            exchange_text_for_placeholders(temp_dir / "missing.html.erb", config)

    def test_sample_index(self, views_copy: Path, config):
        """Every replaceable finding in the sample index is rewritten."""
        path = views_copy / "posts" / "index.html.erb"
        result = exchange_text_for_placeholders(path, config)
        content = path.read_text(encoding="utf-8")

        assert result.replaced_count == 8
        assert '<h1><%= t("recent_posts") %></h1>' in content
        assert '<%= link_to t("read_more"), post_path(post) %>' in content
        assert 'alt="<%= t("no_posts_yet") %>"' in content
        assert '<button title="<%= t("refresh_the_list") %>"><%= t("refresh") %></button>' in content
        assert 'var message = "<%= j t("posts_loaded") %>";' in content
        assert '<%= t("posts.intro") %>' in content
