"""
Snippety — Template Cache Tests
=================================

What:  Construction, lookup and rendering of the page template cache.

What we test:
    ✅ Every page under pages/ is cached by file name
    ✅ A broken page, partial or layout fails the whole build
    ✅ Unknown page names raise UnknownTemplateError
    ✅ Helper functions are usable from templates; output is escaped
"""

from datetime import datetime, timedelta, timezone

import pytest

from snippety.config import DEFAULT_TEMPLATE_DIR
from snippety.exceptions import TemplateCacheError, UnknownTemplateError
from snippety.schemas.snippet import Snippet
from snippety.templates import TemplateCache, human_date, new_template_cache, new_template_data

CREATED = datetime(2026, 3, 5, 9, 7, tzinfo=timezone.utc)


def make_snippet(**overrides) -> Snippet:
    data = {
        "id": 1,
        "title": "Test",
        "content": "Body",
        "created": CREATED,
        "expires": CREATED + timedelta(days=7),
    }
    data.update(overrides)
    return Snippet(**data)


class TestHumanDate:

    def test_formats_utc(self):
        assert human_date(CREATED) == "05 Mar 2026 at 09:07"

    def test_converts_other_zones_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        assert human_date(datetime(2026, 3, 5, 11, 7, tzinfo=plus_two)) == "05 Mar 2026 at 09:07"

    def test_none_is_empty(self):
        assert human_date(None) == ""


class TestTemplateCacheBuild:
    """Construction succeeds whole or fails whole."""

    def test_builds_every_page(self, template_dir):
        cache = TemplateCache.build(template_dir)

        assert set(cache) == {"home.tmpl.html", "view.tmpl.html"}
        assert len(cache) == 2

    def test_shipped_templates_compile(self):
        cache = new_template_cache(DEFAULT_TEMPLATE_DIR)

        assert {"home.tmpl.html", "view.tmpl.html", "create.tmpl.html"} <= set(cache)

    def test_malformed_page_fails_build(self, template_dir):
        (template_dir / "pages" / "broken.tmpl.html").write_text(
            '{% extends "base.tmpl.html" %}{% block main %}{% for x in y %}{% endblock %}'
        )

        with pytest.raises(TemplateCacheError) as exc_info:
            TemplateCache.build(template_dir)

        assert exc_info.value.context["template"] == "pages/broken.tmpl.html"

    def test_malformed_partial_fails_build(self, template_dir):
        (template_dir / "partials" / "footer.tmpl.html").write_text("{{ unclosed ")

        with pytest.raises(TemplateCacheError):
            TemplateCache.build(template_dir)

    def test_missing_layout_fails_build(self, template_dir):
        (template_dir / "base.tmpl.html").unlink()

        with pytest.raises(TemplateCacheError):
            TemplateCache.build(template_dir)

    def test_reference_to_missing_template_fails_build(self, template_dir):
        (template_dir / "pages" / "about.tmpl.html").write_text(
            '{% extends "base.tmpl.html" %}'
            '{% block main %}{% include "partials/missing.tmpl.html" %}{% endblock %}'
        )

        with pytest.raises(TemplateCacheError):
            TemplateCache.build(template_dir)

    def test_missing_directory_fails_build(self, tmp_path):
        with pytest.raises(TemplateCacheError):
            TemplateCache.build(tmp_path / "nope")

    def test_no_pages_gives_empty_cache(self, tmp_path):
        (tmp_path / "base.tmpl.html").write_text("layout")

        assert len(TemplateCache.build(tmp_path)) == 0


class TestTemplateCacheLookup:

    def test_get_known_page(self, template_dir):
        cache = TemplateCache.build(template_dir)

        template_set = cache.get("home.tmpl.html")

        assert template_set.name == "home.tmpl.html"
        assert "home.tmpl.html" in cache

    def test_get_unknown_page_raises(self, template_dir):
        cache = TemplateCache.build(template_dir)

        with pytest.raises(UnknownTemplateError) as exc_info:
            cache.get("missing.tmpl.html")

        assert exc_info.value.name == "missing.tmpl.html"

    def test_mapping_is_read_only(self, template_dir):
        cache = TemplateCache.build(template_dir)

        with pytest.raises(TypeError):
            cache.pages["extra.tmpl.html"] = cache.get("home.tmpl.html")


class TestTemplateRendering:

    def test_page_composes_layout_and_partials(self, template_dir):
        cache = TemplateCache.build(template_dir)

        html = cache.render("home.tmpl.html", snippets=[make_snippet()])

        assert "<title>Home</title>" in html
        assert "<nav>nav</nav>" in html
        assert "<p>Test</p>" in html

    def test_helper_function_available(self, template_dir):
        cache = TemplateCache.build(template_dir)

        html = cache.render("view.tmpl.html", snippet=make_snippet())

        assert "<time>05 Mar 2026 at 09:07</time>" in html

    def test_values_are_escaped(self, template_dir):
        cache = TemplateCache.build(template_dir)

        html = cache.render("home.tmpl.html", snippets=[make_snippet(title="<script>x</script>")])

        assert "<script>x</script>" not in html
        assert "&lt;script&gt;x&lt;/script&gt;" in html

    def test_shipped_view_page(self):
        cache = new_template_cache(DEFAULT_TEMPLATE_DIR)

        html = cache.render(
            "view.tmpl.html", **new_template_data(snippet=make_snippet(content="a & b"))
        )

        assert "Snippet #1" in html
        assert "a &amp; b" in html
        assert "Expires: 12 Mar 2026 at 09:07" in html

    def test_template_data_has_current_year(self):
        data = new_template_data(snippets=[])

        assert data["current_year"] == datetime.now(timezone.utc).year
        assert data["snippets"] == []
