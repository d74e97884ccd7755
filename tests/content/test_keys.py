"""Tests for storage key layout and the locale fallback chain."""

import pytest
from folio.config import Locale, SiteConfig
from folio.content.keys import key_for, keys_for, prefix_for, split_name
from folio.content.locales import locale_chain
from folio.content.models import ContentFormat, ContentType, Page
from folio.errors import InvalidKeyError


def _site(default: str = "en", **enabled: bool) -> SiteConfig:
    locales = [Locale(code=code, enabled=on) for code, on in enabled.items()]
    return SiteConfig(default_locale=default, locales=locales)


class TestKeys:
    def test_localized_key(self):
        key = key_for(ContentType.POST, "hello", "en", ContentFormat.MARKDOWN)
        assert key == "content/posts/en/hello.md"

    def test_legacy_key(self):
        assert key_for(ContentType.PAGE, "about") == "content/pages/about.json"

    def test_prefix(self):
        assert prefix_for(ContentType.TAG, "de") == "content/tags/de/"
        assert prefix_for(ContentType.TAG) == "content/tags/"

    def test_keys_for_follow_format_order(self):
        assert keys_for(ContentType.POST, "x", "en") == [
            "content/posts/en/x.md",
            "content/posts/en/x.json",
        ]
        assert keys_for(ContentType.CATEGORY, "x") == ["content/categories/x.json"]

    @pytest.mark.parametrize("slug", ["", ".", "..", "a/b", "a\\b"])
    def test_rejects_unsafe_slugs(self, slug):
        with pytest.raises(InvalidKeyError):
            key_for(ContentType.POST, slug, "en")

    @pytest.mark.parametrize("slug", ["a\x00b", "line\nbreak", "tab\there", "del\x7f"])
    def test_rejects_control_characters(self, slug):
        with pytest.raises(InvalidKeyError):
            key_for(ContentType.POST, slug, "en")
        with pytest.raises(InvalidKeyError):
            prefix_for(ContentType.POST, slug)

    def test_save_with_control_character_slug_fails(self, resolver):
        page = Page(id="1", title="t", slug="a\x00b")
        assert resolver.save(page, "en") is False
        assert resolver.save(page) is False

    def test_rejects_unsafe_locale(self):
        with pytest.raises(InvalidKeyError):
            prefix_for(ContentType.POST, "../etc")

    def test_invalid_key_is_a_value_error(self):
        with pytest.raises(ValueError):
            key_for(ContentType.POST, "..")


class TestSplitName:
    def test_post_formats(self):
        assert split_name("a.md", ContentType.POST) == ("a", ContentFormat.MARKDOWN)
        assert split_name("a.json", ContentType.POST) == ("a", ContentFormat.JSON)

    def test_markdown_ignored_for_pages(self):
        assert split_name("a.md", ContentType.PAGE) is None

    def test_directories_and_unknown_files(self):
        assert split_name("en", ContentType.POST) is None
        assert split_name("notes.txt", ContentType.POST) is None
        assert split_name(".json", ContentType.POST) is None

    def test_dotted_slug(self):
        assert split_name("v1.2.json", ContentType.PAGE) == ("v1.2", ContentFormat.JSON)


class TestLocaleChain:
    def test_preferred_then_default_then_rest(self):
        site = _site("en", en=True, de=True, fr=True)
        assert locale_chain(site, "fr") == ["fr", "en", "de", None]

    def test_no_preference(self):
        site = _site("en", en=True, de=True)
        assert locale_chain(site) == ["en", "de", None]

    def test_preferred_equal_to_default_not_repeated(self):
        site = _site("en", en=True, de=True)
        assert locale_chain(site, "en") == ["en", "de", None]

    def test_disabled_preferred_skipped(self):
        site = _site("en", en=True, de=False)
        assert locale_chain(site, "de") == ["en", None]

    def test_unknown_preferred_skipped(self):
        site = _site("en", en=True)
        assert locale_chain(site, "xx") == ["en", None]

    def test_legacy_path_always_last(self):
        site = _site("de", en=True, de=True)
        chain = locale_chain(site, "en")
        assert chain == ["en", "de", None]
        assert chain.count(None) == 1
