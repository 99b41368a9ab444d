"""Tests for tm_engine/io.py: TMX index builder and exporter."""

import logging
from datetime import datetime, timezone

import pytest

from tm_engine.exceptions import CorpusLoadError
from tm_engine.io import TMXExporter, TmxIndexBuilder, export_tmx, load_tmx
from tm_engine.models import LocaleIndex, TranslationUnit


# ==================== build ====================


class TestBuild:
    """build() groups units by locale and meta key."""

    def test_converts_variant_to_meta_key(self, builder, make_tmx, make_unit):
        content = make_tmx(make_unit("en:#:foo:#:bar", "foobar", "fussbar"))
        index = builder.build(content)["de-DE"]

        assert "foo.bar" in index
        assert len(index.get("foo.bar")) == 1
        assert isinstance(index.get("foo.bar")[0], TranslationUnit)

    def test_array_index_converted(self, builder, make_tmx, make_unit):
        content = make_tmx(make_unit("en:#:foo:#:[2]:#:bar", "foobar", "fussbar"))
        index = builder.build(content)["de-DE"]

        assert "foo.1.bar" in index
        assert len(index.get("foo.1.bar")) == 1

    def test_unit_fields(self, builder, make_tmx, make_unit):
        content = make_tmx(make_unit("en:#:foo:#:bar", "foobar", "fussbar", tuid="42"))
        unit = builder.build(content)["de-DE"].get("foo.bar")[0]

        assert unit.source_text == "foobar"
        assert unit.target_text == "fussbar"
        assert unit.meta_key == "foo.bar"
        assert unit.plural_form is None
        assert unit.tuid == "42"

    def test_duplicates_kept_in_order(self, builder, duplicate_meta_keys_tmx):
        units = builder.build(duplicate_meta_keys_tmx)["de-DE"].get("teapot")

        assert [u.source_text for u in units] == ["first value", "second value"]

    def test_plural_form_prop(self, builder, plurals_tmx):
        index = builder.build(plurals_tmx)["de-DE"]

        assert [u.plural_form for u in index.get("teapot")] == ["one", "other"]
        assert index.get("teapot.one")[0].plural_form is None

    def test_locale_per_target_tuv(self, builder, make_tmx, make_unit):
        content = make_tmx(
            make_unit("en:#:a", "Hello", "Hallo", target_lang="de-DE"),
            make_unit("en:#:a", "Hello", "Bonjour", target_lang="fr-FR"),
        )
        indexes = builder.build(content)

        assert set(indexes) == {"de-DE", "fr-FR"}
        assert indexes["fr-FR"].get("a")[0].target_text == "Bonjour"

    def test_external_locale_overrides(self, builder, make_tmx, make_unit):
        content = make_tmx(make_unit("en:#:a", "Hello", "Hallo"))
        indexes = builder.build(content, locale="de")

        assert list(indexes) == ["de"]

    def test_inline_elements_flattened(self, builder, make_tmx, make_unit):
        unit = make_unit(
            "en:#:legal:#:privacies:#:show",
            "Director of Privacy <ph>{0}</ph>Lumos Labs",
            "Datenschutzbeauftragter <ph>&lt;br/&gt;</ph>Lumos Labs",
            escaped=True,
        )
        stored = builder.build(make_tmx(unit))["de-DE"].get("legal.privacies.show")[0]

        assert stored.source_text == "Director of Privacy {0}Lumos Labs"
        assert stored.target_text == "Datenschutzbeauftragter <br/>Lumos Labs"

    def test_whitespace_kept_verbatim(self, builder, make_tmx, make_unit):
        content = make_tmx(make_unit("en:#:a", "  foo   bar ", " fuss  bar"))
        unit = builder.build(content)["de-DE"].get("a")[0]

        assert unit.source_text == "  foo   bar "
        assert unit.target_text == " fuss  bar"

    def test_source_matched_by_primary_language(self, builder, make_tmx, make_unit):
        content = make_tmx(make_unit("en:#:a", "Hello", "Hallo"), srclang="en")
        index = builder.build(content)["de-DE"]

        assert index.get("a")[0].source_text == "Hello"

    def test_bytes_input(self, builder, make_tmx, make_unit):
        content = make_tmx(make_unit("en:#:a", "español", "spanisch")).encode("utf-8")
        index = builder.build(content)["de-DE"]

        assert index.get("a")[0].source_text == "español"

    def test_load_single_locale(self, builder, double_tmx):
        index = builder.load(double_tmx, "de-DE")

        assert isinstance(index, LocaleIndex)
        assert index.locale == "de-DE"
        assert sorted(index.keys()) == ["baz.0", "foo.bar"]

    def test_load_without_units_gives_empty_index(self, builder, make_tmx):
        index = builder.load(make_tmx(), "de-DE")

        assert len(index) == 0

    def test_convenience_function(self, double_tmx):
        assert "de-DE" in load_tmx(double_tmx)


class TestPartialSuccess:
    """Bad units are skipped; the rest of the document loads."""

    def test_malformed_variant_skipped(self, builder, make_tmx, make_unit, caplog):
        content = make_tmx(
            make_unit("en:#:foo:#:[abc]", "bad", "schlecht"),
            make_unit("en:#:foo:#:bar", "foobar", "fussbar"),
        )
        with caplog.at_level(logging.WARNING):
            index = builder.build(content)["de-DE"]

        assert list(index.keys()) == ["foo.bar"]
        assert "non-numeric" in caplog.text

    def test_missing_variant_skipped(self, builder, make_tmx):
        tu = '<tu><tuv xml:lang="en-US"><seg>a</seg></tuv><tuv xml:lang="de-DE"><seg>b</seg></tuv></tu>'
        indexes = builder.build(make_tmx(tu))

        assert indexes == {}

    def test_missing_target_skipped(self, builder, make_tmx):
        tu = (
            '<tu><prop type="x-smartling-string-variant">en:#:a</prop>'
            '<tuv xml:lang="en-US"><seg>a</seg></tuv></tu>'
        )
        assert builder.build(make_tmx(tu)) == {}

    def test_empty_target_skipped(self, builder, make_tmx, make_unit):
        assert builder.build(make_tmx(make_unit("en:#:a", "Hello", ""))) == {}

    def test_missing_source_skipped(self, builder, make_tmx):
        tu = (
            '<tu><prop type="x-smartling-string-variant">en:#:a</prop>'
            '<tuv xml:lang="de-DE"><seg>b</seg></tuv></tu>'
        )
        assert builder.build(make_tmx(tu)) == {}


class TestCorpusLoadError:
    """Structurally invalid documents are fatal."""

    def test_not_xml(self, builder):
        with pytest.raises(CorpusLoadError) as exc_info:
            builder.build("this is not xml <")
        assert exc_info.value.cause is not None

    @pytest.mark.parametrize("content", ["", "   ", b""])
    def test_empty(self, builder, content):
        with pytest.raises(CorpusLoadError):
            builder.build(content)

    def test_wrong_root(self, builder):
        with pytest.raises(CorpusLoadError, match="root element"):
            builder.build("<xliff><body/></xliff>")

    def test_missing_body(self, builder):
        with pytest.raises(CorpusLoadError, match="body"):
            builder.build('<tmx version="1.4"><header srclang="en"/></tmx>')


# ==================== export ====================


class TestExporter:
    """TMXExporter writes the same dialect the builder reads."""

    def test_round_trip(self, builder, settings, plurals_tmx):
        indexes = builder.build(plurals_tmx)
        exported = TMXExporter(settings).to_tmx(indexes, source_lang="en-US")

        assert builder.build(exported) == indexes

    def test_variant_encoding(self, settings):
        index = LocaleIndex.from_units("de-DE", [
            TranslationUnit(source_text="a", target_text="b", meta_key="foo.1.bar"),
        ])
        exported = TMXExporter(settings).to_tmx({"de-DE": index}, source_lang="en")

        assert "en:#:foo:#:[2]:#:bar" in exported
        assert 'xml:lang="de-DE"' in exported

    def test_header(self, settings):
        created = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        exported = TMXExporter(settings).to_tmx({}, source_lang="en", creation_date=created)

        assert exported.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert 'creationdate="20240102T030405Z"' in exported
        assert 'srclang="en"' in exported

    def test_markup_escaped(self, builder, settings):
        index = LocaleIndex.from_units("de-DE", [
            TranslationUnit(source_text="<u>a</u> & b", target_text="<u>c</u> & d", meta_key="x"),
        ])
        exported = TMXExporter(settings).to_tmx({"de-DE": index}, source_lang="en")

        unit = builder.build(exported)["de-DE"].get("x")[0]
        assert unit.source_text == "<u>a</u> & b"
        assert unit.target_text == "<u>c</u> & d"

    def test_export_tmx_uses_configured_source_locale(self):
        index = LocaleIndex.from_units("de-DE", [
            TranslationUnit(source_text="foobar", target_text="fussbar", meta_key="foo.bar"),
        ])
        exported = export_tmx({"de-DE": index})

        assert 'srclang="en"' in exported
        assert load_tmx(exported)["de-DE"].get("foo.bar")[0].target_text == "fussbar"
