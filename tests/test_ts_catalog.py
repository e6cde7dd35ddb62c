"""Tests for the .ts translation catalog."""

import pytest
from pathlib import Path

from src.core.config import Config
from src.core.ts_catalog import TranslationCatalog, TsFormatError

SHIPPED_TS = Config.TRANSLATIONS_DIR / "deepin-xdgicon-convert_zh_CN.ts"

MINIMAL_TS = """<?xml version="1.0" encoding="utf-8"?>
<!DOCTYPE TS>
<TS version="2.1" language="zh_CN">
<context>
    <name>MainWindow</name>
    <message>
        <source>Cancel</source>
        <translation>取消</translation>
    </message>
    <message>
        <source>Retry</source>
        <translation type="unfinished"></translation>
    </message>
</context>
</TS>
"""


class TestShippedCatalog:
    """The catalog bundled with the application."""

    @pytest.fixture(scope="class")
    def catalog(self):
        return TranslationCatalog.load(SHIPPED_TS)

    def test_header(self, catalog):
        assert catalog.language == "zh_CN"
        assert catalog.version == "2.1"
        assert catalog.contexts() == ["FileChooserWidget", "MainWindow", "QObject"]

    def test_message_count(self, catalog):
        assert len(catalog) == 16
        assert len(list(catalog.entries("FileChooserWidget"))) == 6
        assert len(list(catalog.entries("MainWindow"))) == 9
        assert len(list(catalog.entries("QObject"))) == 1

    def test_sources_non_empty_and_unique(self, catalog):
        for context in catalog.contexts():
            sources = [entry.source for entry in catalog.entries(context)]
            assert all(sources)
            assert len(sources) == len(set(sources))

    def test_finished(self, catalog):
        assert catalog.validate() == []
        assert all(entry.is_finished for entry in catalog.entries())

    def test_lookup(self, catalog):
        assert catalog.lookup("MainWindow", "Cancel") == "取消"
        assert catalog.lookup("QObject", "Theme Icon Converter") == "主题图标转换器"
        assert catalog.lookup("MainWindow", "Save to:") == "保存到："

    def test_trailing_space_is_kept(self, catalog):
        assert ("FileChooserWidget", "Converts to DCI format (.deb only) ") in catalog
        assert ("FileChooserWidget", "Converts to DCI format (.deb only)") not in catalog

    def test_lookup_fallback(self, catalog):
        assert catalog.lookup("MainWindow", "NonexistentKey") == "NonexistentKey"
        assert catalog.lookup("NoSuchContext", "Cancel") == "Cancel"

    def test_context_scoped_lookup(self, catalog):
        # "Cancel" only exists in MainWindow
        assert catalog.lookup("FileChooserWidget", "Cancel") == "Cancel"

    def test_round_trip(self, catalog):
        reparsed = TranslationCatalog.from_string(catalog.to_string())
        assert reparsed.triples() == catalog.triples()
        assert reparsed.language == catalog.language

    def test_serialization_matches_shipped_file(self, catalog):
        assert catalog.to_string() == SHIPPED_TS.read_text(encoding="utf-8")


class TestTranslationCatalog:
    """Parsing, editing and validation."""

    def test_unfinished_translation(self):
        catalog = TranslationCatalog.from_string(MINIMAL_TS)
        entry = catalog.get("MainWindow", "Retry")

        assert entry.translation == ""
        assert entry.translation_type == "unfinished"
        assert catalog.lookup("MainWindow", "Retry") == "Retry"
        assert catalog.validate() == ["MainWindow: missing translation for 'Retry'"]

    def test_unfinished_type_survives_round_trip(self):
        catalog = TranslationCatalog.from_string(MINIMAL_TS)
        text = catalog.to_string()

        assert '<translation type="unfinished"></translation>' in text
        assert TranslationCatalog.from_string(text).get("MainWindow", "Retry").translation_type == "unfinished"

    def test_missing_translation_element(self):
        text = ('<TS version="2.1" language="zh_CN"><context><name>A</name>'
                '<message><source>Hello</source></message></context></TS>')
        catalog = TranslationCatalog.from_string(text)

        assert catalog.get("A", "Hello").translation == ""
        assert catalog.lookup("A", "Hello") == "Hello"

    def test_duplicate_source_rejected(self):
        text = ('<TS version="2.1" language="zh_CN"><context><name>A</name>'
                '<message><source>Hi</source><translation>1</translation></message>'
                '<message><source>Hi</source><translation>2</translation></message>'
                '</context></TS>')
        with pytest.raises(TsFormatError):
            TranslationCatalog.from_string(text)

    def test_same_source_in_different_contexts(self):
        catalog = TranslationCatalog("zh_CN")
        catalog.add("A", "OK", "好")
        catalog.add("B", "OK", "确定")

        assert catalog.lookup("A", "OK") == "好"
        assert catalog.lookup("B", "OK") == "确定"

    @pytest.mark.parametrize("text", [
        "<NotTS/>",
        "<TS><context><message><source>x</source></message></context></TS>",
        "<TS><context><name>A</name><message><translation>x</translation></message></context></TS>",
        "<TS><context><name>A</name><message><source>x</source>"
        "<translation>1</translation><translation>2</translation></message></context></TS>",
        "<TS><context>",
    ])
    def test_malformed(self, text):
        with pytest.raises(TsFormatError):
            TranslationCatalog.from_string(text)

    def test_unknown_translation_type(self):
        with pytest.raises(TsFormatError):
            TranslationCatalog().add("A", "x", "y", "bogus")

    def test_escaping(self, tmp_path):
        catalog = TranslationCatalog("zh_CN")
        catalog.add("A", 'Save <all> & "quit"', "保存 <全部> & “退出”")
        path = tmp_path / "out" / "app_zh_CN.ts"
        catalog.save(path)

        text = path.read_text(encoding="utf-8")
        assert "&lt;all&gt; &amp; &quot;quit&quot;" in text
        assert TranslationCatalog.load(path).triples() == catalog.triples()

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(TsFormatError):
            TranslationCatalog.load(tmp_path / "missing.ts")

    def test_load_non_utf8_file(self, tmp_path):
        path = tmp_path / "app_zh_CN.ts"
        path.write_bytes(MINIMAL_TS.encode("gbk"))
        with pytest.raises(TsFormatError):
            TranslationCatalog.load(path)

    def test_empty_source_reported(self):
        catalog = TranslationCatalog("zh_CN")
        catalog.add("A", "", "空")
        assert catalog.validate() == ["A: empty source"]
