"""
Qt Linguist translation-source (.ts) catalog.

Reads and writes the subset of the .ts format the application ships:
``TS`` root with ``version``/``language``, ``context`` elements with a
``name`` and ordered ``message`` elements holding one ``source`` and one
``translation``. Lookups fall back to the source text.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple
from xml.sax.saxutils import escape, quoteattr

from .logger import setup_logger

logger = setup_logger("TsCatalog")

TS_VERSION = "2.1"
TRANSLATION_TYPES = ("unfinished", "obsolete", "vanished")

_TEXT_ENTITIES = {'"': "&quot;", "'": "&apos;"}


class TsFormatError(ValueError):
    """Raised when a .ts document does not follow the expected structure."""


@dataclass
class TranslationEntry:
    """One translatable string of a UI context."""
    context: str
    source: str
    translation: str = ""
    translation_type: Optional[str] = None

    @property
    def is_finished(self) -> bool:
        return bool(self.translation) and self.translation_type is None

    def as_triple(self) -> Tuple[str, str, str]:
        return (self.context, self.source, self.translation)


class TranslationCatalog:
    """Ordered collection of translation entries grouped by context."""

    def __init__(self, language: str = "", version: str = TS_VERSION):
        self.language = language
        self.version = version
        self._contexts: Dict[str, Dict[str, TranslationEntry]] = {}

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------
    @classmethod
    def load(cls, path) -> "TranslationCatalog":
        """Parse a .ts file."""
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise TsFormatError(f"Cannot read {path}: {e}") from e
        except UnicodeDecodeError as e:
            raise TsFormatError(f"{path} is not UTF-8: {e}") from e
        catalog = cls.from_string(text)
        logger.debug(f"Loaded {len(catalog)} messages from {path}")
        return catalog

    @classmethod
    def from_string(cls, text: str) -> "TranslationCatalog":
        """Parse .ts XML text."""
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise TsFormatError(f"Malformed XML: {e}") from e

        if root.tag != "TS":
            raise TsFormatError(f"Unexpected root element: {root.tag}")

        catalog = cls(root.get("language", ""), root.get("version", TS_VERSION))
        for context_elem in root.findall("context"):
            name_elem = context_elem.find("name")
            if name_elem is None or not (name_elem.text or "").strip():
                raise TsFormatError("Context without a name")
            context = name_elem.text.strip()
            catalog._contexts.setdefault(context, {})

            for message_elem in context_elem.findall("message"):
                sources = message_elem.findall("source")
                if len(sources) != 1:
                    raise TsFormatError(
                        f"Message in context '{context}' has {len(sources)} source elements"
                    )
                translations = message_elem.findall("translation")
                if len(translations) > 1:
                    raise TsFormatError(
                        f"Message in context '{context}' has {len(translations)} translation elements"
                    )
                translation_elem = translations[0] if translations else None

                translation = ""
                translation_type = "unfinished"
                if translation_elem is not None:
                    translation = translation_elem.text or ""
                    translation_type = translation_elem.get("type")

                catalog.add(context, sources[0].text or "", translation, translation_type)

        return catalog

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_string(self) -> str:
        """Serialize the catalog the way Qt's lupdate writes it."""
        lines = [
            '<?xml version="1.0" encoding="utf-8"?>',
            '<!DOCTYPE TS>',
            f'<TS version={quoteattr(self.version)} language={quoteattr(self.language)}>',
        ]
        for context, messages in self._contexts.items():
            lines.append('<context>')
            lines.append(f'    <name>{_escape(context)}</name>')
            for entry in messages.values():
                lines.append('    <message>')
                lines.append(f'        <source>{_escape(entry.source)}</source>')
                type_attr = ""
                if entry.translation_type:
                    type_attr = f' type={quoteattr(entry.translation_type)}'
                lines.append(
                    f'        <translation{type_attr}>{_escape(entry.translation)}</translation>'
                )
                lines.append('    </message>')
            lines.append('</context>')
        lines.append('</TS>')
        return "\n".join(lines) + "\n"

    def save(self, path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_string(), encoding="utf-8")
        logger.info(f"Saved {len(self)} messages to {path}")

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------
    def add(self, context: str, source: str, translation: str = "",
            translation_type: Optional[str] = None) -> TranslationEntry:
        """Append an entry, creating the context on demand."""
        if translation_type is not None and translation_type not in TRANSLATION_TYPES:
            raise TsFormatError(f"Unknown translation type: {translation_type}")
        messages = self._contexts.setdefault(context, {})
        if source in messages:
            raise TsFormatError(f"Duplicate source in context '{context}': {source!r}")
        entry = TranslationEntry(context, source, translation, translation_type)
        messages[source] = entry
        return entry

    def get(self, context: str, source: str) -> Optional[TranslationEntry]:
        return self._contexts.get(context, {}).get(source)

    def lookup(self, context: str, source: str) -> str:
        """Translated text for (context, source), or the source itself."""
        entry = self.get(context, source)
        if entry is None or not entry.translation or entry.translation_type in ("obsolete", "vanished"):
            return source
        return entry.translation

    def contexts(self) -> List[str]:
        return list(self._contexts)

    def entries(self, context: Optional[str] = None) -> Iterator[TranslationEntry]:
        if context is not None:
            yield from self._contexts.get(context, {}).values()
            return
        for messages in self._contexts.values():
            yield from messages.values()

    def triples(self) -> List[Tuple[str, str, str]]:
        return [entry.as_triple() for entry in self.entries()]

    def validate(self) -> List[str]:
        """Problems that keep the catalog from being a finished localization."""
        problems = []
        for entry in self.entries():
            if not entry.source:
                problems.append(f"{entry.context}: empty source")
            if not entry.translation:
                problems.append(f"{entry.context}: missing translation for {entry.source!r}")
            elif entry.translation_type is not None:
                problems.append(
                    f"{entry.context}: translation for {entry.source!r} is {entry.translation_type}"
                )
        return problems

    def __len__(self):
        return sum(len(messages) for messages in self._contexts.values())

    def __contains__(self, key):
        context, source = key
        return self.get(context, source) is not None

    def __repr__(self):
        return f"TranslationCatalog(language={self.language!r}, messages={len(self)})"


def _escape(text: str) -> str:
    return escape(text, _TEXT_ENTITIES)
