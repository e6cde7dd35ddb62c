"""
Translation utilities using QCoreApplication.translate().
Provides Qt translation support backed by compiled .qm files or, when only
the Linguist source is available, by the parsed .ts catalog.
"""

from pathlib import Path
from typing import Optional

from PySide6.QtCore import QCoreApplication, QTranslator, QLocale

from .config import Config
from .logger import setup_logger
from .ts_catalog import TranslationCatalog, TsFormatError

logger = setup_logger("TranslationManager")

SOURCE_LANGUAGE = "en"
CATALOG_PREFIX = Config.APP_NAME


class CatalogTranslator(QTranslator):
    """QTranslator answering from an in-memory TranslationCatalog."""

    def __init__(self, catalog: TranslationCatalog, parent=None):
        super().__init__(parent)
        self.catalog = catalog

    def translate(self, context, source_text, disambiguation=None, n=-1):
        return self.catalog.lookup(context, source_text)

    def isEmpty(self):
        return len(self.catalog) == 0

    def language(self):
        return self.catalog.language


class TranslationManager:
    """Manages Qt translations using QCoreApplication.translate()."""

    def __init__(self, locale: Optional[str] = None, translations_dirs=None):
        self.translator: Optional[QTranslator] = None
        self.catalog: Optional[TranslationCatalog] = None
        if translations_dirs is None:
            translations_dirs = Config.get_translations_dirs()
        self.translations_dirs = [Path(d) for d in translations_dirs]

        self.current_language = locale or self._load_saved_language()
        self._load_translation()

    def _load_saved_language(self) -> str:
        """Saved language from config, else the system locale."""
        try:
            language = Config.load_config().get("language")
            if language:
                return language
        except Exception as e:
            logger.error(f"Failed to load saved language: {e}")
        return QLocale.system().name()

    def _save_language(self):
        """Save current language to config."""
        try:
            Config.update_config(language=self.current_language)
        except Exception as e:
            logger.error(f"Failed to save language: {e}")

    def _find_file(self, suffix: str) -> Optional[Path]:
        name = f"{CATALOG_PREFIX}_{self.current_language}{suffix}"
        for directory in self.translations_dirs:
            candidate = directory / name
            if candidate.exists():
                return candidate
        return None

    def _load_translation(self):
        """Load translation file for current language."""
        app = QCoreApplication.instance()

        # Remove existing translator
        if app and self.translator is not None:
            app.removeTranslator(self.translator)
        self.translator = None
        self.catalog = None

        if self.is_source_language():
            return

        ts_file = self._find_file(".ts")
        if ts_file is not None:
            try:
                self.catalog = TranslationCatalog.load(ts_file)
            except TsFormatError as e:
                logger.error(f"Failed to parse translation catalog {ts_file}: {e}")

        qm_file = self._find_file(".qm")
        translator = None
        if qm_file is not None:
            qm_translator = QTranslator()
            if qm_translator.load(str(qm_file)):
                translator = qm_translator
            else:
                logger.warning(f"Failed to load compiled translation: {qm_file}")
        if translator is None and self.catalog is not None:
            translator = CatalogTranslator(self.catalog)

        if translator is None:
            logger.warning(f"No translation found for: {self.current_language}")
            return

        self.translator = translator
        if app:
            app.installTranslator(self.translator)
            logger.info(f"Loaded translation: {self.current_language}")

    def is_source_language(self) -> bool:
        return self.current_language.split("_")[0] == SOURCE_LANGUAGE

    def set_language(self, language_code: str):
        """Set application language."""
        self.current_language = language_code
        self._save_language()
        self._load_translation()
        logger.info(f"Language changed to: {language_code}")

    def get_current_language(self) -> str:
        """Get current language code."""
        return self.current_language

    def lookup(self, context: str, text: str) -> str:
        """Translate from the loaded catalog, falling back to the source text."""
        if self.catalog is None:
            return text
        return self.catalog.lookup(context, text)


def tr(context: str, text: str, disambiguation: str = None, n: int = -1) -> str:
    """
    Translation function compatible with pylupdate.

    Args:
        context: Translation context (usually class name)
        text: Text to translate
        disambiguation: Disambiguation text for ambiguous translations
        n: Number for plural forms

    Returns:
        Translated text, or the text itself when no translation exists
    """
    return QCoreApplication.translate(context, text, disambiguation, n) or text


class TrStrings:
    """Common translated strings."""

    # Application
    APP_DISPLAY_NAME = lambda: tr("QObject", "Theme Icon Converter")

    # File chooser
    DRAG_OR_CLICK = lambda: tr("FileChooserWidget", "Drag or click to import theme file")
    SELECT_THEME_FILE = lambda: tr("FileChooserWidget", "Select theme file")
    CONVERTS_TO_DCI = lambda: tr("FileChooserWidget", "Converts to DCI format (.deb only) ")
    VERIFYING = lambda: tr("FileChooserWidget", "Verifying file, please wait...")
    ICON_THEMES_ONLY = lambda: tr("FileChooserWidget", "Supports icon theme packages only.")
    REIMPORT = lambda: tr("FileChooserWidget", "Re-import")

    # Main window
    SAVE_TO = lambda: tr("MainWindow", "Save to:")
    START_CONVERSION = lambda: tr("MainWindow", "Start Conversion")
    CONVERTING = lambda: tr("MainWindow", "Converting...")
    CONVERT_SUCCESS = lambda: tr("MainWindow", "Theme converted successfully!")
    OPEN_FILE_LOCATION = lambda: tr("MainWindow", "Open File Location")
    DONE = lambda: tr("MainWindow", "Done")
    CONVERT_FAILED = lambda: tr("MainWindow", "Theme conversion failed, please try again")
    RETRY = lambda: tr("MainWindow", "Retry")
    CANCEL = lambda: tr("MainWindow", "Cancel")
