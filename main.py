#!/usr/bin/env python3
"""
deepin-xdgicon-convert
Converts XDG icon theme packages to DCI icon theme packages.
"""

import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication
from PySide6.QtGui import QIcon
from PySide6.QtCore import QLockFile, QDir

from src.core.config import Config
from src.core.crash_handler import install_exception_handler
from src.core.logger import setup_logger
from src.core.translation_manager import TranslationManager, TrStrings
from src.core.version import get_version, format_version_banner
from src.gui.main_window import MainWindow

logger = setup_logger("Startup")


def main():
    """Entry point for the application."""
    Config.ensure_directories()
    install_exception_handler()

    app = QApplication(sys.argv)
    app.setApplicationName(Config.APP_NAME)
    app.setApplicationVersion(get_version()[0])
    app.setWindowIcon(QIcon.fromTheme(Config.APP_NAME))

    translation_manager = TranslationManager()
    app.setApplicationDisplayName(TrStrings.APP_DISPLAY_NAME())

    lock_file = QLockFile(str(Path(QDir.tempPath()) / f"{Config.APP_NAME}.lock"))
    if not lock_file.tryLock(100):
        logger.warning(f"{Config.APP_NAME} is running...")
        return 1

    logger.info(format_version_banner())
    logger.info(f"UI language: {translation_manager.get_current_language()}")

    window = MainWindow()
    window.resize(450, 360)
    screen = app.primaryScreen()
    if screen is not None:
        frame = window.frameGeometry()
        frame.moveCenter(screen.availableGeometry().center())
        window.move(frame.topLeft())
    window.show()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
