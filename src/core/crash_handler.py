import sys
import traceback
from datetime import datetime

from PySide6.QtWidgets import QMessageBox, QApplication

from .config import Config
from .logger import setup_logger


def install_exception_handler():
    """Install global exception handler."""
    sys.excepthook = handle_exception


def write_crash_report(error_msg):
    """Keep the traceback next to the logs; returns the report path or None."""
    report = Config.LOGS_DIR / f"crash_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
    try:
        Config.LOGS_DIR.mkdir(parents=True, exist_ok=True)
        report.write_text(error_msg, encoding='utf-8')
    except OSError:
        return None
    return report


def handle_exception(exc_type, exc_value, exc_traceback):
    """Global exception handler."""
    # Ignore KeyboardInterrupt
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return

    logger = setup_logger("CrashHandler")
    logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))

    error_msg = "".join(traceback.format_exception(exc_type, exc_value, exc_traceback))
    report = write_crash_report(error_msg)
    if report is not None:
        logger.info(f"Crash report written to {report}")

    # Show error dialog if GUI is running
    app = QApplication.instance()
    if app:
        box = QMessageBox()
        box.setIcon(QMessageBox.Critical)
        box.setWindowTitle(app.applicationDisplayName() or Config.APP_NAME)
        text = f"An unexpected error occurred:\n{exc_value}"
        if report is not None:
            text += f"\n\nDetails: {report}"
        box.setText(text)
        box.setDetailedText(error_msg)
        box.setStandardButtons(QMessageBox.Ok)
        box.exec()
