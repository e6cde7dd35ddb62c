"""Runs ConvertHandler on a background QThread."""

import shutil

from PySide6.QtCore import QObject, QThread, Signal

from .convert_handler import ConvertHandler
from .logger import setup_logger

logger = setup_logger("ConvertWorker")


class ConvertWorker(QObject):
    """Front end for the GUI; requests are queued to the handler's thread."""

    check_finished = Signal(bool)
    convert_finished = Signal(bool)
    convert_progress_changed = Signal(int)

    # Internal, crosses the thread boundary as queued connections
    _check_requested = Signal(str)
    _convert_requested = Signal(str, str)

    def __init__(self, parent=None, work_dir=None):
        super().__init__(parent)
        self.deb_file_path = ""
        self.theme_id = ""

        self.worker_thread = QThread(self)
        self.handler = ConvertHandler(work_dir)
        self.work_dir = self.handler.work_dir
        self.handler.moveToThread(self.worker_thread)
        self.worker_thread.finished.connect(self.handler.deleteLater)

        self._check_requested.connect(self.handler.check_deb_valid)
        self._convert_requested.connect(self.handler.xdg_icon_to_dci_deb)

        self.handler.check_finished.connect(self.check_finished)
        self.handler.convert_finished.connect(self.convert_finished)
        self.handler.convert_progress_changed.connect(self.convert_progress_changed)

        self.worker_thread.start()
        self.clear()

    def set_deb_file_path(self, deb_file_path: str):
        logger.info(f"set deb file path: {deb_file_path}")
        self.deb_file_path = deb_file_path

    def request_check_deb_valid(self):
        logger.info(f"request check deb valid: {self.deb_file_path}")
        self._check_requested.emit(self.deb_file_path)

    def request_convert_deb(self, out_dir: str):
        logger.info(f"request convert deb: {self.deb_file_path} {out_dir}")
        self._convert_requested.emit(self.deb_file_path, out_dir)

    def clear(self):
        """Reset state and remove temporary files."""
        logger.info("clear status and temp files")
        self.deb_file_path = ""
        self.theme_id = ""
        shutil.rmtree(self.work_dir, ignore_errors=True)

    def shutdown(self):
        logger.debug("destroy ConvertWorker")
        self.worker_thread.quit()
        self.worker_thread.wait()
        self.clear()
