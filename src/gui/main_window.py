"""Main application window."""

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QStackedWidget, QLabel,
    QLineEdit, QPushButton, QToolButton, QProgressBar, QFileDialog, QStyle
)
from PySide6.QtCore import Qt, QUrl, QStandardPaths
from PySide6.QtGui import QDesktopServices

from ..core.config import Config
from ..core.convert_worker import ConvertWorker
from ..core.logger import setup_logger
from ..core.translation_manager import TrStrings
from .file_chooser_widget import FileChooserWidget, theme_icon
from .ui_styles import primary_button_style

logger = setup_logger("MainWindow")


class MainWindow(QMainWindow):
    """Main application window."""

    PAGE_FILE_CHOOSER = 0
    PAGE_CONVERTING = 1
    PAGE_CONVERT_SUCCESS = 2
    PAGE_CONVERT_FAIL = 3

    def __init__(self, worker: ConvertWorker = None):
        super().__init__()
        self.config = Config.load_config()
        self.worker = worker or ConvertWorker(self)
        self.setWindowTitle(TrStrings.APP_DISPLAY_NAME())
        self.setup_ui()

        self.file_chooser_widget.check_status_changed.connect(self.convert_button.setEnabled)
        self.file_chooser_widget.file_changed.connect(
            lambda path: self.convert_button.setEnabled(False))
        self.worker.convert_progress_changed.connect(self.progress_bar.setValue)
        self.worker.convert_finished.connect(self.on_convert_finished)

    def setup_ui(self):
        self.stacked_widget = QStackedWidget(self)
        self.setCentralWidget(self.stacked_widget)
        self.init_file_chooser_page()
        self.init_converting_page()
        self.init_convert_success_page()
        self.init_convert_fail_page()

        self.stacked_widget.setCurrentIndex(self.PAGE_FILE_CHOOSER)

    def init_file_chooser_page(self):
        self.file_chooser_page = QWidget()
        layout = QVBoxLayout(self.file_chooser_page)
        layout.setSpacing(12)
        layout.setContentsMargins(20, 20, 20, 20)

        self.file_chooser_widget = FileChooserWidget(self.worker)
        self.file_chooser_widget.setFixedSize(410, 190)

        dir_layout = QHBoxLayout()
        self.output_dir_edit = QLineEdit()
        self.output_dir_edit.setText(self.default_output_dir())
        self.browse_button = QToolButton()
        self.browse_button.setIcon(theme_icon("folder", QStyle.SP_DirOpenIcon, self))
        self.browse_button.clicked.connect(self.browse_output_dir)
        dir_layout.addWidget(QLabel(TrStrings.SAVE_TO()))
        dir_layout.addWidget(self.output_dir_edit)
        dir_layout.addWidget(self.browse_button)

        self.convert_button = QPushButton(TrStrings.START_CONVERSION())
        self.convert_button.setFixedWidth(220)
        self.convert_button.setEnabled(False)
        self.convert_button.setStyleSheet(primary_button_style())
        self.convert_button.clicked.connect(self.start_conversion)

        layout.addWidget(self.file_chooser_widget, 0, Qt.AlignHCenter)
        layout.addLayout(dir_layout)
        layout.addWidget(self.convert_button, 0, Qt.AlignHCenter)
        self.stacked_widget.addWidget(self.file_chooser_page)

    def init_converting_page(self):
        self.converting_page = QWidget()
        layout = QVBoxLayout(self.converting_page)
        layout.setContentsMargins(50, 90, 50, 50)
        layout.setSpacing(20)

        self.progress_bar = QProgressBar()
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setValue(0)
        layout.addWidget(self.progress_bar)

        self.converting_label = QLabel(TrStrings.CONVERTING())
        self.converting_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.converting_label)
        layout.addStretch()

        self.stacked_widget.addWidget(self.converting_page)

    def init_convert_success_page(self):
        self.convert_success_page = QWidget()
        layout = QVBoxLayout(self.convert_success_page)
        layout.setContentsMargins(10, 50, 10, 30)
        layout.setSpacing(10)

        success_icon = QLabel()
        success_icon.setPixmap(
            theme_icon("icon_success", QStyle.SP_DialogApplyButton, self).pixmap(96, 96))
        layout.addWidget(success_icon, 0, Qt.AlignHCenter)

        self.convert_success_label = QLabel(TrStrings.CONVERT_SUCCESS())
        self.convert_success_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.convert_success_label)

        self.open_file_button = QPushButton(TrStrings.OPEN_FILE_LOCATION())
        self.open_file_button.setFixedWidth(180)
        self.finish_button = QPushButton(TrStrings.DONE())
        self.finish_button.setFixedWidth(180)
        self.finish_button.setStyleSheet(primary_button_style())

        layout.addStretch()
        layout.addWidget(self.open_file_button, 0, Qt.AlignHCenter)
        layout.addWidget(self.finish_button, 0, Qt.AlignHCenter)

        self.finish_button.clicked.connect(
            lambda: self.stacked_widget.setCurrentIndex(self.PAGE_FILE_CHOOSER))
        self.open_file_button.clicked.connect(self.open_output_dir)
        self.stacked_widget.addWidget(self.convert_success_page)

    def init_convert_fail_page(self):
        self.convert_fail_page = QWidget()
        layout = QVBoxLayout(self.convert_fail_page)
        layout.setContentsMargins(10, 50, 10, 30)
        layout.setSpacing(10)

        fail_icon = QLabel()
        fail_icon.setPixmap(
            theme_icon("icon_fail", QStyle.SP_MessageBoxCritical, self).pixmap(96, 96))
        layout.addWidget(fail_icon, 0, Qt.AlignHCenter)

        self.convert_fail_label = QLabel(TrStrings.CONVERT_FAILED())
        self.convert_fail_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.convert_fail_label)

        self.retry_button = QPushButton(TrStrings.RETRY())
        self.retry_button.setFixedWidth(180)
        self.retry_button.setStyleSheet(primary_button_style())
        self.cancel_button = QPushButton(TrStrings.CANCEL())
        self.cancel_button.setFixedWidth(180)

        layout.addStretch()
        layout.addWidget(self.retry_button, 0, Qt.AlignHCenter)
        layout.addWidget(self.cancel_button, 0, Qt.AlignHCenter)

        self.retry_button.clicked.connect(self.start_conversion)
        self.cancel_button.clicked.connect(
            lambda: self.stacked_widget.setCurrentIndex(self.PAGE_FILE_CHOOSER))
        self.stacked_widget.addWidget(self.convert_fail_page)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def default_output_dir(self) -> str:
        return (self.config.get("last_output_dir")
                or QStandardPaths.writableLocation(QStandardPaths.DesktopLocation))

    def output_dir(self) -> str:
        return self.output_dir_edit.text().strip()

    def browse_output_dir(self):
        directory = QFileDialog.getExistingDirectory(self, "", self.output_dir())
        if directory:
            self.output_dir_edit.setText(directory)

    def start_conversion(self):
        out_dir = self.output_dir()
        try:
            self.config = Config.update_config(last_output_dir=out_dir)
        except OSError as e:
            logger.warning(f"Failed to remember output dir: {e}")

        self.progress_bar.setValue(0)
        self.stacked_widget.setCurrentIndex(self.PAGE_CONVERTING)
        self.worker.set_deb_file_path(self.file_chooser_widget.get_file_path())
        self.worker.request_convert_deb(out_dir)

    def on_convert_finished(self, ok: bool):
        logger.info(f"convert finished: {ok}")
        if ok:
            self.stacked_widget.setCurrentIndex(self.PAGE_CONVERT_SUCCESS)
        else:
            self.stacked_widget.setCurrentIndex(self.PAGE_CONVERT_FAIL)
        self.worker.clear()

    def open_output_dir(self):
        QDesktopServices.openUrl(QUrl.fromLocalFile(self.output_dir()))

    def closeEvent(self, event):
        self.worker.shutdown()
        super().closeEvent(event)
