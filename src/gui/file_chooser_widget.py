"""Drop zone for picking the icon theme package."""

from pathlib import Path

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QStackedWidget, QLabel, QToolButton, QPushButton,
    QFileDialog, QStyle, QProgressBar
)
from PySide6.QtCore import Qt, Signal, QSize, QRectF
from PySide6.QtGui import QIcon, QPainter, QPen, QFont

from ..core.convert_worker import ConvertWorker
from ..core.logger import setup_logger
from ..core.translation_manager import TrStrings
from .ui_styles import drop_zone_colors

logger = setup_logger("FileChooserWidget")

DEB_SUFFIX = ".deb"


def theme_icon(name: str, fallback: QStyle.StandardPixmap, widget: QWidget) -> QIcon:
    icon = QIcon.fromTheme(name)
    if icon.isNull():
        icon = widget.style().standardIcon(fallback)
    return icon


def is_deb_file(path: str) -> bool:
    return path.lower().endswith(DEB_SUFFIX)


class FileChooserWidget(QWidget):
    """Click or drop a single .deb file; shows verification state."""

    CHOOSER_PAGE_CHOOSE_FILE = 0
    CHOOSER_PAGE_CHECKING = 1
    CHOOSER_PAGE_SELECTED_FILE = 2
    CHOOSER_PAGE_CHECK_ERROR = 3

    file_changed = Signal(str)
    check_status_changed = Signal(bool)

    def __init__(self, worker: ConvertWorker, parent=None):
        super().__init__(parent)
        self.worker = worker
        self.file_path = ""
        self.is_drag_over = False
        self.is_pressed = False
        self.is_hover = False

        self.setup_ui()
        self.worker.check_finished.connect(self.on_check_finished)
        self.setAcceptDrops(True)

    def setup_ui(self):
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        self.stacked_widget = QStackedWidget(self)
        main_layout.addWidget(self.stacked_widget)

        # choose file page
        self.choose_file_page = QWidget()
        choose_layout = QVBoxLayout(self.choose_file_page)
        choose_layout.setContentsMargins(10, 10, 10, 10)

        self.convert_icon = QLabel()
        self.convert_icon.setPixmap(
            theme_icon("convert", QStyle.SP_ArrowUp, self).pixmap(64, 64))
        self.convert_icon.setAlignment(Qt.AlignCenter)

        self.choose_title_label = QLabel(TrStrings.DRAG_OR_CLICK())
        title_font = QFont(self.choose_title_label.font())
        title_font.setPointSizeF(title_font.pointSizeF() * 1.15)
        title_font.setBold(True)
        self.choose_title_label.setFont(title_font)
        self.choose_title_label.setAlignment(Qt.AlignCenter)

        self.choose_desc_label = QLabel(TrStrings.CONVERTS_TO_DCI())
        self.choose_desc_label.setAlignment(Qt.AlignCenter)
        self.choose_desc_label.setStyleSheet("color: #888;")

        choose_layout.addStretch()
        choose_layout.addWidget(self.convert_icon)
        choose_layout.addWidget(self.choose_title_label)
        choose_layout.addWidget(self.choose_desc_label)
        choose_layout.addStretch()
        self.stacked_widget.addWidget(self.choose_file_page)

        # checking page
        self.checking_page = QWidget()
        checking_layout = QVBoxLayout(self.checking_page)
        checking_layout.setContentsMargins(10, 10, 10, 10)
        checking_layout.setSpacing(10)

        self.checking_spinner = QProgressBar()
        self.checking_spinner.setRange(0, 0)
        self.checking_spinner.setTextVisible(False)
        self.checking_spinner.setFixedSize(120, 6)
        self.checking_label = QLabel(TrStrings.VERIFYING())
        self.checking_label.setAlignment(Qt.AlignCenter)

        checking_layout.addStretch()
        checking_layout.addWidget(self.checking_spinner, 0, Qt.AlignHCenter)
        checking_layout.addWidget(self.checking_label)
        checking_layout.addStretch()
        self.stacked_widget.addWidget(self.checking_page)

        # selected file page
        self.selected_file_page = QWidget()
        selected_layout = QVBoxLayout(self.selected_file_page)
        selected_layout.setContentsMargins(10, 10, 10, 10)
        selected_layout.setSpacing(10)

        icon_holder = QWidget()
        icon_holder.setFixedSize(72, 72)
        icon_holder_layout = QVBoxLayout(icon_holder)
        icon_holder_layout.setContentsMargins(0, 0, 0, 0)
        self.deb_file_icon = QLabel()
        self.deb_file_icon.setPixmap(
            theme_icon("deb", QStyle.SP_FileIcon, self).pixmap(64, 64))
        icon_holder_layout.addWidget(self.deb_file_icon, 0, Qt.AlignCenter)

        self.del_button = QToolButton(icon_holder)
        self.del_button.setFixedSize(18, 18)
        self.del_button.setIconSize(QSize(18, 18))
        self.del_button.setIcon(theme_icon("close", QStyle.SP_TitleBarCloseButton, self))
        self.del_button.setAutoRaise(True)
        self.del_button.move(icon_holder.width() - self.del_button.width(), 0)
        self.del_button.clicked.connect(self.clear_file)

        self.deb_file_name_label = QLabel("")
        self.deb_file_name_label.setAlignment(Qt.AlignCenter)

        selected_layout.addStretch()
        selected_layout.addWidget(icon_holder, 0, Qt.AlignHCenter)
        selected_layout.addWidget(self.deb_file_name_label, 0, Qt.AlignHCenter)
        selected_layout.addStretch()
        self.stacked_widget.addWidget(self.selected_file_page)

        # check error page
        self.check_error_page = QWidget()
        error_layout = QVBoxLayout(self.check_error_page)
        error_layout.setContentsMargins(10, 10, 10, 10)
        error_layout.setSpacing(10)

        self.error_icon = QLabel()
        self.error_icon.setPixmap(
            theme_icon("dialog-error", QStyle.SP_MessageBoxCritical, self).pixmap(40, 40))
        self.error_label = QLabel(TrStrings.ICON_THEMES_ONLY())
        self.error_label.setAlignment(Qt.AlignCenter)
        self.reselect_button = QPushButton(TrStrings.REIMPORT())
        self.reselect_button.setFlat(True)
        self.reselect_button.setCursor(Qt.PointingHandCursor)
        self.reselect_button.setFixedWidth(120)
        self.reselect_button.clicked.connect(
            lambda: self.stacked_widget.setCurrentIndex(self.CHOOSER_PAGE_CHOOSE_FILE))

        error_layout.addStretch()
        error_layout.addWidget(self.error_icon, 0, Qt.AlignHCenter)
        error_layout.addWidget(self.error_label)
        error_layout.addWidget(self.reselect_button, 0, Qt.AlignHCenter)
        error_layout.addStretch()
        self.stacked_widget.addWidget(self.check_error_page)

        self.stacked_widget.setCurrentIndex(self.CHOOSER_PAGE_CHOOSE_FILE)
        self.stacked_widget.currentChanged.connect(lambda _: self.update())

    def get_file_path(self) -> str:
        return self.file_path

    def current_page(self) -> int:
        return self.stacked_widget.currentIndex()

    def on_check_finished(self, ok: bool):
        logger.info(f"check deb finished: {ok}")
        if ok:
            self.stacked_widget.setCurrentIndex(self.CHOOSER_PAGE_SELECTED_FILE)
        else:
            self.stacked_widget.setCurrentIndex(self.CHOOSER_PAGE_CHECK_ERROR)
        self.check_status_changed.emit(ok)

    def select_file(self, file_path: str):
        if not file_path:
            return

        self.file_path = file_path
        self.deb_file_name_label.setText(Path(file_path).name)
        self.stacked_widget.setCurrentIndex(self.CHOOSER_PAGE_CHECKING)
        self.worker.clear()
        self.worker.set_deb_file_path(file_path)
        self.worker.request_check_deb_valid()
        self.file_changed.emit(file_path)

    def clear_file(self):
        self.file_path = ""
        self.deb_file_name_label.setText("")
        self.stacked_widget.setCurrentIndex(self.CHOOSER_PAGE_CHOOSE_FILE)
        self.worker.clear()
        self.file_changed.emit("")

    def show_error(self):
        self.stacked_widget.setCurrentIndex(self.CHOOSER_PAGE_CHECK_ERROR)

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------
    def _paint_state(self) -> str:
        page = self.current_page()
        if page == self.CHOOSER_PAGE_CHOOSE_FILE:
            if self.is_pressed or self.is_drag_over:
                return "active"
            if self.is_hover:
                return "hover"
        elif page == self.CHOOSER_PAGE_CHECK_ERROR:
            return "error"
        elif page == self.CHOOSER_PAGE_SELECTED_FILE and self.is_drag_over:
            return "active"
        return "normal"

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)

        border, background = drop_zone_colors(self._paint_state())
        pen = QPen(border)
        pen.setWidth(2)
        pen.setStyle(Qt.DotLine)
        painter.setPen(pen)
        painter.setBrush(background if background is not None else Qt.NoBrush)
        painter.drawRoundedRect(QRectF(self.rect().adjusted(1, 1, -1, -1)), 6, 6)
        painter.end()

        super().paintEvent(event)

    # ------------------------------------------------------------------
    # Mouse and drag & drop
    # ------------------------------------------------------------------
    def enterEvent(self, event):
        self.setCursor(Qt.PointingHandCursor)
        self.is_hover = True
        self.update()
        super().enterEvent(event)

    def leaveEvent(self, event):
        self.unsetCursor()
        self.is_hover = False
        self.update()
        super().leaveEvent(event)

    def mousePressEvent(self, event):
        self.is_pressed = True
        self.update()
        super().mousePressEvent(event)

    def mouseReleaseEvent(self, event):
        self.is_pressed = False
        self.update()
        if self.current_page() == self.CHOOSER_PAGE_CHOOSE_FILE:
            file_path, _ = QFileDialog.getOpenFileName(
                self, TrStrings.SELECT_THEME_FILE(), "", "theme deb (*.deb)")
            if file_path:
                if is_deb_file(file_path):
                    self.select_file(file_path)
                else:
                    self.show_error()
        super().mouseReleaseEvent(event)

    @staticmethod
    def _single_local_deb(mime_data):
        """The dropped path when the drag carries exactly one local .deb, else None."""
        if not mime_data.hasUrls():
            return None
        urls = mime_data.urls()
        if len(urls) != 1:
            return None
        file_path = urls[0].toLocalFile()
        return file_path if is_deb_file(file_path) else None

    def dragEnterEvent(self, event):
        # Only a single .deb file is accepted
        if self._single_local_deb(event.mimeData()) is not None:
            event.acceptProposedAction()
            self.is_drag_over = True
            self.update()
            return
        super().dragEnterEvent(event)

    def dragLeaveEvent(self, event):
        self.is_drag_over = False
        self.update()
        super().dragLeaveEvent(event)

    def dropEvent(self, event):
        self.is_drag_over = False
        if event.mimeData().hasUrls():
            file_path = self._single_local_deb(event.mimeData())
            if file_path is not None:
                self.select_file(file_path)
                event.acceptProposedAction()
            else:
                self.show_error()
        self.update()
        super().dropEvent(event)
