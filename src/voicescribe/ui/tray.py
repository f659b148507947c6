"""
System tray icon and menu using PySide6.

Provides a system tray icon with status indicator and context menu.
"""

from typing import Dict, Optional

from PySide6.QtCore import QObject, Qt, Signal
from PySide6.QtGui import QAction, QBrush, QColor, QIcon, QPainter, QPen, QPixmap
from PySide6.QtWidgets import QMenu, QSystemTrayIcon

from ..core.session.state import SessionStatus

STATUS_COLORS: Dict[SessionStatus, str] = {
    SessionStatus.IDLE: "#4CAF50",
    SessionStatus.RECORDING: "#F44336",
    SessionStatus.PROCESSING: "#FF9800",
}

STATUS_TEXTS: Dict[SessionStatus, str] = {
    SessionStatus.IDLE: "Ready - Hold hotkey to speak",
    SessionStatus.RECORDING: "Recording...",
    SessionStatus.PROCESSING: "Processing...",
}


class SystemTray(QObject):
    """
    System tray icon with context menu.

    Signals:
        settings_requested: Emitted when user clicks "Settings"
        reload_requested: Emitted when user clicks "Reload Settings"
        quit_requested: Emitted when user clicks "Quit"
    """

    settings_requested = Signal()
    reload_requested = Signal()
    quit_requested = Signal()

    def __init__(self, app_name: str, parent: Optional[QObject] = None):
        super().__init__(parent)

        self._app_name = app_name
        self._status = SessionStatus.IDLE
        self._tray_icon = QSystemTrayIcon(self)
        self._menu = QMenu()

        self._status_action = QAction(STATUS_TEXTS[self._status], self._menu)
        self._status_action.setEnabled(False)
        self._menu.addAction(self._status_action)

        self._last_action = QAction("Copy last transcription", self._menu)
        self._last_action.setEnabled(False)
        self._menu.addAction(self._last_action)

        self._menu.addSeparator()

        settings_action = QAction("Settings...", self._menu)
        settings_action.triggered.connect(self.settings_requested.emit)
        self._menu.addAction(settings_action)

        reload_action = QAction("Reload Settings", self._menu)
        reload_action.triggered.connect(self.reload_requested.emit)
        self._menu.addAction(reload_action)

        self._menu.addSeparator()

        quit_action = QAction("Quit", self._menu)
        quit_action.triggered.connect(self.quit_requested.emit)
        self._menu.addAction(quit_action)

        self._tray_icon.setContextMenu(self._menu)
        self._update_icon()

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def copy_last_action(self) -> QAction:
        return self._last_action

    def show(self) -> None:
        self._tray_icon.show()

    def hide(self) -> None:
        self._tray_icon.hide()

    def set_status(self, status: SessionStatus) -> None:
        self._status = status
        self._status_action.setText(STATUS_TEXTS[status])
        self._update_icon()

    def set_last_transcription(self, text: str) -> None:
        self._last_action.setEnabled(bool(text))

    def show_message(self, title: str, body: str, error: bool = True) -> None:
        icon = (
            QSystemTrayIcon.MessageIcon.Warning
            if error
            else QSystemTrayIcon.MessageIcon.Information
        )
        self._tray_icon.showMessage(title, body, icon, 5000)

    def _update_icon(self) -> None:
        size = 22
        pixmap = QPixmap(size, size)
        pixmap.fill(Qt.GlobalColor.transparent)

        painter = QPainter(pixmap)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        color = QColor(STATUS_COLORS[self._status])
        painter.setBrush(QBrush(color))
        painter.setPen(QPen(color.darker(120), 1))

        margin = 2
        painter.drawEllipse(margin, margin, size - 2 * margin, size - 2 * margin)
        painter.end()

        self._tray_icon.setIcon(QIcon(pixmap))
        self._tray_icon.setToolTip(f"{self._app_name} - {STATUS_TEXTS[self._status]}")
