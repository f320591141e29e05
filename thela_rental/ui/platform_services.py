"""
Qt implementations of the platform capabilities used by the core.

- ``QtDocumentPicker``: native open-file dialog.
- ``QtUrlOpener``: hands file URIs and map links to the desktop.
- ``QtNotificationService``: one-shot reminders shown through the system tray,
  or as an InfoBar on the main window when no tray is available.
"""

import logging
import mimetypes
import os
import uuid
from datetime import datetime
from typing import Callable, Dict, Optional

from PyQt5.QtCore import QObject, Qt, QTimer, QUrl, pyqtSignal
from PyQt5.QtGui import QDesktopServices
from PyQt5.QtWidgets import QFileDialog, QSystemTrayIcon
from qfluentwidgets import FluentIcon, InfoBar, InfoBarPosition

from thela_rental.core.errors import SchedulingError
from thela_rental.core.models import FileReference
from thela_rental.core.services import NotificationRequest

DOCUMENT_FILTER = "Documents (*.pdf *.png *.jpg *.jpeg *.webp);;All Files (*)"


class QtDocumentPicker:
    def __init__(self, parent=None):
        self.parent = parent

    def pick_document(self) -> Optional[FileReference]:
        options = QFileDialog.Options()
        file_path, _ = QFileDialog.getOpenFileName(
            self.parent, "Select Address Proof", "", DOCUMENT_FILTER, options=options
        )
        if not file_path:
            return None
        try:
            size = os.path.getsize(file_path)
        except OSError:
            size = None
        return FileReference(
            name=os.path.basename(file_path),
            uri=QUrl.fromLocalFile(file_path).toString(),
            mime_type=mimetypes.guess_type(file_path)[0],
            size=size,
        )


class QtUrlOpener:
    def open_url(self, uri: str) -> None:
        url = QUrl(uri) if "://" in uri or uri.startswith(("geo:", "mailto:")) else QUrl.fromUserInput(uri)
        if not QDesktopServices.openUrl(url):
            logging.warning(f"The desktop could not open {uri}")


class QtNotificationService(QObject):
    """Keeps pending notifications in memory and fires them from a polling timer."""

    notification_fired = pyqtSignal(str, str)  # title, body

    def __init__(
        self,
        parent_window=None,
        poll_interval_ms: int = 30_000,
        clock: Callable[[], datetime] = datetime.now,
    ):
        super().__init__(parent_window)
        self._window = parent_window
        self._clock = clock
        self._pending: Dict[str, NotificationRequest] = {}

        self._tray = None
        if QSystemTrayIcon.isSystemTrayAvailable():
            self._tray = QSystemTrayIcon(FluentIcon.RINGER.icon(), self)
            self._tray.setToolTip("Thela Rental Manager")
            self._tray.show()
        else:
            logging.info("System tray not available; reminders will be shown inside the window.")

        self._timer = QTimer(self)
        self._timer.setInterval(poll_interval_ms)
        self._timer.timeout.connect(self.fire_due_notifications)
        self._timer.start()

    def schedule_notification(self, request: NotificationRequest) -> str:
        if not request.title:
            raise SchedulingError("Notification title must not be empty.")
        notification_id = uuid.uuid4().hex
        self._pending[notification_id] = request
        # Catch reminders that are already due without waiting a full poll interval.
        QTimer.singleShot(0, self.fire_due_notifications)
        return notification_id

    def cancel_notification(self, notification_id: str) -> None:
        self._pending.pop(notification_id, None)

    def pending_count(self) -> int:
        return len(self._pending)

    def fire_due_notifications(self):
        now = self._clock()
        due_ids = [nid for nid, request in self._pending.items() if request.trigger <= now]
        for nid in due_ids:
            request = self._pending.pop(nid)
            self._show(request)

    def _show(self, request: NotificationRequest):
        logging.info(f"Showing reminder: {request.title}")
        self.notification_fired.emit(request.title, request.body)
        if self._tray is not None:
            self._tray.showMessage(request.title, request.body, QSystemTrayIcon.Information, 10_000)
        elif self._window is not None:
            InfoBar.info(
                title=request.title,
                content=request.body,
                orient=Qt.Horizontal,
                isClosable=True,
                position=InfoBarPosition.TOP_RIGHT,
                duration=-1,  # stay until closed
                parent=self._window,
            )

    def stop(self):
        self._timer.stop()
        if self._tray is not None:
            self._tray.hide()
