"""
Platform capabilities the core depends on.

The desktop window provides Qt implementations (see ``thela_rental.ui.platform_services``);
tests provide in-memory fakes.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from thela_rental.core.models import FileReference


@dataclass(frozen=True)
class NotificationRequest:
    title: str
    body: str
    trigger: datetime  # naive, local time


class NotificationService(Protocol):
    def schedule_notification(self, request: NotificationRequest) -> str:
        """Queue a one-shot notification and return an identifier for it."""
        ...

    def cancel_notification(self, notification_id: str) -> None:
        ...


class DocumentPicker(Protocol):
    def pick_document(self) -> Optional[FileReference]:
        """Return the picked document, or None if the user cancelled."""
        ...


class UrlOpener(Protocol):
    def open_url(self, uri: str) -> None:
        ...
