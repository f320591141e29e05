import logging
from typing import Optional

from thela_rental.core.models import FileReference, RentalRecord
from thela_rental.core.services import DocumentPicker, UrlOpener


class FileReferenceHandler:
    """
    Picks proof documents and opens stored references.

    References are opaque: nothing here reads, validates or copies the file.
    """

    def __init__(self, picker: DocumentPicker, opener: UrlOpener):
        self.picker = picker
        self.opener = opener

    def pick_file(self, form=None) -> Optional[FileReference]:
        ref = self.picker.pick_document()
        if ref is None:
            return None
        if form is not None:
            form.attach_file(ref)
        logging.info(f"Picked address proof document: {ref.name}")
        return ref

    def open_file(self, ref: Optional[FileReference]) -> bool:
        if ref is None or not ref.uri:
            return False
        self.opener.open_url(ref.uri)
        return True

    def open_location(self, record: RentalRecord) -> bool:
        link = (record.location_link or "").strip()
        if not link:
            return False
        self.opener.open_url(link)
        return True
