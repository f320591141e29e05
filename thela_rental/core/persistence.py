import json
import logging
from typing import Iterable, List

from thela_rental.core.db_manager import DBManager
from thela_rental.core.encryption_utils import EncryptionUtil
from thela_rental.core.errors import PersistenceError
from thela_rental.core.models import RentalRecord

STORAGE_KEY = "carts"


def serialize_records(records: Iterable[RentalRecord]) -> str:
    # Fixed key order and separators keep the stored blob byte-stable.
    return json.dumps([record.to_dict() for record in records], ensure_ascii=False)


def deserialize_records(payload: str) -> List[RentalRecord]:
    """Parse a stored blob. Raises ValueError/TypeError when it is not a list of records."""
    data = json.loads(payload)
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of records, got {type(data).__name__}")
    return [RentalRecord.from_dict(item) for item in data]


class PersistenceAdapter:
    """Reads and writes the whole record collection as one blob in a named storage slot."""

    def __init__(self, db_manager: DBManager, key: str = STORAGE_KEY, encryption_util: EncryptionUtil | None = None):
        self.db_manager = db_manager
        self.key = key
        self.encryption_util = encryption_util

    def _decode(self, raw) -> str:
        if isinstance(raw, str):
            return raw
        if self.encryption_util is not None:
            try:
                return self.encryption_util.decrypt_data(bytes(raw))
            except ValueError:
                # Blob written before encryption was switched on.
                logging.info("Stored records are not encrypted; reading them as plain text.")
        return bytes(raw).decode("utf-8")

    def load(self) -> List[RentalRecord]:
        """
        Return the stored records, or an empty list if none are stored.

        A corrupt blob is logged and treated as empty. Failing to read the
        storage itself raises PersistenceError.
        """
        raw = self.db_manager.get_item(self.key)
        if raw is None:
            return []

        try:
            records = deserialize_records(self._decode(raw))
        except (ValueError, TypeError) as e:
            logging.warning(f"Stored records under '{self.key}' are unreadable ({e}); starting with an empty list.")
            return []

        logging.info(f"Loaded {len(records)} rental records from local storage.")
        return records

    def save(self, records: Iterable[RentalRecord]):
        """Replace the stored blob with ``records``. Raises PersistenceError on failure."""
        payload = serialize_records(records)
        if self.encryption_util is not None:
            value = self.encryption_util.encrypt_data(payload)
        else:
            value = payload
        try:
            self.db_manager.set_item(self.key, value)
        except PersistenceError:
            logging.error(f"Failed to save rental records under '{self.key}'.")
            raise
