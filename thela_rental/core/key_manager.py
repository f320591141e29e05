import logging
import os

import keyring
import keyring.errors
from cryptography.fernet import Fernet

KEY_FILE_PATH = "thela_rental_storage.key"
SERVICE_ID = "ThelaRental_Storage_Key"
USERNAME = "default_user"


class KeyManager:
    """
    Keeps the Fernet key that encrypts the stored rental records.

    The OS keyring is tried first. When it is unavailable or refuses the key,
    the key lives in ``key_file_path`` readable only by the owner.
    """

    def __init__(self, key_file_path: str = KEY_FILE_PATH, use_keyring: bool = True):
        self.key_file_path = key_file_path
        self.use_keyring = use_keyring

    # ----------------------------------------------------------------- keyring

    def _read_keyring(self) -> bytes | None:
        if not self.use_keyring:
            return None
        try:
            stored = keyring.get_password(SERVICE_ID, USERNAME)
        except keyring.errors.KeyringError as e:
            logging.warning(f"Keyring unavailable ({e}); using the key file instead.")
            self.use_keyring = False
            return None
        return stored.encode() if stored else None

    def _write_keyring(self, key: bytes) -> bool:
        if not self.use_keyring:
            return False
        try:
            keyring.set_password(SERVICE_ID, USERNAME, key.decode())
        except keyring.errors.KeyringError as e:
            logging.warning(f"Keyring refused the storage key ({e}); writing it to {self.key_file_path}.")
            self.use_keyring = False
            return False
        return True

    # -------------------------------------------------------------------- file

    def _read_file(self) -> bytes | None:
        if not os.path.exists(self.key_file_path):
            return None
        try:
            with open(self.key_file_path, "rb") as key_file:
                return key_file.read().strip() or None
        except OSError as e:
            logging.error(f"Could not read key file {self.key_file_path}: {e}")
            return None

    def _write_file(self, key: bytes) -> bool:
        try:
            with open(self.key_file_path, "wb") as key_file:
                key_file.write(key)
            if os.name == 'posix':
                os.chmod(self.key_file_path, 0o600)
        except OSError as e:
            logging.error(f"Could not write key file {self.key_file_path}: {e}")
            return False
        return True

    def _discard(self):
        if self.use_keyring:
            try:
                keyring.delete_password(SERVICE_ID, USERNAME)
            except keyring.errors.PasswordDeleteError:
                pass
            except keyring.errors.KeyringError as e:
                logging.warning(f"Could not delete storage key from keyring: {e}")
        if os.path.exists(self.key_file_path):
            try:
                os.remove(self.key_file_path)
            except OSError as e:
                logging.warning(f"Could not delete key file {self.key_file_path}: {e}")

    # ------------------------------------------------------------------ public

    def get_or_create_key(self) -> bytes:
        """
        Return the stored key, generating and storing a new one when none is usable.

        A regenerated key cannot decrypt blobs written with the old one; the
        persistence layer then treats them as corrupt.
        """
        key = self._read_keyring() or self._read_file()

        if key is not None:
            try:
                Fernet(key)
            except ValueError as e:
                logging.warning(f"Stored encryption key is invalid ({e}); generating a new one.")
                self._discard()
                key = None

        if key is None:
            logging.info("No valid storage encryption key found. Generating a new one.")
            key = Fernet.generate_key()
            if not (self._write_keyring(key) or self._write_file(key)):
                raise RuntimeError("Failed to store the generated encryption key.")

        return key


_key_manager_instance = None


def get_or_create_key() -> bytes:
    """Get or create the storage key through a shared KeyManager."""
    global _key_manager_instance
    if _key_manager_instance is None:
        _key_manager_instance = KeyManager()
    return _key_manager_instance.get_or_create_key()
