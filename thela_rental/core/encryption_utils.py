from cryptography.fernet import Fernet, InvalidToken

from thela_rental.core.key_manager import get_or_create_key


class EncryptionUtil:
    def __init__(self, key: bytes | None = None):
        try:
            self.key = key if key is not None else get_or_create_key()
            # Validate key format before creating Fernet instance
            if not isinstance(self.key, bytes) or len(self.key) != 44:
                raise ValueError("Invalid key format or length")
            self.f = Fernet(self.key)
        except (ValueError, TypeError) as e:
            raise RuntimeError(f"Invalid encryption key: {e}")

    def encrypt_data(self, data: str) -> bytes:
        """Encrypts a string and returns bytes."""
        if not isinstance(data, str):
            raise TypeError("Data must be a string")
        return self.f.encrypt(data.encode("utf-8"))

    def decrypt_data(self, encrypted_data: bytes) -> str:
        """Decrypts bytes and returns a string. Raises ValueError for foreign or damaged tokens."""
        if not isinstance(encrypted_data, bytes):
            raise TypeError("Encrypted data must be bytes")
        try:
            return self.f.decrypt(encrypted_data).decode("utf-8")
        except (InvalidToken, UnicodeDecodeError) as e:
            raise ValueError(f"Decryption failed: {e!r}")
