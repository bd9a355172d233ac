"""
Field-level encryption for sensitive record attributes.

Uses Fernet (AES-128-CBC + HMAC-SHA256) with a random IV per call, so the
same plaintext encrypts to a different, self-contained token every time.
Several comma-separated keys enable rotation: encryption uses the first,
decryption accepts any.
"""

import base64
from typing import Optional, Union

from cryptography.fernet import Fernet, InvalidToken, MultiFernet
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from app.core.config import settings
from app.core.exceptions import DecryptionError, EncryptionError
from app.core.logging import get_logger

logger = get_logger(__name__)

_DEV_SALT = b"hr_personnel_dev_salt_v1"


class FieldEncryptor:
    """
    Encrypts and decrypts individual string fields.

    Usage:
        encryptor = FieldEncryptor()
        token = encryptor.encrypt("sensitive data")
        plaintext = encryptor.decrypt(token)
    """

    def __init__(self, encryption_key: Optional[str] = None):
        key_material = encryption_key or settings.ENCRYPTION_KEY

        if not key_material:
            if settings.is_production:
                raise EncryptionError(
                    "ENCRYPTION_KEY must be set in production. "
                    "Generate one with FieldEncryptor.generate_key()."
                )
            logger.warning(
                "ENCRYPTION_KEY not set. Using a key derived from SECRET_KEY. "
                "Set ENCRYPTION_KEY outside of development."
            )
            key_material = self._derive_key_from_secret(settings.SECRET_KEY)

        keys = [k.strip() for k in key_material.split(",") if k.strip()]
        self._fernet: Union[Fernet, MultiFernet]
        if len(keys) == 1:
            self._fernet = Fernet(keys[0].encode())
        else:
            self._fernet = MultiFernet([Fernet(k.encode()) for k in keys])

        logger.info(f"Field encryption initialized with {len(keys)} key(s)")

    @staticmethod
    def _derive_key_from_secret(secret: str) -> str:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=_DEV_SALT,
            iterations=100000,
        )
        return base64.urlsafe_b64encode(kdf.derive(secret.encode())).decode()

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a string value.

        Non-string values (e.g. numbers) are encrypted by their string form.
        Empty values are returned unchanged.

        Raises:
            EncryptionError: If encryption fails
        """
        if plaintext is None or plaintext == "":
            return plaintext

        try:
            return self._fernet.encrypt(str(plaintext).encode()).decode()
        except Exception as e:
            logger.error(f"Encryption failed: {e}")
            raise EncryptionError(f"Failed to encrypt data: {e}") from e

    def decrypt(self, ciphertext: str) -> str:
        """
        Decrypt a token produced by ``encrypt``.

        Raises:
            DecryptionError: If the token is invalid, tampered with, or was
                produced with an unknown key
        """
        if ciphertext is None or ciphertext == "":
            return ciphertext

        if not isinstance(ciphertext, str):
            raise DecryptionError(f"Cannot decrypt value of type {type(ciphertext).__name__}")

        try:
            return self._fernet.decrypt(ciphertext.encode()).decode()
        except InvalidToken as e:
            raise DecryptionError("Invalid token (wrong key or corrupted data)") from e
        except Exception as e:
            raise DecryptionError(f"Failed to decrypt data: {e}") from e

    @staticmethod
    def generate_key() -> str:
        """Generate a new Fernet encryption key."""
        return Fernet.generate_key().decode()


_encryptor: Optional[FieldEncryptor] = None


def get_encryptor() -> FieldEncryptor:
    """Get the process-wide field encryptor, creating it on first use."""
    global _encryptor
    if _encryptor is None:
        _encryptor = FieldEncryptor()
    return _encryptor
