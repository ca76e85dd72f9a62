"""
Encryption utilities

Symmetric encryption (Fernet) for secrets kept in the database, such as the
service-account credentials of the calendar connection.
"""

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken
from django.conf import settings  # type: ignore


class DecryptionError(Exception):
    """Stored ciphertext could not be decrypted with the configured key."""


def get_fernet() -> Fernet:
    """
    Build a Fernet instance from settings.ENCRYPTION_KEY

    Any string is accepted: it is hashed to the 32 bytes Fernet expects, so
    rotating the key only requires changing the environment variable.
    """
    key = getattr(settings, 'ENCRYPTION_KEY', None)
    if not key:
        raise ValueError("ENCRYPTION_KEY not configured in settings.")

    if isinstance(key, str):
        key = base64.urlsafe_b64encode(hashlib.sha256(key.encode()).digest())
    return Fernet(key)


def encrypt_string(plaintext: str) -> str:
    if not plaintext:
        return ''
    return get_fernet().encrypt(plaintext.encode()).decode()


def decrypt_string(encrypted: str) -> str:
    if not encrypted:
        return ''
    try:
        return get_fernet().decrypt(encrypted.encode()).decode()
    except InvalidToken as exc:
        raise DecryptionError("Stored value was encrypted with a different key") from exc
