"""
Custom Django model fields for sensitive data.

EncryptedTextField transparently encrypts values before they are written
and decrypts them when rows are loaded.
"""

import logging

from django.db import models  # type: ignore

from .encryption import DecryptionError, decrypt_string, encrypt_string

logger = logging.getLogger(__name__)


class EncryptedTextField(models.TextField):
    """
    TextField stored as Fernet ciphertext.

    A value that cannot be decrypted (key rotated without re-encrypting)
    loads as an empty string, which callers treat as "not configured".
    """

    description = "Encrypted text field"

    def from_db_value(self, value, expression, connection):
        if value is None:
            return value
        try:
            return decrypt_string(value)
        except DecryptionError:
            logger.warning(f"Could not decrypt {self.model.__name__}.{self.name}; treating it as empty")
            return ''

    def get_prep_value(self, value):
        if value is None or value == '':
            return ''
        return encrypt_string(str(value))

    def to_python(self, value):
        if value is None:
            return value
        return str(value)
