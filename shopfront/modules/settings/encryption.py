"""
Settings Encryption
===================

Field-level encryption for sensitive settings using AES-256-CBC.
Encrypted values are stored as "<ivHex>:<cipherHex>".

The 32-byte key is passed in as 64 hex characters; it is validated on the
first encrypt/decrypt so a misconfigured deployment fails loudly.
"""

import os
import re
import logging

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

logger = logging.getLogger(__name__)

# Keys whose values are encrypted at rest
SENSITIVE_FIELDS = (
    'email_smtp_password',
)

KEY_HEX_LENGTH = 64
IV_LENGTH = 16
BLOCK_SIZE_BITS = 128

_HEX_KEY = re.compile(r"[0-9a-fA-F]+")


class EncryptionConfigError(RuntimeError):
    """The encryption secret is missing or malformed."""


class EncryptionError(ValueError):
    """A value could not be encrypted."""


class DecryptionError(ValueError):
    """A stored value could not be decrypted."""


def generate_key():
    """Return a fresh random key suitable for SETTINGS_ENCRYPTION_KEY."""
    return os.urandom(KEY_HEX_LENGTH // 2).hex()


def _parse_key(secret_hex):
    if not secret_hex:
        raise EncryptionConfigError(
            'SETTINGS_ENCRYPTION_KEY is not set. '
            'Generate one with: flask settings generate-key'
        )
    if len(secret_hex) != KEY_HEX_LENGTH:
        raise EncryptionConfigError(
            f'SETTINGS_ENCRYPTION_KEY must be {KEY_HEX_LENGTH} hex characters (32 bytes). '
            f'Current length: {len(secret_hex)}'
        )
    if not _HEX_KEY.fullmatch(secret_hex):
        raise EncryptionConfigError('SETTINGS_ENCRYPTION_KEY must contain only hex characters')
    return bytes.fromhex(secret_hex)


class SettingsEncryption:
    """AES-256-CBC codec with a fresh random IV for every encryption."""

    def __init__(self, secret_hex=None):
        self._secret_hex = secret_hex
        self._key = None

    @classmethod
    def from_config(cls, config):
        return cls(config.get('SETTINGS_ENCRYPTION_KEY'))

    @property
    def key(self):
        if self._key is None:
            self._key = _parse_key(self._secret_hex)
        return self._key

    def encrypt_value(self, plain_text):
        """Encrypt a string, returning "<ivHex>:<cipherHex>"."""
        key = self.key
        if not isinstance(plain_text, str):
            raise EncryptionError(f'Encryption failed: expected str, got {type(plain_text).__name__}')

        iv = os.urandom(IV_LENGTH)
        padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
        padded = padder.update(plain_text.encode('utf-8')) + padder.finalize()

        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        encrypted = encryptor.update(padded) + encryptor.finalize()

        return f'{iv.hex()}:{encrypted.hex()}'

    def decrypt_value(self, encrypted_text):
        """Decrypt a value produced by encrypt_value.

        Raises:
            DecryptionError: malformed format, corrupted data or wrong key.
            EncryptionConfigError: the key itself is unusable.
        """
        key = self.key
        if not isinstance(encrypted_text, str):
            raise DecryptionError('Decryption failed: encrypted value must be a string')

        parts = encrypted_text.split(':')
        if len(parts) != 2:
            raise DecryptionError('Invalid encrypted value format. Expected "IV:EncryptedData"')

        try:
            iv = bytes.fromhex(parts[0])
            encrypted = bytes.fromhex(parts[1])
        except ValueError as e:
            raise DecryptionError(f'Decryption failed: {e}') from e

        if len(iv) != IV_LENGTH:
            raise DecryptionError(f'Decryption failed: IV must be {IV_LENGTH} bytes')
        if not encrypted or len(encrypted) % IV_LENGTH:
            raise DecryptionError('Decryption failed: ciphertext is not a whole number of blocks')

        try:
            decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(encrypted) + decryptor.finalize()
            unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
            plain = unpadder.update(padded) + unpadder.finalize()
            return plain.decode('utf-8')
        except ValueError as e:
            # UnicodeDecodeError is a ValueError too
            raise DecryptionError(f'Decryption failed: {e}') from e


def is_sensitive_field(key):
    """Check if a settings key is sensitive and requires encryption"""
    return key in SENSITIVE_FIELDS


def get_sensitive_fields():
    return list(SENSITIVE_FIELDS)
