# ===== barberbook/utils/encryption.py =====
import logging
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from barberbook.config.settings import get_settings

logger = logging.getLogger(__name__)


# Generate a key once and store it in CALENDAR_ENCRYPTION_KEY:
#   Fernet.generate_key()


def get_cipher() -> Fernet:
    """Get Fernet cipher instance"""
    key = get_settings().CALENDAR_ENCRYPTION_KEY
    if not key:
        raise ValueError("CALENDAR_ENCRYPTION_KEY is not set")
    return Fernet(key.encode() if isinstance(key, str) else key)


def encrypt_token(token: Optional[str]) -> Optional[bytes]:
    """Encrypt a token string"""
    if not token:
        return None
    cipher = get_cipher()
    return cipher.encrypt(token.encode())


def decrypt_token(encrypted_token: Optional[bytes]) -> Optional[str]:
    """Decrypt a token, returning None when it cannot be read"""
    if not encrypted_token:
        return None
    cipher = get_cipher()
    try:
        return cipher.decrypt(encrypted_token).decode()
    except InvalidToken:
        logger.warning("Stored token could not be decrypted with the current key")
        return None
