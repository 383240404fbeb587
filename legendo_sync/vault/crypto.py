"""
LEGENDO SYNC Vault Crypto Unit

AES-GCM authenticated encryption for vault entries:
- Fresh random nonce per encryption
- Detached authentication tag
- Optional associated data binding
"""

import base64
import binascii
import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .exceptions import AuthenticationFailure, EncryptionError


logger = logging.getLogger(__name__)


# Constants
KEY_SIZE = 32  # AES-256
NONCE_SIZE = 12  # 96 bits for GCM
TAG_SIZE = 16  # 128 bits for GCM authentication tag
VALID_KEY_SIZES = (16, 24, 32)


@dataclass(frozen=True)
class SealedPayload:
    """Output of a single encryption call."""
    ciphertext: bytes
    nonce: bytes
    auth_tag: bytes


def generate_key() -> bytes:
    """Generate a random AES-256 key."""
    return secrets.token_bytes(KEY_SIZE)


def load_key(encoded: str) -> bytes:
    """
    Decode a base64-encoded key.

    Args:
        encoded: Base64 key string

    Returns:
        Raw key bytes

    Raises:
        EncryptionError: If the string is not valid base64 or the key
            length is not supported by AES
    """
    try:
        key = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncryptionError("Encryption key is not valid base64", original_error=e)

    if len(key) not in VALID_KEY_SIZES:
        raise EncryptionError(
            f"Encryption key must be 16, 24 or 32 bytes, got {len(key)}"
        )
    return key


class CryptoUnit:
    """
    Symmetric authenticated encryption over a single process-wide key.

    Nonces are always generated internally; there is no way for a caller
    to supply one.
    """

    def __init__(self, key: bytes):
        """
        Initialize the crypto unit.

        Args:
            key: AES key (16, 24 or 32 bytes)

        Raises:
            EncryptionError: If the key has an unsupported length
        """
        if not isinstance(key, (bytes, bytearray)) or len(key) not in VALID_KEY_SIZES:
            raise EncryptionError("Encryption key must be 16, 24 or 32 bytes")
        self._aesgcm = AESGCM(bytes(key))

    def encrypt(
        self,
        plaintext: bytes,
        associated_data: Optional[bytes] = None,
    ) -> SealedPayload:
        """
        Encrypt a payload.

        Args:
            plaintext: Bytes to encrypt (may be empty)
            associated_data: Optional data authenticated but not encrypted

        Returns:
            SealedPayload with ciphertext, nonce and tag
        """
        nonce = secrets.token_bytes(NONCE_SIZE)
        try:
            sealed = self._aesgcm.encrypt(nonce, bytes(plaintext), associated_data)
        except (TypeError, ValueError, OverflowError) as e:
            raise EncryptionError(f"Encryption failed: {e}", original_error=e)

        # AESGCM appends the tag to the ciphertext
        return SealedPayload(
            ciphertext=sealed[:-TAG_SIZE],
            nonce=nonce,
            auth_tag=sealed[-TAG_SIZE:],
        )

    def decrypt(
        self,
        ciphertext: bytes,
        nonce: bytes,
        auth_tag: bytes,
        associated_data: Optional[bytes] = None,
    ) -> bytes:
        """
        Decrypt and verify a payload.

        Args:
            ciphertext: Encrypted bytes
            nonce: Nonce used at encryption
            auth_tag: Authentication tag
            associated_data: Associated data used at encryption

        Returns:
            Original plaintext

        Raises:
            AuthenticationFailure: If verification fails for any reason
        """
        if len(nonce) != NONCE_SIZE or len(auth_tag) != TAG_SIZE:
            raise AuthenticationFailure("Malformed nonce or authentication tag")

        try:
            return self._aesgcm.decrypt(nonce, ciphertext + auth_tag, associated_data)
        except InvalidTag:
            raise AuthenticationFailure()
