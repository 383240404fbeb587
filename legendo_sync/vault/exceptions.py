"""
LEGENDO SYNC Vault Exceptions

Custom exceptions for vault operations providing consistent error handling.
"""

from typing import Optional


class VaultError(Exception):
    """Base exception for vault operations."""

    pass


class EntryNotFoundError(VaultError):
    """
    Requested entry does not exist.

    Raised for ids that were never stored, were swept after expiry, or whose
    ciphertext failed authentication. The three cases are not distinguished.
    """

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Entry not found: {entry_id}")


class AuthenticationFailure(VaultError):
    """Authenticated decryption rejected the ciphertext, nonce or tag."""

    def __init__(self, message: str = "Authentication tag verification failed"):
        super().__init__(message)


class InvariantViolation(VaultError):
    """Internal invariant broken by a caller."""

    pass


class DuplicateEntryError(InvariantViolation):
    """An entry with the same id is already stored."""

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Duplicate entry id: {entry_id}")


class EncryptionError(VaultError):
    """Error during key setup or encryption."""

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
    ):
        self.original_error = original_error
        super().__init__(message)


class PayloadError(VaultError):
    """Payload cannot be serialized for storage."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(message)
