"""
LEGENDO SYNC Vault Module

Encrypted, expiring in-memory storage for sync and payment records.

Features:
- AES-GCM encryption at rest
- Opaque UUID entry ids
- Age-based expiry sweeper
- Tampered data reported as not found
"""

from .crypto import (
    NONCE_SIZE,
    TAG_SIZE,
    CryptoUnit,
    SealedPayload,
    generate_key,
    load_key,
)
from .exceptions import (
    AuthenticationFailure,
    DuplicateEntryError,
    EncryptionError,
    EntryNotFoundError,
    InvariantViolation,
    PayloadError,
    VaultError,
)
from .store import Entry, EntryStore
from .sweeper import DEFAULT_MAX_AGE, DEFAULT_SWEEP_INTERVAL, ExpirySweeper
from .vault import SyncVault, VaultConfig, create_vault

__all__ = [
    # Crypto
    "CryptoUnit",
    "SealedPayload",
    "generate_key",
    "load_key",
    "NONCE_SIZE",
    "TAG_SIZE",
    # Store
    "Entry",
    "EntryStore",
    # Sweeper
    "ExpirySweeper",
    "DEFAULT_SWEEP_INTERVAL",
    "DEFAULT_MAX_AGE",
    # Facade
    "SyncVault",
    "VaultConfig",
    "create_vault",
    # Exceptions
    "VaultError",
    "EntryNotFoundError",
    "AuthenticationFailure",
    "InvariantViolation",
    "DuplicateEntryError",
    "EncryptionError",
    "PayloadError",
]
