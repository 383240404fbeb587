"""
LEGENDO SYNC Vault API

Main facade for the vault providing:
- Store/retrieve of JSON payloads under opaque ids
- AES-GCM encryption at rest
- Age-based expiry via a background sweeper
- Read-only status snapshots
"""

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from .crypto import CryptoUnit, generate_key
from .exceptions import AuthenticationFailure, EntryNotFoundError, PayloadError
from .store import Entry, EntryStore
from .sweeper import DEFAULT_MAX_AGE, DEFAULT_SWEEP_INTERVAL, ExpirySweeper

logger = logging.getLogger(__name__)


@dataclass
class VaultConfig:
    """Configuration for the sync vault."""

    key: Optional[bytes] = None
    sweep_interval: float = DEFAULT_SWEEP_INTERVAL
    max_age: float = DEFAULT_MAX_AGE
    clock: Callable[[], datetime] = field(default=datetime.now, repr=False)


class SyncVault:
    """
    Sync Vault - encrypted, expiring in-memory storage.

    This is the only entry point into the vault. Callers get one of two
    outcomes from ``retrieve``: the stored payload, or EntryNotFoundError.
    Tampered or foreign ciphertext is reported exactly like an absent id.
    """

    def __init__(
        self,
        config: Optional[VaultConfig] = None,
        crypto: Optional[CryptoUnit] = None,
        store: Optional[EntryStore] = None,
    ):
        """
        Initialize the vault.

        Args:
            config: Vault configuration
            crypto: Crypto unit (built from config.key when omitted)
            store: Entry store (a fresh one when omitted)
        """
        self._config = config or VaultConfig()

        if crypto is None:
            key = self._config.key
            if key is None:
                logger.warning(
                    "No encryption key configured, using an ephemeral key"
                )
                key = generate_key()
            crypto = CryptoUnit(key)

        self._crypto = crypto
        self._store = store if store is not None else EntryStore()
        self._clock = self._config.clock
        self._sweeper = ExpirySweeper(
            self._store,
            interval=self._config.sweep_interval,
            max_age=self._config.max_age,
            clock=self._clock,
        )
        self._started_at = self._clock()

    def store(self, payload: Any) -> str:
        """
        Store a JSON-serializable payload.

        Args:
            payload: Value to store

        Returns:
            Opaque entry id

        Raises:
            PayloadError: If the payload is not JSON-serializable
        """
        try:
            plaintext = json.dumps(payload).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise PayloadError(f"Payload is not JSON-serializable: {e}", original_error=e)

        entry_id = str(uuid.uuid4())
        sealed = self._crypto.encrypt(plaintext, associated_data=entry_id.encode("utf-8"))

        entry = Entry(
            entry_id=entry_id,
            ciphertext=sealed.ciphertext,
            nonce=sealed.nonce,
            auth_tag=sealed.auth_tag,
            created_at=self._clock(),
        )
        self._store.put(entry)

        logger.debug(f"Stored entry: {entry_id} (size={len(plaintext)})")
        return entry_id

    def retrieve(self, entry_id: str) -> Any:
        """
        Retrieve a stored payload.

        Args:
            entry_id: Id returned by ``store``

        Returns:
            The stored payload

        Raises:
            EntryNotFoundError: If the id is absent, expired, or fails
                authentication
        """
        entry = self._store.get(entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)

        try:
            plaintext = self._crypto.decrypt(
                entry.ciphertext,
                entry.nonce,
                entry.auth_tag,
                associated_data=entry_id.encode("utf-8"),
            )
        except AuthenticationFailure:
            logger.warning(f"Decryption failed (integrity check): {entry_id}")
            raise EntryNotFoundError(entry_id) from None

        try:
            return json.loads(plaintext.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            logger.error(f"Stored payload could not be decoded: {entry_id}")
            raise EntryNotFoundError(entry_id) from None

    def delete(self, entry_id: str) -> bool:
        """Delete an entry. Returns False if it was not present."""
        deleted = self._store.delete(entry_id)
        if deleted:
            logger.debug(f"Deleted entry: {entry_id}")
        return deleted

    def start_sweeping(
        self,
        interval: Optional[float] = None,
        max_age: Optional[float] = None,
    ) -> None:
        """
        Begin periodic expiry sweeping.

        Args:
            interval: Seconds between sweeps (keeps the current value if None)
            max_age: Maximum entry age in seconds (keeps the current value if None)
        """
        if interval is not None or max_age is not None:
            previous = self._sweeper
            previous.stop()
            self._sweeper = ExpirySweeper(
                self._store,
                interval=interval if interval is not None else previous.interval,
                max_age=max_age if max_age is not None else previous.max_age,
                clock=self._clock,
            )
            # Sweep history survives a reconfiguration
            self._sweeper._last_sweep_at = previous.last_sweep_at
            self._sweeper._total_swept = previous.total_swept
        self._sweeper.start()

    def stop_sweeping(self) -> None:
        """Halt periodic sweeping."""
        self._sweeper.stop()

    def sweep_now(self) -> int:
        """Run one sweep cycle immediately."""
        return self._sweeper.sweep_now()

    def status(self) -> Dict[str, Any]:
        """Get a read-only snapshot of vault state."""
        last_sweep = self._sweeper.last_sweep_at
        return {
            "entry_count": len(self._store),
            "uptime_seconds": (self._clock() - self._started_at).total_seconds(),
            "started_at": self._started_at.isoformat(),
            "sweeping": self._sweeper.is_running,
            "sweep_interval": self._sweeper.interval,
            "max_age": self._sweeper.max_age,
            "last_sweep_at": last_sweep.isoformat() if last_sweep else None,
            "total_swept": self._sweeper.total_swept,
        }

    def shutdown(self) -> None:
        """Stop sweeping and drop all entries."""
        self._sweeper.stop()
        self._store.clear()
        logger.info("Sync vault shutdown complete")

    @property
    def is_sweeping(self) -> bool:
        return self._sweeper.is_running

    def __len__(self) -> int:
        return len(self._store)


def create_vault(
    key: Optional[bytes] = None,
    sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
    max_age: float = DEFAULT_MAX_AGE,
    start: bool = True,
) -> SyncVault:
    """
    Convenience function to create a vault.

    Args:
        key: AES key (an ephemeral key is generated if None)
        sweep_interval: Seconds between sweeps
        max_age: Maximum entry age in seconds
        start: Start the sweeper immediately

    Returns:
        SyncVault
    """
    config = VaultConfig(
        key=key,
        sweep_interval=sweep_interval,
        max_age=max_age,
    )

    vault = SyncVault(config)
    if start:
        vault.start_sweeping()

    return vault
