"""
LEGENDO SYNC Vault Entry Store

In-memory keyed storage of encrypted entries.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterator, Optional, Tuple

from .exceptions import DuplicateEntryError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Entry:
    """One stored, encrypted record."""
    entry_id: str
    ciphertext: bytes
    nonce: bytes
    auth_tag: bytes
    created_at: datetime

    def age_seconds(self, now: datetime) -> float:
        return (now - self.created_at).total_seconds()


class EntryStore:
    """
    Lock-guarded mapping from entry id to Entry.

    Entries are immutable, so readers never see a partially written
    ciphertext/nonce/tag triple.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._entries: Dict[str, Entry] = {}

    def put(self, entry: Entry) -> None:
        """
        Insert an entry.

        Raises:
            DuplicateEntryError: If the id is already stored
        """
        with self._lock:
            if entry.entry_id in self._entries:
                raise DuplicateEntryError(entry.entry_id)
            self._entries[entry.entry_id] = entry

    def get(self, entry_id: str) -> Optional[Entry]:
        with self._lock:
            return self._entries.get(entry_id)

    def delete(self, entry_id: str) -> bool:
        """Delete an entry. Returns False if it was not present."""
        with self._lock:
            return self._entries.pop(entry_id, None) is not None

    def scan(self) -> Iterator[Tuple[str, Entry]]:
        """
        Iterate over all entries.

        The iteration runs over a snapshot, so the lock is released before
        the caller sees the first item.
        """
        with self._lock:
            snapshot = list(self._entries.items())
        return iter(snapshot)

    def clear(self) -> int:
        """Remove all entries. Returns the number removed."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        if count:
            logger.info(f"Cleared {count} entries")
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        with self._lock:
            return entry_id in self._entries
