"""
Entry Storage Layer

RESPONSIBILITY: Persistence port for recorded entries, keyed by identity
ALLOWED INPUTS: Immutable Entry values
OUTPUTS: StorageWriteResult, stored entries

WHAT THIS LAYER MUST NOT DO:
============================
- Transform or interpret entries
- Touch reservoir or bridge levels
- Delete or modify existing entries (append-only)

Real transports (cloud sync, files) live outside the core and
implement EntryStore. InMemoryEntryStore is the reference
implementation used by tests and local runs.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional
import threading

# ONLY import from contracts - never from other layers' implementations
from ..contracts.base import Timestamp
from ..contracts.state import Entry


@dataclass(frozen=True)
class StorageWriteResult:
    """Immutable result of a storage write operation."""
    success: bool
    entry_id: str
    error_message: Optional[str] = None
    write_timestamp: Optional[Timestamp] = None


# =============================================================================
# STORAGE INTERFACE (Dependency Inversion)
# =============================================================================

class EntryStore:
    """
    Abstract entry store interface.

    The engine only knows this interface; concrete transports
    implement it.
    """

    def save(self, entry: Entry) -> StorageWriteResult:
        """Persist one entry."""
        raise NotImplementedError

    def fetch_all(self) -> List[Entry]:
        """Return every stored entry, oldest first."""
        raise NotImplementedError

    def get(self, entry_id: str) -> Optional[Entry]:
        raise NotImplementedError


class InMemoryEntryStore(EntryStore):
    """
    In-memory implementation of the entry store.

    Saving an entry whose id is already stored is a no-op success;
    stored entries are never replaced.
    """

    def __init__(self):
        self._entries: Dict[str, Entry] = {}
        self._lock = threading.Lock()

    def save(self, entry: Entry) -> StorageWriteResult:
        with self._lock:
            self._entries.setdefault(entry.entry_id, entry)

        return StorageWriteResult(
            success=True,
            entry_id=entry.entry_id,
            write_timestamp=Timestamp.now()
        )

    def fetch_all(self) -> List[Entry]:
        with self._lock:
            entries = list(self._entries.values())
        return sorted(entries, key=lambda e: e.timestamp)

    def get(self, entry_id: str) -> Optional[Entry]:
        with self._lock:
            return self._entries.get(entry_id)

    @property
    def entry_count(self) -> int:
        return len(self._entries)
