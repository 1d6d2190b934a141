"""
Integration Test Fixtures

Deterministic fixtures for engine testing.
All fixtures are explicit - no random generation.
"""

from datetime import datetime, timezone
from typing import List

from grandloop.contracts.base import Realm
from grandloop.contracts.state import Entry, UnifiedState
from grandloop.storage import EntryStore, StorageWriteResult


# =============================================================================
# FIXED TIMESTAMPS (deterministic)
# =============================================================================

T1 = datetime(2026, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
T2 = datetime(2026, 1, 1, 10, 5, 0, tzinfo=timezone.utc)
T3 = datetime(2026, 1, 1, 10, 10, 0, tzinfo=timezone.utc)


# =============================================================================
# ENTRY FIXTURES
# =============================================================================

ENTRY_WORKOUT = Entry(
    entry_id="entry_001",
    timestamp=T1,
    content="Ran ten kilometres.",
    category=Realm.PHYSICAL,
)

ENTRY_READING = Entry(
    entry_id="entry_002",
    timestamp=T2,
    content="Finished a chapter on category theory.",
    category=Realm.INTELLECTUAL,
)

ENTRY_REFLECTION = Entry(
    entry_id="entry_003",
    timestamp=T3,
    content="Thought about the run while reading.",
    category=Realm.BRIDGE,
)


# =============================================================================
# STATE FIXTURES
# =============================================================================

def create_state_skewed() -> UnifiedState:
    """Physical ahead of intellectual, default bridge."""
    return UnifiedState(physical_energy=0.6, intellectual_energy=0.4)


def create_state_harmonious() -> UnifiedState:
    return UnifiedState(physical_energy=0.7, intellectual_energy=0.7, bridge_strength=1.0)


def create_state_near_full() -> UnifiedState:
    return UnifiedState(physical_energy=0.95, intellectual_energy=0.95, bridge_strength=0.95)


def create_state_empty_reservoirs() -> UnifiedState:
    return UnifiedState(physical_energy=0.0, intellectual_energy=0.0, bridge_strength=0.5)


# =============================================================================
# STORE DOUBLES
# =============================================================================

class RejectingEntryStore(EntryStore):
    """Store that reports every write as failed."""

    def __init__(self):
        self.attempts: List[Entry] = []

    def save(self, entry: Entry) -> StorageWriteResult:
        self.attempts.append(entry)
        return StorageWriteResult(
            success=False,
            entry_id=entry.entry_id,
            error_message="quota exceeded"
        )

    def fetch_all(self) -> List[Entry]:
        return []

    def get(self, entry_id: str):
        return None


class UnreachableEntryStore(EntryStore):
    """Store whose transport raises on every call."""

    def save(self, entry: Entry) -> StorageWriteResult:
        raise ConnectionError("store unreachable")

    def fetch_all(self) -> List[Entry]:
        raise ConnectionError("store unreachable")

    def get(self, entry_id: str):
        raise ConnectionError("store unreachable")
