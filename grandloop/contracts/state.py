"""
State Model Contracts
=====================

Immutable snapshot of the unified grand loop.

INVARIANTS:
- Every level is a quantity in [0.0, 1.0]
- Entries keep insertion order and are never rewritten
- No mutation after construction: every change builds a new state
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, Tuple
import uuid

from .base import Realm, clamp_quantity


DEFAULT_LEVEL: float = 0.5


# =============================================================================
# ENTRY (Recorded insight)
# =============================================================================

@dataclass(frozen=True)
class Entry:
    """
    Immutable recorded insight.

    Identity is a fresh uuid per instance, so two entries with
    identical content remain distinct.
    """
    entry_id: str
    timestamp: datetime
    content: str
    category: Realm

    def __post_init__(self):
        if self.timestamp.tzinfo is None:
            object.__setattr__(self, 'timestamp', self.timestamp.replace(tzinfo=timezone.utc))

    @classmethod
    def create(cls, content: str, category: Realm) -> 'Entry':
        """Create an entry with fresh identity and the current UTC time."""
        return cls(
            entry_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            content=content,
            category=Realm.coerce(category),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'entry_id': self.entry_id,
            'timestamp': self.timestamp.isoformat(),
            'content': self.content,
            'category': self.category.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Entry':
        """Reconstruct from dictionary."""
        return cls(
            entry_id=data['entry_id'],
            timestamp=datetime.fromisoformat(data['timestamp']),
            content=data['content'],
            category=Realm(data['category']),
        )


# =============================================================================
# UNIFIED STATE
# =============================================================================

@dataclass(frozen=True)
class UnifiedState:
    """
    Snapshot of both reservoirs, the bridge, and the recorded entries.

    Levels outside [0, 1] are clamped on construction so that no
    out-of-range quantity can ever be held.
    """
    entries: Tuple[Entry, ...] = field(default_factory=tuple)
    physical_energy: float = DEFAULT_LEVEL
    intellectual_energy: float = DEFAULT_LEVEL
    bridge_strength: float = DEFAULT_LEVEL

    def __post_init__(self):
        if not isinstance(self.entries, tuple):
            object.__setattr__(self, 'entries', tuple(self.entries))
        object.__setattr__(self, 'physical_energy', clamp_quantity(self.physical_energy))
        object.__setattr__(self, 'intellectual_energy', clamp_quantity(self.intellectual_energy))
        object.__setattr__(self, 'bridge_strength', clamp_quantity(self.bridge_strength))

    @property
    def harmony(self) -> float:
        """Balance between the reservoirs, weighted by the bridge."""
        balance = 1.0 - abs(self.physical_energy - self.intellectual_energy)
        return balance * self.bridge_strength

    def level(self, realm: Realm) -> float:
        realm = Realm.coerce(realm)
        if realm is Realm.PHYSICAL:
            return self.physical_energy
        if realm is Realm.INTELLECTUAL:
            return self.intellectual_energy
        return self.bridge_strength

    def with_level(self, realm: Realm, value: float) -> UnifiedState:
        """Return new state with one level replaced (clamped)."""
        realm = Realm.coerce(realm)
        return UnifiedState(
            entries=self.entries,
            physical_energy=value if realm is Realm.PHYSICAL else self.physical_energy,
            intellectual_energy=value if realm is Realm.INTELLECTUAL else self.intellectual_energy,
            bridge_strength=value if realm is Realm.BRIDGE else self.bridge_strength,
        )

    def with_entries(self, entries: Iterable[Entry]) -> UnifiedState:
        return UnifiedState(
            entries=tuple(entries),
            physical_energy=self.physical_energy,
            intellectual_energy=self.intellectual_energy,
            bridge_strength=self.bridge_strength,
        )

    def appending(self, entry: Entry) -> UnifiedState:
        """Return new state with entry appended at the end."""
        return self.with_entries(self.entries + (entry,))

    def to_dict(self) -> dict:
        """
        Convert to dictionary for serialization.

        harmony is written for readers only; from_dict recomputes it.
        """
        return {
            'entries': [e.to_dict() for e in self.entries],
            'physical_energy': self.physical_energy,
            'intellectual_energy': self.intellectual_energy,
            'bridge_strength': self.bridge_strength,
            'harmony': self.harmony,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'UnifiedState':
        """Reconstruct from dictionary."""
        return cls(
            entries=tuple(Entry.from_dict(e) for e in data.get('entries', [])),
            physical_energy=data.get('physical_energy', DEFAULT_LEVEL),
            intellectual_energy=data.get('intellectual_energy', DEFAULT_LEVEL),
            bridge_strength=data.get('bridge_strength', DEFAULT_LEVEL),
        )


# =============================================================================
# METRICS SNAPSHOT
# =============================================================================

@dataclass(frozen=True)
class StateMetrics:
    """Read-only summary of a state for monitoring surfaces."""
    total_entries: int
    physical_energy: float
    intellectual_energy: float
    bridge_strength: float
    harmony: float
    entries_by_category: Tuple[Tuple[str, int], ...]
    average_energy_level: float
    uptime_seconds: float = 0.0

    @staticmethod
    def from_state(state: UnifiedState, uptime_seconds: float = 0.0) -> StateMetrics:
        counts: Dict[str, int] = {}
        for entry in state.entries:
            counts[entry.category.value] = counts.get(entry.category.value, 0) + 1

        return StateMetrics(
            total_entries=len(state.entries),
            physical_energy=state.physical_energy,
            intellectual_energy=state.intellectual_energy,
            bridge_strength=state.bridge_strength,
            harmony=state.harmony,
            entries_by_category=tuple(sorted(counts.items())),
            average_energy_level=(state.physical_energy + state.intellectual_energy) / 2.0,
            uptime_seconds=uptime_seconds,
        )

    def category_count(self, category: Realm) -> int:
        return dict(self.entries_by_category).get(Realm.coerce(category).value, 0)
