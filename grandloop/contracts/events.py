"""
Observability Contracts

Immutable records produced by the observability layer.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Tuple
from enum import Enum

from .base import Timestamp


class AuditEventType(Enum):
    """Explicit audit event types."""
    ROUTING = "routing"
    STATE_CHANGE = "state_change"
    ENTRY_RECORDED = "entry_recorded"
    PERSISTENCE = "persistence"
    ERROR = "error"
    SYSTEM = "system"


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable audit log entry."""
    entry_id: str
    event_type: AuditEventType
    timestamp: Timestamp
    layer: str  # Which layer generated this
    action: str
    entity_id: Optional[str] = None
    metadata: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return dict(self.metadata).get(key, default)


@dataclass(frozen=True)
class MetricPoint:
    """Immutable metric data point."""
    metric_name: str
    value: float
    timestamp: Timestamp
    labels: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)
