"""
Observability & Audit Layer

RESPONSIBILITY: Audit logging and metrics for router and engine activity
ALLOWED INPUTS: Any action reported by other layers
OUTPUTS: AuditLogEntry, MetricPoint, audit reports

WHAT THIS LAYER MUST NOT DO:
============================
- Modify system behavior
- Filter or interpret events (only record them)
- Make decisions based on logged data
- Access mutable state in other layers

BOUNDARY ENFORCEMENT:
=====================
- Receives immutable records (never references to live state)
- NEVER modifies events or system state
- Provides read-only access (copies) to logs and metrics
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Tuple
from enum import Enum
import hashlib
import itertools
import threading

# ONLY import from contracts - never from other layers' implementations
from ..contracts.base import Timestamp, TimeRange
from ..contracts.events import AuditLogEntry, AuditEventType, MetricPoint


# =============================================================================
# LOG COLLECTORS (One per layer)
# =============================================================================

class LogCollector:
    """
    Per-layer audit collector.

    Append-only from the caller's point of view. When max_entries is
    set the oldest entries are dropped first.
    """

    def __init__(self, layer_name: str, max_entries: Optional[int] = None):
        self._layer_name = layer_name
        self._entries: Deque[AuditLogEntry] = deque(maxlen=max_entries)
        self._sequence: int = 0

    def collect(self, entry: AuditLogEntry):
        """Collect an audit entry (append-only)."""
        self._entries.append(entry)
        self._sequence += 1

    def get_entries(
        self,
        time_range: Optional[TimeRange] = None,
        event_type: Optional[AuditEventType] = None
    ) -> List[AuditLogEntry]:
        """Get entries, optionally filtered."""
        entries = list(self._entries)

        if time_range:
            entries = [
                e for e in entries
                if time_range.contains(e.timestamp)
            ]

        if event_type:
            entries = [e for e in entries if e.event_type == event_type]

        return entries

    @property
    def layer_name(self) -> str:
        return self._layer_name

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    @property
    def total_collected(self) -> int:
        """Entries ever collected, including dropped ones."""
        return self._sequence


# =============================================================================
# METRICS COLLECTOR
# =============================================================================

class MetricType(Enum):
    """Types of metrics collected."""
    COUNTER = "counter"
    GAUGE = "gauge"
    HISTOGRAM = "histogram"


@dataclass
class MetricDefinition:
    """Definition of a metric to collect."""
    name: str
    metric_type: MetricType
    description: str
    labels: Tuple[str, ...] = field(default_factory=tuple)


class MetricsCollector:
    """
    Collect and aggregate metrics from all layers.

    Metrics are append-only time series data points. When max_points is
    set each series keeps only its newest points.
    """

    def __init__(self, max_points: Optional[int] = None):
        self._max_points = max_points
        self._metrics: Dict[str, Deque[MetricPoint]] = {}
        self._definitions: Dict[str, MetricDefinition] = {}
        self._register_default_metrics()

    def _register_default_metrics(self):
        """Register standard metrics."""
        defaults = [
            MetricDefinition(
                name="routing_operations_total",
                metric_type=MetricType.COUNTER,
                description="Total number of routed messages",
                labels=("message_type",)
            ),
            MetricDefinition(
                name="routing_failures_total",
                metric_type=MetricType.COUNTER,
                description="Routed messages rejected by validation",
                labels=("error_code",)
            ),
            MetricDefinition(
                name="energy_loss",
                metric_type=MetricType.HISTOGRAM,
                description="Total energy lost by an applied routing result",
                labels=("message_type",)
            ),
            MetricDefinition(
                name="entries_recorded_total",
                metric_type=MetricType.COUNTER,
                description="Total number of recorded entries",
                labels=("category",)
            ),
            MetricDefinition(
                name="harmony",
                metric_type=MetricType.GAUGE,
                description="Harmony of the most recently published state"
            ),
            MetricDefinition(
                name="store_failures_total",
                metric_type=MetricType.COUNTER,
                description="Entries the persistence store failed to save"
            ),
        ]

        for definition in defaults:
            self.register_metric(definition)

    def register_metric(self, definition: MetricDefinition):
        """Register a new metric definition."""
        self._definitions[definition.name] = definition
        if definition.name not in self._metrics:
            self._metrics[definition.name] = deque(maxlen=self._max_points)

    def get_definition(self, metric_name: str) -> Optional[MetricDefinition]:
        return self._definitions.get(metric_name)

    def record(
        self,
        metric_name: str,
        value: float,
        labels: Optional[Dict[str, str]] = None
    ):
        """Record a metric data point."""
        if metric_name not in self._metrics:
            self._metrics[metric_name] = deque(maxlen=self._max_points)

        label_tuple = tuple(sorted(labels.items())) if labels else ()

        point = MetricPoint(
            metric_name=metric_name,
            value=value,
            timestamp=Timestamp.now(),
            labels=label_tuple
        )
        self._metrics[metric_name].append(point)

    def get_metric(
        self,
        metric_name: str,
        time_range: Optional[TimeRange] = None
    ) -> List[MetricPoint]:
        """Get metric data points, optionally filtered by time range."""
        points = self._metrics.get(metric_name, ())

        if time_range:
            points = [
                p for p in points
                if time_range.contains(p.timestamp)
            ]

        return list(points)

    def get_latest(self, metric_name: str) -> Optional[MetricPoint]:
        """Get the latest value for a metric."""
        points = self._metrics.get(metric_name, ())
        return points[-1] if points else None

    def get_all_metrics(self) -> Dict[str, List[MetricPoint]]:
        """Get all metrics (copy)."""
        return {k: list(v) for k, v in self._metrics.items()}

    def compute_aggregates(
        self,
        metric_name: str,
        time_range: Optional[TimeRange] = None
    ) -> Dict[str, float]:
        """Compute aggregate statistics for a metric."""
        points = self.get_metric(metric_name, time_range)

        if not points:
            return {}

        values = [p.value for p in points]

        return {
            'count': len(values),
            'sum': sum(values),
            'min': min(values),
            'max': max(values),
            'avg': sum(values) / len(values),
        }


# =============================================================================
# OBSERVABILITY ENGINE (Orchestrates all observability)
# =============================================================================

@dataclass
class ObservabilityConfig:
    """
    Configuration for observability engine.

    max_entries_per_layer bounds every audit log and every metric series.
    """
    enable_metrics: bool = True
    max_entries_per_layer: Optional[int] = 1000
    layers: Tuple[str, ...] = ("router", "engine", "storage")


class ObservabilityEngine:
    """
    Central Observability Engine.

    BOUNDARY ENFORCEMENT:
    - ONLY observes, never modifies
    - Provides read-only access to collected data

    Shared by the router and the engine, so collection is guarded by a
    lock of its own.
    """

    def __init__(self, config: Optional[ObservabilityConfig] = None):
        self._config = config or ObservabilityConfig()
        self._lock = threading.Lock()
        self._counter = itertools.count(1)

        # Log collectors per layer
        self._collectors: Dict[str, LogCollector] = {
            name: LogCollector(name, self._config.max_entries_per_layer)
            for name in self._config.layers
        }

        # Metrics collector
        self._metrics = (
            MetricsCollector(self._config.max_entries_per_layer)
            if self._config.enable_metrics
            else None
        )

    def collect_audit(self, entry: AuditLogEntry):
        """Collect an audit log entry from any layer."""
        with self._lock:
            collector = self._collectors.get(entry.layer)
            if collector is None:
                collector = LogCollector(entry.layer, self._config.max_entries_per_layer)
                self._collectors[entry.layer] = collector
            collector.collect(entry)

    def log_audit(
        self,
        action: str,
        entity_id: Optional[str] = None,
        outcome: str = "success",
        details: str = "",
        layer: str = "engine",
        event_type: AuditEventType = AuditEventType.SYSTEM
    ) -> AuditLogEntry:
        """Helper to log audit entry directly."""
        now = Timestamp.now()
        entry_id = hashlib.sha256(
            f"{layer}_{action}|{now.value.timestamp()}|{next(self._counter)}".encode()
        ).hexdigest()[:16]

        entry = AuditLogEntry(
            entry_id=f"audit_{entry_id}",
            event_type=event_type,
            timestamp=now,
            layer=layer,
            action=action,
            entity_id=entity_id,
            metadata=(
                ("outcome", outcome),
                ("details", details)
            )
        )
        self.collect_audit(entry)
        return entry

    def collect_metric(
        self,
        metric_name: str,
        value: float,
        labels: Optional[Dict[str, str]] = None
    ):
        """Collect a metric data point."""
        if self._metrics:
            with self._lock:
                self._metrics.record(metric_name, value, labels)

    def get_unified_log(
        self,
        time_range: Optional[TimeRange] = None,
        layers: Optional[List[str]] = None
    ) -> List[AuditLogEntry]:
        """Get unified log from all or specified layers."""
        with self._lock:
            target_layers = layers or list(self._collectors.keys())

            all_entries = []
            for layer_name in target_layers:
                collector = self._collectors.get(layer_name)
                if collector:
                    all_entries.extend(collector.get_entries(time_range=time_range))

        # Sort by timestamp
        all_entries.sort(key=lambda e: e.timestamp.value)

        return all_entries

    def get_layer_log(
        self,
        layer_name: str,
        time_range: Optional[TimeRange] = None,
        event_type: Optional[AuditEventType] = None
    ) -> List[AuditLogEntry]:
        """Get log for a specific layer."""
        with self._lock:
            collector = self._collectors.get(layer_name)
            if not collector:
                return []
            return collector.get_entries(time_range=time_range, event_type=event_type)

    def get_metrics(self) -> Optional[MetricsCollector]:
        """Get metrics collector (read-only access)."""
        return self._metrics

    def generate_audit_report(
        self,
        time_range: Optional[TimeRange] = None
    ) -> Dict:
        """Generate audit report grouped by layer, event type and outcome."""
        entries = self.get_unified_log(time_range=time_range)

        by_layer: Dict[str, int] = {}
        by_type: Dict[str, int] = {}
        failures = 0

        for entry in entries:
            by_layer[entry.layer] = by_layer.get(entry.layer, 0) + 1
            by_type[entry.event_type.value] = by_type.get(entry.event_type.value, 0) + 1
            if entry.get("outcome") == "failure":
                failures += 1

        return {
            'total_entries': len(entries),
            'failures': failures,
            'by_layer': by_layer,
            'by_event_type': by_type,
            'time_range': {
                'start': entries[0].timestamp.to_iso() if entries else None,
                'end': entries[-1].timestamp.to_iso() if entries else None,
            },
            'generated_at': Timestamp.now().to_iso()
        }
