"""
Base Contracts and Shared Types

These are the foundational types used across all layers.
All types here are IMMUTABLE and represent pure data.
No behavior beyond construction helpers, no side effects.

BOUNDARY ENFORCEMENT:
=====================
- This module is READ-ONLY from all layers
- Layers may import types but MUST NOT modify this module
- All types are frozen dataclasses or enums
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Union
from enum import Enum


# =============================================================================
# QUANTITY DOMAIN
# =============================================================================

ENERGY_MIN: float = 0.0
ENERGY_MAX: float = 1.0


def clamp_quantity(value: float) -> float:
    """Clamp a raw value into [ENERGY_MIN, ENERGY_MAX]. NaN maps to ENERGY_MIN."""
    if value != value:
        return ENERGY_MIN
    return min(max(value, ENERGY_MIN), ENERGY_MAX)


# =============================================================================
# REALMS (Closed set)
# =============================================================================

class Realm(Enum):
    """
    Named energy stores.

    Doubles as the closed category set for recorded entries.
    """
    PHYSICAL = "physical"          # The physical reservoir
    INTELLECTUAL = "intellectual"  # The intellectual reservoir
    BRIDGE = "bridge"              # The coupling between both

    @property
    def is_reservoir(self) -> bool:
        return self is not Realm.BRIDGE

    @staticmethod
    def coerce(value: Union[Realm, str]) -> Realm:
        """Accept a Realm or its string value."""
        if isinstance(value, Realm):
            return value
        return Realm(value)


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class RoutingErrorCode(Enum):
    """
    Explicit routing error codes.
    No silent fallbacks - every rejection is enumerated.
    """
    NON_POSITIVE_AMOUNT = "non_positive_amount"
    INSUFFICIENT_ENERGY = "insufficient_energy"
    SAME_REALM = "same_realm"
    BRIDGE_NOT_ROUTABLE = "bridge_not_routable"


# =============================================================================
# RESULT TYPE (Contract-checked transforms)
# =============================================================================

@dataclass(frozen=True)
class TransformResult:
    """
    Result of a contract-checked transform.
    Either contains a value OR a failure reason, never both.
    """
    value: Any = None
    reason: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.reason is None

    @property
    def is_failure(self) -> bool:
        return self.reason is not None

    @staticmethod
    def success(value: Any) -> TransformResult:
        return TransformResult(value=value, reason=None)

    @staticmethod
    def failure(reason: str) -> TransformResult:
        return TransformResult(value=None, reason=reason)

    def map(self, transform: Callable[[Any], Any]) -> TransformResult:
        """Apply transform to a success value; failures pass through."""
        if self.is_failure:
            return self
        return TransformResult.success(transform(self.value))

    def flat_map(self, transform: Callable[[Any], TransformResult]) -> TransformResult:
        """Chain an operation that may itself fail."""
        if self.is_failure:
            return self
        return transform(self.value)

    def value_or(self, default: Any) -> Any:
        return self.value if self.is_success else default


# =============================================================================
# TEMPORAL TYPES (Immutable, explicit semantics)
# =============================================================================

@dataclass(frozen=True)
class Timestamp:
    """
    Immutable timestamp with explicit semantics.
    All timestamps are UTC, never local time.
    """
    value: datetime

    def __post_init__(self):
        # Ensure UTC timezone
        if self.value.tzinfo is None:
            object.__setattr__(self, 'value', self.value.replace(tzinfo=timezone.utc))

    @staticmethod
    def now() -> Timestamp:
        return Timestamp(value=datetime.now(timezone.utc))

    @staticmethod
    def from_iso(iso_string: str) -> Timestamp:
        dt = datetime.fromisoformat(iso_string.replace('Z', '+00:00'))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return Timestamp(value=dt)

    def to_iso(self) -> str:
        return self.value.isoformat()


@dataclass(frozen=True)
class TimeRange:
    """Immutable time range for log queries."""
    start: Timestamp
    end: Timestamp

    def __post_init__(self):
        if self.start.value > self.end.value:
            raise ValueError("TimeRange start must be before or equal to end")

    def contains(self, timestamp: Timestamp) -> bool:
        return self.start.value <= timestamp.value <= self.end.value
