"""
Routing Contracts

Messages accepted by the router and the result it hands back.

DESIGN PRINCIPLES:
==================
1. Messages are frozen values; the router never keeps them
2. A result carries deltas only; applying them is a separate step
3. Failures are explicit (success flag, message, error code)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple, Union

from .base import Realm, RoutingErrorCode


# =============================================================================
# MESSAGES
# =============================================================================

@dataclass(frozen=True)
class Blow:
    """Push transfer: credited at the muscle efficiency (lossier)."""
    source: Realm
    destination: Realm
    amount: float


@dataclass(frozen=True)
class Suck:
    """Pull transfer: credited at the mind efficiency."""
    source: Realm
    destination: Realm
    amount: float


@dataclass(frozen=True)
class Balance:
    """Move a bounded fraction of the gap from the higher realm to the lower."""
    first: Realm
    second: Realm


EnergyMessage = Union[Blow, Suck, Balance]


# =============================================================================
# RESULT
# =============================================================================

@dataclass(frozen=True)
class RoutingResult:
    """
    Outcome of routing one message against one state.

    Transient: used once to derive a new state, never mutated.
    """
    success: bool
    message: str
    deltas: Tuple[Tuple[Realm, float], ...] = field(default_factory=tuple)
    error_code: Optional[RoutingErrorCode] = None

    @staticmethod
    def succeeded(message: str, deltas: Iterable[Tuple[Realm, float]] = ()) -> RoutingResult:
        return RoutingResult(success=True, message=message, deltas=tuple(deltas))

    @staticmethod
    def failed(message: str, error_code: RoutingErrorCode) -> RoutingResult:
        return RoutingResult(success=False, message=message, error_code=error_code)

    @property
    def delta_map(self) -> Dict[Realm, float]:
        return dict(self.deltas)

    def delta(self, realm: Realm, default: float = 0.0) -> float:
        return self.delta_map.get(Realm.coerce(realm), default)

    @property
    def targets(self) -> Tuple[Realm, ...]:
        return tuple(realm for realm, _ in self.deltas)
