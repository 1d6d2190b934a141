"""
Energy Routing Layer

RESPONSIBILITY: Compute the effect of a routing message on a state
ALLOWED INPUTS: EnergyMessage + UnifiedState snapshot
OUTPUTS: RoutingResult (deltas), and new UnifiedState via apply_routing_result

WHAT THIS LAYER MUST NOT DO:
============================
- Mutate the state it is given
- Hold state between calls (the router is stateless)
- Touch entries, or any realm the message does not name
- Raise for expected input ranges (failures are results)

ROUTING RULES:
==============
- Blow:    debit `amount`, credit `amount * muscle efficiency` (20% lost)
- Suck:    debit `amount`, credit `amount * mind efficiency`   (10% lost)
- Balance: move min(diff * balancing_rate, diff / 2) from higher to lower,
           no loss; no-op when diff <= equilibrium_threshold
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from ..contracts.base import Realm, RoutingErrorCode
from ..contracts.routing import Balance, Blow, EnergyMessage, RoutingResult, Suck
from ..contracts.state import UnifiedState
from ..contracts.events import AuditEventType
from ..observability import ObservabilityEngine
from ..transforms.functional import (
    MIND_TRANSFER_EFFICIENCY,
    MUSCLE_TRANSFER_EFFICIENCY,
    clamp,
)


@dataclass
class RouterConfig:
    """Physics constants for the router."""
    muscle_transfer_efficiency: float = MUSCLE_TRANSFER_EFFICIENCY
    mind_transfer_efficiency: float = MIND_TRANSFER_EFFICIENCY
    balancing_rate: float = 0.05
    equilibrium_threshold: float = 0.01

    @property
    def max_loss_rate(self) -> float:
        return 1.0 - min(self.muscle_transfer_efficiency, self.mind_transfer_efficiency)


class EnergyRouter:
    """
    Stateless dispatcher for energy messages.

    GUARANTEES:
    ===========
    1. route() never mutates its input state
    2. A failed result carries no deltas and applies as identity
    3. Only realms named by the message appear in the deltas
    """

    def __init__(
        self,
        config: Optional[RouterConfig] = None,
        observability: Optional[ObservabilityEngine] = None
    ):
        self._config = config or RouterConfig()
        self._observability = observability

    @property
    def config(self) -> RouterConfig:
        return self._config

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def route(self, message: EnergyMessage, state: UnifiedState) -> RoutingResult:
        """Route one message against one state snapshot."""
        if isinstance(message, Blow):
            result = self._handle_transfer(
                message.source, message.destination, message.amount, state,
                efficiency=self._config.muscle_transfer_efficiency,
                verb="Blowing", noun="Blow",
            )
        elif isinstance(message, Suck):
            result = self._handle_transfer(
                message.source, message.destination, message.amount, state,
                efficiency=self._config.mind_transfer_efficiency,
                verb="Sucking", noun="Suction",
            )
        elif isinstance(message, Balance):
            result = self._handle_balance(message.first, message.second, state)
        else:
            raise TypeError(f"Unsupported energy message: {message!r}")

        self._record(message, result)
        return result

    # =========================================================================
    # HANDLERS
    # =========================================================================

    def _handle_transfer(
        self,
        source: Realm,
        destination: Realm,
        amount: float,
        state: UnifiedState,
        efficiency: float,
        verb: str,
        noun: str
    ) -> RoutingResult:
        source = Realm.coerce(source)
        destination = Realm.coerce(destination)

        if not amount > 0:
            return RoutingResult.failed(
                f"{noun} amount must be positive",
                RoutingErrorCode.NON_POSITIVE_AMOUNT
            )

        if state.level(source) < amount:
            return RoutingResult.failed(
                f"Insufficient energy in {source.value}",
                RoutingErrorCode.INSUFFICIENT_ENERGY
            )

        if source is destination:
            return RoutingResult.failed(
                f"Source and destination must differ ({source.value})",
                RoutingErrorCode.SAME_REALM
            )

        return RoutingResult.succeeded(
            f"{verb} {amount} energy from {source.value} to {destination.value}",
            (
                (source, -amount),
                (destination, amount * efficiency),
            )
        )

    def _handle_balance(
        self,
        first: Realm,
        second: Realm,
        state: UnifiedState
    ) -> RoutingResult:
        first = Realm.coerce(first)
        second = Realm.coerce(second)
        first_level = state.level(first)
        second_level = state.level(second)

        difference = abs(first_level - second_level)
        if difference <= self._config.equilibrium_threshold:
            return RoutingResult.succeeded("Realms already balanced")

        # Never more than half the gap, so the levels cannot cross
        transfer = min(difference * self._config.balancing_rate, difference / 2)

        if first_level > second_level:
            higher, lower = first, second
        else:
            higher, lower = second, first

        return RoutingResult.succeeded(
            f"Balancing: {higher.value} -> {lower.value}",
            (
                (higher, -transfer),
                (lower, transfer),
            )
        )

    # =========================================================================
    # APPLICATION
    # =========================================================================

    def apply_routing_result(self, result: RoutingResult, state: UnifiedState) -> UnifiedState:
        """
        Build the state that results from applying result to state.

        A failed result returns the input state unchanged.
        """
        if not result.success:
            return state

        deltas = result.delta_map
        if not deltas:
            return state

        levels = {
            realm: (clamp(state.level(realm) + deltas[realm]) if deltas.get(realm) else state.level(realm))
            for realm in Realm
        }

        return UnifiedState(
            entries=state.entries,
            physical_energy=levels[Realm.PHYSICAL],
            intellectual_energy=levels[Realm.INTELLECTUAL],
            bridge_strength=levels[Realm.BRIDGE],
        )

    # =========================================================================
    # CONVENIENCE (reservoirs only)
    # =========================================================================

    def blow_physical_to_intellectual(self, amount: float, state: UnifiedState) -> RoutingResult:
        return self.route(Blow(Realm.PHYSICAL, Realm.INTELLECTUAL, amount), state)

    def blow_intellectual_to_physical(self, amount: float, state: UnifiedState) -> RoutingResult:
        return self.route(Blow(Realm.INTELLECTUAL, Realm.PHYSICAL, amount), state)

    def suck_intellectual_to_physical(self, amount: float, state: UnifiedState) -> RoutingResult:
        return self.route(Suck(Realm.INTELLECTUAL, Realm.PHYSICAL, amount), state)

    def suck_physical_to_intellectual(self, amount: float, state: UnifiedState) -> RoutingResult:
        return self.route(Suck(Realm.PHYSICAL, Realm.INTELLECTUAL, amount), state)

    def auto_balance(self, state: UnifiedState) -> RoutingResult:
        return self.route(Balance(Realm.PHYSICAL, Realm.INTELLECTUAL), state)

    # =========================================================================
    # OBSERVABILITY
    # =========================================================================

    def _record(self, message: EnergyMessage, result: RoutingResult):
        if self._observability is None:
            return

        message_type = type(message).__name__.lower()
        self._observability.log_audit(
            action=f"route_{message_type}",
            outcome="success" if result.success else "failure",
            details=result.message,
            layer="router",
            event_type=AuditEventType.ROUTING if result.success else AuditEventType.ERROR,
        )
        self._observability.collect_metric(
            "routing_operations_total", 1.0, {"message_type": message_type}
        )
        if not result.success:
            self._observability.collect_metric(
                "routing_failures_total", 1.0, {"error_code": result.error_code.value}
            )
