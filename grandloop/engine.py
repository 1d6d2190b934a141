"""
Engine Orchestration Module

This module owns the single current UnifiedState and exposes the
operations callers invoke. It is the only place a state is replaced.

DESIGN PRINCIPLES:
==================
1. Layers communicate ONLY through contracts
2. Every operation computes a new state and publishes it; nothing is mutated
3. All operations are traceable through observability
4. Read-modify-write is serialized per engine instance
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Optional, Union
import threading
import time

from .contracts.base import Realm, RoutingErrorCode, TransformResult
from .contracts.events import AuditEventType
from .contracts.routing import Balance, Blow, EnergyMessage, RoutingResult, Suck
from .contracts.state import DEFAULT_LEVEL, Entry, StateMetrics, UnifiedState
from .observability import ObservabilityConfig, ObservabilityEngine
from .router import EnergyRouter, RouterConfig
from .storage import EntryStore
from .transforms.functional import boost, identity, is_in_bounds, with_precondition
from .transforms.state import StateTransformer, lift_to


StateListener = Callable[[UnifiedState], None]
RealmLike = Union[Realm, str]


@dataclass
class EngineConfig:
    """Unified configuration for the engine and the layers it owns."""
    boost_amount: float = 0.15
    reservoir_entry_boost: float = 0.05
    bridge_entry_boost: float = 0.10
    flow_rate: float = 0.01
    router: RouterConfig = None
    observability: ObservabilityConfig = None

    def __post_init__(self):
        self.router = self.router or RouterConfig()
        self.observability = self.observability or ObservabilityConfig()


class PhysicsEngine:
    """
    Single-writer holder of the unified state.

    OPERATION FLOW:
    ===============
    1. Read the current state under the lock
    2. Compute the next state (router or transforms, both pure)
    3. Replace the current state, still under the lock
    4. Notify listeners and the store outside the lock

    Every replacement takes a sequence number under the lock. Listeners
    see states in that order; a state superseded before its turn to be
    published is skipped.

    GUARANTEES:
    ===========
    - entries change only through record_entry / sync_from_store
    - bridge_strength changes only through boost_bridge,
      record_entry(bridge) and set_level(bridge)
    - routing failures leave the state untouched and never raise
    """

    def __init__(
        self,
        initial_state: Optional[UnifiedState] = None,
        config: Optional[EngineConfig] = None,
        store: Optional[EntryStore] = None,
        observability: Optional[ObservabilityEngine] = None
    ):
        self._config = config or EngineConfig()
        self._state = initial_state or UnifiedState()
        self._store = store
        self._observability = observability or ObservabilityEngine(self._config.observability)
        self._router = EnergyRouter(self._config.router, self._observability)

        self._lock = threading.RLock()
        self._publish_lock = threading.RLock()
        self._listeners: List[StateListener] = []
        self._sequence = 0
        self._published_sequence = 0
        self._started_at = time.monotonic()
        self.last_error: Optional[str] = None

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def state(self) -> UnifiedState:
        """Current snapshot. Safe to share: snapshots are immutable."""
        with self._lock:
            return self._state

    @property
    def router(self) -> EnergyRouter:
        return self._router

    @property
    def observability(self) -> ObservabilityEngine:
        return self._observability

    @property
    def config(self) -> EngineConfig:
        return self._config

    def metrics(self) -> StateMetrics:
        return StateMetrics.from_state(
            self.state,
            uptime_seconds=time.monotonic() - self._started_at
        )

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener for published states. Returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)
        return unsubscribe

    # =========================================================================
    # BOOSTS
    # =========================================================================

    def boost_physical(self) -> UnifiedState:
        return self._transform("boost_physical", lift_to(Realm.PHYSICAL, boost(self._config.boost_amount)))

    def boost_intellectual(self) -> UnifiedState:
        return self._transform("boost_intellectual", lift_to(Realm.INTELLECTUAL, boost(self._config.boost_amount)))

    def boost_bridge(self) -> UnifiedState:
        return self._transform("boost_bridge", lift_to(Realm.BRIDGE, boost(self._config.boost_amount)))

    def tick(self) -> UnifiedState:
        """
        One iteration of the logic loop.

        Each reservoir gains flow_rate * bridge_strength; the bridge and
        the entries are left alone. Scheduling ticks is up to the caller.
        """
        def flow(state: UnifiedState) -> UnifiedState:
            gain = boost(self._config.flow_rate * state.bridge_strength)
            return lift_to(Realm.INTELLECTUAL, gain)(lift_to(Realm.PHYSICAL, gain)(state))

        return self._transform("tick", flow)

    # =========================================================================
    # ROUTING
    # =========================================================================

    def blow(self, source: RealmLike, destination: RealmLike, amount: float) -> RoutingResult:
        """Push amount from source to destination (reservoirs only)."""
        return self._route_between_reservoirs(Blow, source, destination, amount)

    def suck(self, source: RealmLike, destination: RealmLike, amount: float) -> RoutingResult:
        """Pull amount from source into destination (reservoirs only)."""
        return self._route_between_reservoirs(Suck, source, destination, amount)

    def auto_balance(self) -> RoutingResult:
        return self._dispatch(Balance(Realm.PHYSICAL, Realm.INTELLECTUAL))

    def _route_between_reservoirs(
        self,
        message_type,
        source: RealmLike,
        destination: RealmLike,
        amount: float
    ) -> RoutingResult:
        source = Realm.coerce(source)
        destination = Realm.coerce(destination)

        if not (source.is_reservoir and destination.is_reservoir):
            result = RoutingResult.failed(
                "Bridge strength cannot be routed",
                RoutingErrorCode.BRIDGE_NOT_ROUTABLE
            )
            self._set_error(result.message)
            self._observability.log_audit(
                action=f"{message_type.__name__.lower()}_rejected",
                outcome="failure",
                details=result.message,
                event_type=AuditEventType.ERROR,
            )
            return result

        return self._dispatch(message_type(source, destination, amount))

    def _dispatch(self, message: EnergyMessage) -> RoutingResult:
        with self._lock:
            before = self._state
            result = self._router.route(message, before)
            if not result.success:
                self.last_error = result.message
                return result

            after = self._router.apply_routing_result(result, before)
            sequence = self._commit(after)
            self.last_error = None

        loss = (
            before.physical_energy + before.intellectual_energy + before.bridge_strength
            - after.physical_energy - after.intellectual_energy - after.bridge_strength
        )
        self._observability.collect_metric(
            "energy_loss", loss, {"message_type": type(message).__name__.lower()}
        )
        self._publish(after, sequence)
        return result

    # =========================================================================
    # ENTRIES
    # =========================================================================

    def record_entry(self, content: str, category: RealmLike) -> Entry:
        """
        Append a new entry and boost the field matching its category.

        The append is visible to the next read immediately. Persistence
        happens afterwards; a store failure is reported through
        last_error and never rolls the append back.
        """
        category = Realm.coerce(category)
        entry = Entry.create(content, category)
        amount = (
            self._config.bridge_entry_boost
            if category is Realm.BRIDGE
            else self._config.reservoir_entry_boost
        )

        with self._lock:
            appended = self._state.appending(entry)
            published = lift_to(category, boost(amount))(appended)
            sequence = self._commit(published)

        self._observability.log_audit(
            action="record_entry",
            entity_id=entry.entry_id,
            details=category.value,
            event_type=AuditEventType.ENTRY_RECORDED,
        )
        self._observability.collect_metric(
            "entries_recorded_total", 1.0, {"category": category.value}
        )
        self._publish(published, sequence)
        self._persist(entry)
        return entry

    def sync_from_store(self) -> int:
        """
        Merge stored entries that are not yet held.

        Existing entries keep their order; new ones are appended oldest
        first. Returns the number of entries merged.
        """
        if self._store is None:
            return 0

        try:
            fetched = self._store.fetch_all()
        except Exception as exc:
            self._set_error(f"Failed to sync entries: {exc}")
            self._observability.log_audit(
                action="sync_from_store",
                outcome="failure",
                details=str(exc),
                layer="storage",
                event_type=AuditEventType.PERSISTENCE,
            )
            return 0

        with self._lock:
            known = {e.entry_id for e in self._state.entries}
            missing = sorted(
                (e for e in fetched if e.entry_id not in known),
                key=lambda e: e.timestamp
            )
            published = self._state
            sequence = None
            if missing:
                published = published.with_entries(published.entries + tuple(missing))
                sequence = self._commit(published)

        self._observability.log_audit(
            action="sync_from_store",
            details=f"merged={len(missing)}",
            layer="storage",
            event_type=AuditEventType.PERSISTENCE,
        )
        if missing:
            self._publish(published, sequence)
        return len(missing)

    def _persist(self, entry: Entry):
        if self._store is None:
            return

        try:
            write = self._store.save(entry)
            error_message = None if write.success else (write.error_message or "store rejected entry")
        except Exception as exc:
            error_message = str(exc)

        if error_message is None:
            self._observability.log_audit(
                action="save_entry",
                entity_id=entry.entry_id,
                layer="storage",
                event_type=AuditEventType.PERSISTENCE,
            )
            return

        self._set_error(f"Failed to save entry: {error_message}")
        self._observability.log_audit(
            action="save_entry",
            entity_id=entry.entry_id,
            outcome="failure",
            details=error_message,
            layer="storage",
            event_type=AuditEventType.PERSISTENCE,
        )
        self._observability.collect_metric("store_failures_total", 1.0)

    # =========================================================================
    # ADMIN OVERRIDES
    # =========================================================================

    def reset_energy(self) -> UnifiedState:
        """Put both reservoirs back to the default level."""
        def reset(state: UnifiedState) -> UnifiedState:
            return (
                state
                .with_level(Realm.PHYSICAL, DEFAULT_LEVEL)
                .with_level(Realm.INTELLECTUAL, DEFAULT_LEVEL)
            )

        return self._transform("reset_energy", reset)

    def set_level(self, realm: RealmLike, level: float) -> TransformResult:
        """
        Override one level.

        Levels outside [0, 1] are rejected, not clamped, and the state
        is left unchanged.
        """
        realm = Realm.coerce(realm)
        checked = with_precondition(
            is_in_bounds, identity, f"{realm.value} level must be within [0, 1]"
        )(level)

        if checked.is_failure:
            self._set_error(checked.reason)
            self._observability.log_audit(
                action="set_level",
                outcome="failure",
                details=checked.reason,
                event_type=AuditEventType.ERROR,
            )
            return checked

        self._transform(
            "set_level",
            lambda state: state.with_level(realm, checked.value),
        )
        return checked

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _transform(self, action: str, transformer: StateTransformer) -> UnifiedState:
        with self._lock:
            published = transformer(self._state)
            sequence = self._commit(published)

        self._observability.log_audit(
            action=action,
            event_type=AuditEventType.STATE_CHANGE,
        )
        self._publish(published, sequence)
        return published

    def _commit(self, state: UnifiedState) -> int:
        """Replace the current state. Caller holds self._lock."""
        self._state = state
        self._sequence += 1
        return self._sequence

    def _set_error(self, message: str):
        with self._lock:
            self.last_error = message

    def _publish(self, state: UnifiedState, sequence: int):
        with self._publish_lock:
            if sequence <= self._published_sequence:
                return
            self._published_sequence = sequence

            self._observability.collect_metric("harmony", state.harmony)

            with self._lock:
                listeners = list(self._listeners)

            for listener in listeners:
                listener(state)
