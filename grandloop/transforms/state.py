"""
State Transformers

Lift an energy transform so it acts on one field of a UnifiedState.
Every other field, entries included, is carried over untouched.
"""

from __future__ import annotations
from typing import Callable

from ..contracts.base import Realm
from ..contracts.state import UnifiedState
from .functional import EnergyTransformer, apply_transform


StateTransformer = Callable[[UnifiedState], UnifiedState]


def fmap_state(transform: StateTransformer, state: UnifiedState) -> UnifiedState:
    return transform(state)


def lift_to(realm: Realm, transform: EnergyTransformer) -> StateTransformer:
    """Lift transform onto the field named by realm."""
    realm = Realm.coerce(realm)

    def lifted(state: UnifiedState) -> UnifiedState:
        return state.with_level(realm, apply_transform(transform, state.level(realm)))
    return lifted


def lift_to_physical(transform: EnergyTransformer) -> StateTransformer:
    return lift_to(Realm.PHYSICAL, transform)


def lift_to_intellectual(transform: EnergyTransformer) -> StateTransformer:
    return lift_to(Realm.INTELLECTUAL, transform)


def lift_to_bridge(transform: EnergyTransformer) -> StateTransformer:
    return lift_to(Realm.BRIDGE, transform)


def lift_to_all(transform: EnergyTransformer) -> StateTransformer:
    """Apply the same transform to each level independently."""
    def lifted(state: UnifiedState) -> UnifiedState:
        return UnifiedState(
            entries=state.entries,
            physical_energy=apply_transform(transform, state.physical_energy),
            intellectual_energy=apply_transform(transform, state.intellectual_energy),
            bridge_strength=apply_transform(transform, state.bridge_strength),
        )
    return lifted
