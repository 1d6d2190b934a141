"""
Transform Layer
===============

Bounded arithmetic transforms and their lifts onto UnifiedState.

INVARIANTS:
- Every returned quantity is in [0.0, 1.0]
- No transform mutates its input or any shared state
- Same input -> same output

Modules:
- functional: scalar transforms, combinators, predicates, contracts
- state: field-wise lifts onto UnifiedState
"""

from .functional import (
    EnergyTransformer,
    EnergyPredicate,
    EnergyBinaryOp,
    EPSILON,
    MUSCLE_TRANSFER_EFFICIENCY,
    MIND_TRANSFER_EFFICIENCY,
    clamp,
    identity,
    apply_transform,
    fmap,
    pure,
    bind,
    bind_result,
    apply,
    compose,
    pipe,
    pipe_all,
    scale,
    offset,
    boost,
    decay,
    muscle_transfer,
    mind_transfer,
    lift_binary,
    add,
    subtract,
    multiply,
    average,
    is_in_bounds,
    is_balanced,
    is_above_threshold,
    is_below_threshold,
    and_predicate,
    or_predicate,
    not_predicate,
    with_precondition,
    with_postcondition,
    with_contract,
    approximately,
    fold,
    unfold,
    curry,
    uncurry,
    flip,
)
from .state import (
    StateTransformer,
    fmap_state,
    lift_to,
    lift_to_physical,
    lift_to_intellectual,
    lift_to_bridge,
    lift_to_all,
)

__all__ = [
    'EnergyTransformer',
    'EnergyPredicate',
    'EnergyBinaryOp',
    'EPSILON',
    'MUSCLE_TRANSFER_EFFICIENCY',
    'MIND_TRANSFER_EFFICIENCY',
    'clamp',
    'identity',
    'apply_transform',
    'fmap',
    'pure',
    'bind',
    'bind_result',
    'apply',
    'compose',
    'pipe',
    'pipe_all',
    'scale',
    'offset',
    'boost',
    'decay',
    'muscle_transfer',
    'mind_transfer',
    'lift_binary',
    'add',
    'subtract',
    'multiply',
    'average',
    'is_in_bounds',
    'is_balanced',
    'is_above_threshold',
    'is_below_threshold',
    'and_predicate',
    'or_predicate',
    'not_predicate',
    'with_precondition',
    'with_postcondition',
    'with_contract',
    'approximately',
    'fold',
    'unfold',
    'curry',
    'uncurry',
    'flip',
    'StateTransformer',
    'fmap_state',
    'lift_to',
    'lift_to_physical',
    'lift_to_intellectual',
    'lift_to_bridge',
    'lift_to_all',
]
