"""
Bounded Transform Library
=========================

Pure, composable transforms over energy quantities in [0.0, 1.0].

LAWS:
- Functor identity:     apply_transform(identity, e) == e          (e in bounds)
- Functor composition:  apply_transform(compose(f, g), e)
                        == apply_transform(f, apply_transform(g, e))
- Monad left identity:  bind(pure(a), f) == apply_transform(f, a)
- Monad right identity: bind(m, pure) == clamp(m)

Every transform returned from this module clamps its output.
Only the contract wrappers can fail, and they fail with a value,
never an exception.
"""

from __future__ import annotations
from functools import reduce
from typing import Callable, Iterable, List, Optional

from ..contracts.base import ENERGY_MAX, ENERGY_MIN, TransformResult, clamp_quantity


EnergyTransformer = Callable[[float], float]
EnergyPredicate = Callable[[float], bool]
EnergyBinaryOp = Callable[[float, float], float]
ContractTransformer = Callable[[float], TransformResult]

# Tolerance for floating comparisons
EPSILON: float = 0.0001

# Push transfers lose 20%, pull transfers lose 10%
MUSCLE_TRANSFER_EFFICIENCY: float = 0.8
MIND_TRANSFER_EFFICIENCY: float = 0.9

DEFAULT_BOOST: float = 0.15
DEFAULT_DECAY: float = 0.005
DEFAULT_BALANCE_THRESHOLD: float = 0.01

PRECONDITION_FAILED = "Precondition failed: invalid input"
POSTCONDITION_FAILED = "Postcondition failed: invalid output"


# =============================================================================
# CORE
# =============================================================================

def clamp(value: float) -> float:
    """Clamp a value to [ENERGY_MIN, ENERGY_MAX]. Idempotent."""
    return clamp_quantity(value)


def identity(value: float) -> float:
    return value


def apply_transform(transform: EnergyTransformer, energy: float) -> float:
    """Apply a transform and clamp the result (fmap)."""
    return clamp(transform(energy))


fmap = apply_transform


def pure(value: float) -> float:
    """Lift a raw value into the energy domain."""
    return clamp(value)


def bind(energy: float, transform: EnergyTransformer) -> float:
    """Chain a transform onto an energy value."""
    return apply_transform(transform, energy)


def bind_result(
    result: TransformResult,
    transform: Callable[[float], TransformResult]
) -> TransformResult:
    """Chain an operation that may fail onto a previous result."""
    return result.flat_map(transform)


def apply(
    transform: Optional[EnergyTransformer],
    energy: Optional[float]
) -> Optional[float]:
    """Apply an optional transform to an optional value; None if either is missing."""
    if transform is None or energy is None:
        return None
    return apply_transform(transform, energy)


# =============================================================================
# COMPOSITION
# =============================================================================

def compose(f: EnergyTransformer, g: EnergyTransformer) -> EnergyTransformer:
    """Right-to-left composition: f(g(x)), clamped at each stage."""
    def composed(energy: float) -> float:
        return clamp(f(clamp(g(energy))))
    return composed


def pipe(f: EnergyTransformer, g: EnergyTransformer) -> EnergyTransformer:
    """Left-to-right composition: g(f(x)), clamped at each stage."""
    def piped(energy: float) -> float:
        return clamp(g(clamp(f(energy))))
    return piped


def pipe_all(*transforms: EnergyTransformer) -> EnergyTransformer:
    """Pipe any number of transforms left to right."""
    return reduce(pipe, transforms, identity)


# =============================================================================
# TRANSFORMERS
# =============================================================================

def scale(factor: float) -> EnergyTransformer:
    """Scale by |factor|. Negative factors use their magnitude."""
    magnitude = abs(factor)

    def scaled(energy: float) -> float:
        return clamp(energy * magnitude)
    return scaled


def offset(delta: float) -> EnergyTransformer:
    def shifted(energy: float) -> float:
        return clamp(energy + delta)
    return shifted


def boost(amount: float = DEFAULT_BOOST) -> EnergyTransformer:
    """Increase by |amount|. Output is never below input."""
    magnitude = abs(amount)

    def boosted(energy: float) -> float:
        return clamp(energy + magnitude)
    return boosted


def decay(rate: float = DEFAULT_DECAY) -> EnergyTransformer:
    """Decrease by |rate|. Output is never above input."""
    magnitude = abs(rate)

    def decayed(energy: float) -> float:
        return clamp(energy - magnitude)
    return decayed


muscle_transfer: EnergyTransformer = scale(MUSCLE_TRANSFER_EFFICIENCY)
mind_transfer: EnergyTransformer = scale(MIND_TRANSFER_EFFICIENCY)


# =============================================================================
# BINARY OPERATIONS
# =============================================================================

def lift_binary(op: EnergyBinaryOp) -> EnergyBinaryOp:
    def lifted(a: float, b: float) -> float:
        return clamp(op(a, b))
    return lifted


def add(a: float, b: float) -> float:
    return clamp(a + b)


def subtract(a: float, b: float) -> float:
    return clamp(a - b)


def multiply(a: float, b: float) -> float:
    return clamp(a * b)


def average(a: float, b: float) -> float:
    return clamp((a + b) / 2.0)


# =============================================================================
# PREDICATES
# =============================================================================

def is_in_bounds(energy: float) -> bool:
    return ENERGY_MIN <= energy <= ENERGY_MAX


def is_balanced(threshold: float = DEFAULT_BALANCE_THRESHOLD) -> Callable[[float, float], bool]:
    def balanced(a: float, b: float) -> bool:
        return abs(a - b) <= threshold
    return balanced


def is_above_threshold(threshold: float) -> EnergyPredicate:
    def above(energy: float) -> bool:
        return energy > threshold
    return above


def is_below_threshold(threshold: float) -> EnergyPredicate:
    def below(energy: float) -> bool:
        return energy < threshold
    return below


def and_predicate(p: EnergyPredicate, q: EnergyPredicate) -> EnergyPredicate:
    def both(energy: float) -> bool:
        return p(energy) and q(energy)
    return both


def or_predicate(p: EnergyPredicate, q: EnergyPredicate) -> EnergyPredicate:
    def either(energy: float) -> bool:
        return p(energy) or q(energy)
    return either


def not_predicate(p: EnergyPredicate) -> EnergyPredicate:
    def negated(energy: float) -> bool:
        return not p(energy)
    return negated


# =============================================================================
# CONTRACTS
# =============================================================================

def with_precondition(
    precondition: EnergyPredicate,
    transform: EnergyTransformer,
    reason: str
) -> ContractTransformer:
    """Run transform only if precondition holds on the input."""
    def checked(energy: float) -> TransformResult:
        if not precondition(energy):
            return TransformResult.failure(reason)
        return TransformResult.success(apply_transform(transform, energy))
    return checked


def with_postcondition(
    transform: EnergyTransformer,
    postcondition: EnergyPredicate,
    reason: str
) -> ContractTransformer:
    """Run transform, then reject outputs violating postcondition."""
    def checked(energy: float) -> TransformResult:
        result = apply_transform(transform, energy)
        if not postcondition(result):
            return TransformResult.failure(reason)
        return TransformResult.success(result)
    return checked


def with_contract(
    precondition: EnergyPredicate,
    transform: EnergyTransformer,
    postcondition: EnergyPredicate,
    precondition_reason: str = PRECONDITION_FAILED,
    postcondition_reason: str = POSTCONDITION_FAILED
) -> ContractTransformer:
    """Check precondition, run transform, check postcondition."""
    def checked(energy: float) -> TransformResult:
        if not precondition(energy):
            return TransformResult.failure(precondition_reason)
        result = apply_transform(transform, energy)
        if not postcondition(result):
            return TransformResult.failure(postcondition_reason)
        return TransformResult.success(result)
    return checked


# =============================================================================
# UTILITIES
# =============================================================================

def approximately(a: float, b: float, tolerance: float = EPSILON) -> bool:
    return abs(a - b) < tolerance


def fold(transforms: Iterable[EnergyTransformer], initial: float) -> float:
    """Apply transforms left to right, clamping after every step."""
    return reduce(lambda acc, f: apply_transform(f, acc), transforms, pure(initial))


def unfold(seed: float, transform: EnergyTransformer, count: int) -> List[float]:
    """
    Iterate transform from seed.

    Returns count + 1 values starting with clamp(seed). A new list is
    built on every call; a negative count yields just the seed.
    """
    current = clamp(seed)
    values = [current]
    for _ in range(max(count, 0)):
        current = apply_transform(transform, current)
        values.append(current)
    return values


def curry(f: Callable) -> Callable:
    """(a, b) -> c  becomes  a -> b -> c"""
    return lambda a: lambda b: f(a, b)


def uncurry(f: Callable) -> Callable:
    """a -> b -> c  becomes  (a, b) -> c"""
    return lambda a, b: f(a)(b)


def flip(f: Callable) -> Callable:
    return lambda b, a: f(a, b)
