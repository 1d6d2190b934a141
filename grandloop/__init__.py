"""
Grand Loop Energy Engine

This package models a two-realm energy economy: a physical reservoir
and an intellectual reservoir, coupled by a bridge. Each layer
communicates only through explicit contracts, never through shared
mutable state.

LAYER STRUCTURE:
================

1. CONTRACTS (contracts/)
   - Responsibility: Immutable value types shared by every layer
   - Outputs: Realm, UnifiedState, Entry, routing messages, results
   - MUST NOT: Hold behavior beyond construction and derived values

2. TRANSFORM LIBRARY (transforms/)
   - Responsibility: Pure bounded arithmetic and its lifts onto a state
   - Allowed inputs: Quantities in [0, 1], UnifiedState snapshots
   - Outputs: Quantities in [0, 1], new UnifiedState snapshots
   - MUST NOT: Mutate input, raise for in-domain values

3. ROUTING LAYER (router/)
   - Responsibility: Blow, Suck and Balance physics
   - Allowed inputs: EnergyMessage + UnifiedState snapshot
   - Outputs: RoutingResult (deltas), applied UnifiedState
   - MUST NOT: Hold state between calls, touch entries

4. STORAGE LAYER (storage/)
   - Responsibility: Persistence port for recorded entries
   - Allowed inputs: Entry values
   - Outputs: StorageWriteResult, stored entries
   - MUST NOT: Touch levels, rewrite stored entries

5. OBSERVABILITY & AUDIT LAYER (observability/)
   - Responsibility: Audit log and metrics for every operation
   - Allowed inputs: Actions reported by the router and the engine
   - Outputs: AuditLogEntry, MetricPoint, audit reports
   - MUST NOT: Modify system behavior

6. ENGINE (engine.py)
   - Responsibility: Owns the current state, serializes updates
   - Allowed inputs: Caller operations
   - Outputs: Published UnifiedState snapshots, RoutingResult
   - MUST NOT: Mutate a published snapshot

CONSTRAINTS ENFORCED:
=====================
- Immutability-first: All state snapshots are frozen
- Bounded: Every stored quantity lies in [0.0, 1.0]
- Lossy routing: Transfers never create energy
- Append-only: Entries are never removed or reordered
- Explicit errors: Rejected operations are results, not exceptions
"""
