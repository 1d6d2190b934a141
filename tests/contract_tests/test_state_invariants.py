"""
Property Tests for the State Model
Verifies bounded levels, harmony, entry identity and serialization fidelity.
"""

import dataclasses
import json
import math
from datetime import datetime, timezone

import pytest
from hypothesis import given, strategies as st
from hypothesis.strategies import composite

from grandloop.contracts.base import Realm, TimeRange, Timestamp
from grandloop.contracts.state import DEFAULT_LEVEL, Entry, StateMetrics, UnifiedState
from grandloop.domain.serialization import (
    StrictStateEncoder,
    decode_entry,
    decode_state,
    encode_entry,
    encode_state,
)
from grandloop.transforms import (
    boost,
    decay,
    lift_to_all,
    lift_to_bridge,
    lift_to_intellectual,
    lift_to_physical,
)

# =============================================================================
# STRATEGIES (Generators)
# =============================================================================

energies = st.floats(min_value=0.0, max_value=1.0)


@composite
def entries(draw):
    """Generates entries with explicit identity and UTC timestamps."""
    return Entry(
        entry_id=draw(st.uuids()).hex,
        timestamp=draw(st.datetimes(
            min_value=datetime(2020, 1, 1),
            max_value=datetime(2030, 1, 1),
            timezones=st.just(timezone.utc),
        )),
        content=draw(st.text(max_size=40)),
        category=draw(st.sampled_from(Realm)),
    )


@composite
def states(draw):
    """Generates valid unified states."""
    return UnifiedState(
        entries=tuple(draw(st.lists(entries(), max_size=5))),
        physical_energy=draw(energies),
        intellectual_energy=draw(energies),
        bridge_strength=draw(energies),
    )


# =============================================================================
# LEVELS & HARMONY
# =============================================================================

class TestUnifiedState:

    def test_defaults(self):
        state = UnifiedState()

        assert state.entries == ()
        assert state.physical_energy == DEFAULT_LEVEL
        assert state.intellectual_energy == DEFAULT_LEVEL
        assert state.bridge_strength == DEFAULT_LEVEL
        assert state.harmony == pytest.approx(0.5)

    def test_harmony_of_balanced_full_bridge(self):
        state = UnifiedState(physical_energy=0.7, intellectual_energy=0.7, bridge_strength=1.0)
        assert state.harmony == pytest.approx(1.0)

    def test_harmony_of_opposite_reservoirs(self):
        state = UnifiedState(physical_energy=1.0, intellectual_energy=0.0, bridge_strength=1.0)
        assert state.harmony == 0.0

    def test_harmony_without_bridge(self):
        state = UnifiedState(physical_energy=0.5, intellectual_energy=0.5, bridge_strength=0.0)
        assert state.harmony == 0.0

    @given(states())
    def test_harmony_bounded_by_bridge(self, state):
        assert 0.0 <= state.harmony <= state.bridge_strength <= 1.0

    @given(
        st.floats(allow_nan=False, min_value=-5.0, max_value=5.0),
        st.floats(allow_nan=False, min_value=-5.0, max_value=5.0),
        st.floats(allow_nan=False, min_value=-5.0, max_value=5.0),
    )
    def test_construction_clamps_levels(self, p, i, b):
        state = UnifiedState(physical_energy=p, intellectual_energy=i, bridge_strength=b)

        for realm in Realm:
            assert 0.0 <= state.level(realm) <= 1.0

    def test_nan_level_becomes_zero(self):
        assert UnifiedState(physical_energy=math.nan).physical_energy == 0.0

    def test_state_is_frozen(self):
        state = UnifiedState()
        with pytest.raises(dataclasses.FrozenInstanceError):
            state.physical_energy = 0.9

    def test_entries_are_stored_as_tuple(self):
        entry = Entry.create("note", Realm.PHYSICAL)
        state = UnifiedState(entries=[entry])
        assert state.entries == (entry,)

    @given(states(), st.sampled_from(Realm), energies)
    def test_with_level_replaces_one_field(self, state, realm, value):
        updated = state.with_level(realm, value)

        assert updated.level(realm) == value
        assert updated.entries == state.entries
        for other in Realm:
            if other is not realm:
                assert updated.level(other) == state.level(other)

    def test_level_accepts_realm_strings(self):
        state = UnifiedState(bridge_strength=0.3)
        assert state.level("bridge") == 0.3


# =============================================================================
# ENTRIES
# =============================================================================

class TestEntries:

    def test_identical_content_gets_distinct_identity(self):
        first = Entry.create("same", Realm.BRIDGE)
        second = Entry.create("same", Realm.BRIDGE)

        assert first.entry_id != second.entry_id
        assert first != second

    def test_create_uses_utc_and_coerces_category(self):
        entry = Entry.create("insight", "intellectual")

        assert entry.timestamp.tzinfo is not None
        assert entry.category is Realm.INTELLECTUAL

    def test_naive_timestamp_is_treated_as_utc(self):
        entry = Entry("e1", datetime(2026, 1, 1, 10, 0), "x", Realm.PHYSICAL)
        assert entry.timestamp == datetime(2026, 1, 1, 10, 0, tzinfo=timezone.utc)

    @given(states(), entries())
    def test_appending_keeps_order_and_source(self, state, entry):
        updated = state.appending(entry)

        assert updated.entries[:-1] == state.entries
        assert updated.entries[-1] == entry
        assert len(state.entries) == len(updated.entries) - 1

    def test_unknown_category_is_rejected(self):
        with pytest.raises(ValueError):
            Realm.coerce("spiritual")


# =============================================================================
# STATE TRANSFORMERS
# =============================================================================

class TestStateLifts:

    @given(states())
    def test_lifts_touch_only_their_field(self, state):
        cases = (
            (lift_to_physical, Realm.PHYSICAL),
            (lift_to_intellectual, Realm.INTELLECTUAL),
            (lift_to_bridge, Realm.BRIDGE),
        )
        for lift, realm in cases:
            updated = lift(boost(0.1))(state)

            assert updated.entries == state.entries
            assert updated.level(realm) >= state.level(realm)
            for other in Realm:
                if other is not realm:
                    assert updated.level(other) == state.level(other)

    @given(states())
    def test_lift_to_all_applies_everywhere(self, state):
        updated = lift_to_all(decay(0.1))(state)

        for realm in Realm:
            assert updated.level(realm) <= state.level(realm)
        assert updated.entries == state.entries

    def test_lift_never_mutates_source(self):
        state = UnifiedState(physical_energy=0.2)
        lift_to_physical(boost(0.5))(state)
        assert state.physical_energy == 0.2


# =============================================================================
# SERIALIZATION
# =============================================================================

class TestSerialization:

    @given(states())
    def test_state_survives_encoding(self, state):
        assert decode_state(encode_state(state)) == state

    @given(entries())
    def test_entry_identity_and_timestamp_survive(self, entry):
        decoded = decode_entry(encode_entry(entry))

        assert decoded.entry_id == entry.entry_id
        assert decoded.timestamp == entry.timestamp
        assert decoded == entry

    def test_encoded_harmony_is_recomputed(self):
        state = UnifiedState(physical_energy=0.7, intellectual_energy=0.7, bridge_strength=1.0)
        payload = json.loads(encode_state(state))
        assert payload["harmony"] == pytest.approx(1.0)

        payload["harmony"] = 0.0
        assert decode_state(json.dumps(payload)).harmony == pytest.approx(1.0)

    def test_encoded_entry_uses_plain_values(self):
        entry = Entry(
            "e1",
            datetime(2026, 1, 1, 10, 0, tzinfo=timezone.utc),
            "x",
            Realm.BRIDGE,
        )
        payload = json.loads(encode_entry(entry))

        assert payload == {
            "entry_id": "e1",
            "timestamp": "2026-01-01T10:00:00+00:00",
            "content": "x",
            "category": "bridge",
        }

    def test_encoder_rejects_non_contract_values(self):
        with pytest.raises(TypeError):
            json.dumps({"levels": {0.5}}, cls=StrictStateEncoder)
        with pytest.raises(TypeError):
            json.dumps(StateMetrics.from_state(UnifiedState()), cls=StrictStateEncoder)

    def test_nested_entries_use_their_contract_form(self):
        entry = Entry.create("x", Realm.PHYSICAL)
        payload = json.loads(json.dumps({"batch": [entry]}, cls=StrictStateEncoder))

        assert payload["batch"] == [entry.to_dict()]


# =============================================================================
# METRICS & TIME
# =============================================================================

class TestStateMetrics:

    def test_counts_by_category(self):
        state = UnifiedState(
            entries=(
                Entry.create("a", Realm.PHYSICAL),
                Entry.create("b", Realm.PHYSICAL),
                Entry.create("c", Realm.BRIDGE),
            ),
            physical_energy=0.8,
            intellectual_energy=0.4,
        )
        metrics = StateMetrics.from_state(state, uptime_seconds=3.0)

        assert metrics.total_entries == 3
        assert metrics.category_count(Realm.PHYSICAL) == 2
        assert metrics.category_count("bridge") == 1
        assert metrics.category_count(Realm.INTELLECTUAL) == 0
        assert metrics.entries_by_category == (("bridge", 1), ("physical", 2))
        assert metrics.average_energy_level == pytest.approx(0.6)
        assert metrics.harmony == state.harmony
        assert metrics.uptime_seconds == 3.0

    def test_time_range_rejects_inverted_bounds(self):
        early = Timestamp.from_iso("2026-01-01T00:00:00Z")
        late = Timestamp.from_iso("2026-01-02T00:00:00Z")

        assert TimeRange(early, late).contains(early)
        with pytest.raises(ValueError):
            TimeRange(late, early)
