import json
from typing import Any

from ..contracts.state import Entry, UnifiedState


class StrictStateEncoder(json.JSONEncoder):
    """
    JSON Encoder for state contracts.

    RULES:
    1. Entries and states are written through their to_dict().
    2. Anything else is rejected with TypeError; there is no lossy fallback.
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, (Entry, UnifiedState)):
            return obj.to_dict()

        return super().default(obj)


def encode_entry(entry: Entry) -> str:
    return json.dumps(entry, cls=StrictStateEncoder, sort_keys=True)


def decode_entry(payload: str) -> Entry:
    return Entry.from_dict(json.loads(payload))


def encode_state(state: UnifiedState) -> str:
    return json.dumps(state, cls=StrictStateEncoder, sort_keys=True)


def decode_state(payload: str) -> UnifiedState:
    """Rebuild a state; the stored harmony is ignored and recomputed."""
    return UnifiedState.from_dict(json.loads(payload))
