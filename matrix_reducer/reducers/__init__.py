"""Reducers that fold tagged events into a Snapshot."""

from matrix_reducer.reducers.router import reduce, replay, replay_history
from matrix_reducer.reducers.api_calls import apply_api_event
from matrix_reducer.reducers.rooms import apply_protocol_event
from matrix_reducer.reducers.series import apply_series

__all__ = [
    "reduce",
    "replay",
    "replay_history",
    "apply_api_event",
    "apply_protocol_event",
    "apply_series",
]
