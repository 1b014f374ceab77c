"""matrix-reducer: fold Matrix client events into an immutable snapshot."""

from matrix_reducer.models.events import UnsupportedEventKind
from matrix_reducer.models.snapshot import Snapshot, initial_snapshot
from matrix_reducer.reducers.router import reduce, replay

__all__ = ["reduce", "replay", "initial_snapshot", "Snapshot", "UnsupportedEventKind"]
