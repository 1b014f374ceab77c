"""Series reducer - unrolls a batch of tagged events.

A series is reduced one event at a time, in order, each result feeding the
next. Every item goes through the same reduce() as a standalone event, so
the outcome is the same as dispatching the events individually: a foreign
tag or a malformed body skips only that item.
"""

from collections.abc import Callable, Mapping
from typing import Any

from matrix_reducer.models.snapshot import Snapshot


def apply_series(
    series: list[Mapping[str, Any]],
    snapshot: Snapshot,
    reduce_event: Callable[[Any, Snapshot], Snapshot],
) -> Snapshot:
    """Reduce each event of the series in order.

    Args:
        series: Wire-shaped events, in arrival order. Series cannot nest.
        snapshot: The previous snapshot.
        reduce_event: The single-event reducer (the router's reduce).

    Returns:
        The snapshot after the last event.
    """
    for event in series:
        snapshot = reduce_event(event, snapshot)
    return snapshot
