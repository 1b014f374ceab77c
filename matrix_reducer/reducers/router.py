"""Router - the single reduce() entry point.

reduce(event, snapshot) inspects the event's tag and hands it to:
- the API-call reducer for "mrw.wrapped_api.<status>"
- the series reducer for "mrw.wrapped_event" carrying a series
- the room reducer for any other "mrw.wrapped_event"

Outcomes:
- None as the event resets to the initial snapshot.
- Anything outside the namespace, or a namespaced event with a malformed
  body, passes through: the previous snapshot is returned unchanged.
- A namespaced tag with an unknown first segment raises UnsupportedEventKind.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from matrix_reducer.models.events import (
    ApiCallEvent,
    SeriesEvent,
    WrappedEvent,
    parse_event,
)
from matrix_reducer.models.snapshot import Snapshot, initial_snapshot
from matrix_reducer.reducers.api_calls import apply_api_event
from matrix_reducer.reducers.rooms import apply_protocol_event
from matrix_reducer.reducers.series import apply_series


def reduce(event: Any, snapshot: Snapshot | None = None) -> Snapshot | None:
    """Reduce one event against the previous snapshot.

    Args:
        event: None, a wire-shaped mapping, or a parsed ApiCallEvent,
               WrappedEvent or SeriesEvent.
        snapshot: The previous snapshot. A recognized event reduced against
                  None starts from the initial snapshot.

    Returns:
        The new snapshot (or the previous one on pass-through).

    Raises:
        UnsupportedEventKind: For a namespaced tag with an unknown first segment.
    """
    if event is None:
        return initial_snapshot()

    if isinstance(event, Mapping):
        try:
            parsed = parse_event(event)
        except ValidationError:
            return snapshot
        if parsed is None:
            return snapshot
        event = parsed

    if not isinstance(event, (ApiCallEvent, SeriesEvent, WrappedEvent)):
        return snapshot

    if snapshot is None:
        snapshot = initial_snapshot()

    if isinstance(event, ApiCallEvent):
        return apply_api_event(event.method, event.status, event, snapshot)
    if isinstance(event, SeriesEvent):
        return apply_series(event.series, snapshot, reduce)
    return apply_protocol_event(event.event_kind, event.args, snapshot)


def replay(events: Iterable[Any], snapshot: Snapshot | None = None) -> Snapshot:
    """Fold a sequence of events, starting from snapshot or the initial one.

    replay([e1, e2, e3]) == reduce(e3, reduce(e2, reduce(e1, initial_snapshot())))
    """
    result = initial_snapshot() if snapshot is None else snapshot
    for event in events:
        result = reduce(event, result)
    return result


def replay_history(events: Iterable[Any]) -> list[Snapshot]:
    """Every intermediate snapshot, for stepping back and forth through a log.

    Element 0 is the initial snapshot; element i is the snapshot after the
    i-th event.
    """
    history = [initial_snapshot()]
    for event in events:
        history.append(reduce(event, history[-1]))
    return history


def summarize_snapshot(snapshot: Snapshot) -> dict:
    """Create a human-readable summary of a snapshot.

    Args:
        snapshot: The snapshot to summarize.

    Returns:
        Dict with summary statistics.
    """
    timeline_count = 0
    redacted_count = 0
    member_count = 0
    for room in snapshot.rooms.values():
        timeline_count += len(room.timeline)
        redacted_count += sum(1 for entry in room.timeline if entry.is_redacted)
        member_count += len(room.members)

    return {
        "sync_state": snapshot.sync.state,
        "api_calls": {name: record.status for name, record in snapshot.api_calls.items()},
        "rooms": len(snapshot.rooms),
        "members": member_count,
        "timeline_events": timeline_count,
        "redacted_events": redacted_count,
    }
