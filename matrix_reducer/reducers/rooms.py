"""Room reducer - normalizes client events into per-room state.

The RoomState for each room tracks:
- name
- members (user id -> MemberState)
- timeline (append-only, arrival order)
- state (event type -> state key -> StateEntry)
- receipts (event id -> receipt type -> user id -> Receipt)

Key invariants:
- A room, once created, is never removed.
- Redaction erases content in place of the original entry and is never undone.
- Nothing is mutated; every change returns fresh containers along the
  changed path and shares the rest with the previous snapshot.
"""

import copy
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from matrix_reducer.models.events import (
    ClientEvent,
    EventRedacted,
    MemberInfo,
    MemberUpdated,
    ProtocolEvent,
    ReceiptsReceived,
    RoomAdded,
    RoomNamed,
    StateEventSet,
    SyncStateChanged,
    TimelineAppended,
    parse_protocol_event,
)
from matrix_reducer.models.snapshot import (
    EventEntry,
    MemberState,
    Receipt,
    RedactionInfo,
    RoomState,
    Snapshot,
    StateEntry,
    TimelineEntry,
)


# -----------------------------------------------------------------------------
# Entity merges
# -----------------------------------------------------------------------------


def merge_room(previous: RoomState | None, **fields: Any) -> RoomState:
    """Merge fields into a room.

    Override rules: each given field replaces the previous value wholesale;
    fields not given keep their previous value (or the empty default for a
    new room).
    """
    if previous is None:
        return RoomState(**fields)
    if not fields:
        return previous
    return previous.model_copy(update=fields)


def merge_member(previous: MemberState | None, info: MemberInfo) -> MemberState:
    """Merge a member's current fields into its MemberState.

    Override rules: membership, name and avatar_url are all re-read from
    info, since any member event carries the member's full current state.
    name falls back to the user id. An unchanged member is returned as is.
    """
    member = MemberState(
        membership=info.membership,
        name=info.name or info.user_id,
        avatar_url=info.avatar_url,
    )
    if previous == member:
        return previous
    return member


def _entry_from_event(entry_cls: type[EventEntry], event: ClientEvent) -> EventEntry:
    return entry_cls(
        id=event.event_id,
        type=event.type,
        content=copy.deepcopy(event.content),
        prev_content=copy.deepcopy(event.get_prev_content()),
        sender=event.sender,
        ts=event.origin_server_ts,
    )


def _put_room(snapshot: Snapshot, room_id: str, room: RoomState) -> Snapshot:
    if snapshot.rooms.get(room_id) is room:
        return snapshot
    return snapshot.model_copy(update={"rooms": {**snapshot.rooms, room_id: room}})


# -----------------------------------------------------------------------------
# Handlers, one per event variant
# -----------------------------------------------------------------------------


def _apply_room_added(snapshot: Snapshot, event: RoomAdded) -> Snapshot:
    if event.room_id in snapshot.rooms:
        return snapshot
    return _put_room(snapshot, event.room_id, RoomState(name=event.room.name))


def _apply_room_named(snapshot: Snapshot, event: RoomNamed) -> Snapshot:
    room = merge_room(snapshot.rooms.get(event.room_id), name=event.room.get_name())
    return _put_room(snapshot, event.room_id, room)


def _apply_member(snapshot: Snapshot, event: MemberUpdated) -> Snapshot:
    room = merge_room(snapshot.rooms.get(event.room_id))
    user_id = event.member.user_id
    member = merge_member(room.members.get(user_id), event.member)
    if room.members.get(user_id) is not member:
        room = merge_room(room, members={**room.members, user_id: member})
    return _put_room(snapshot, event.room_id, room)


def _apply_timeline(snapshot: Snapshot, event: TimelineAppended) -> Snapshot:
    room = merge_room(snapshot.rooms.get(event.room_id))
    entry = _entry_from_event(TimelineEntry, event.event)
    room = merge_room(room, timeline=(*room.timeline, entry))
    return _put_room(snapshot, event.room_id, room)


def _apply_state_event(snapshot: Snapshot, event: StateEventSet) -> Snapshot:
    room = merge_room(snapshot.rooms.get(event.room_id))
    entry = _entry_from_event(StateEntry, event.event)
    event_type = event.event.type
    entries = {**room.state.get(event_type, {}), event.event.state_key: entry}
    room = merge_room(room, state={**room.state, event_type: entries})
    return _put_room(snapshot, event.room_id, room)


def _apply_receipts(snapshot: Snapshot, event: ReceiptsReceived) -> Snapshot:
    # Merged per event id: an incoming event id replaces its nested map wholesale
    room = merge_room(snapshot.rooms.get(event.room_id))
    room = merge_room(room, receipts={**room.receipts, **event.event.content})
    return _put_room(snapshot, event.room_id, room)


def _apply_redaction(snapshot: Snapshot, event: EventRedacted) -> Snapshot:
    room = snapshot.rooms.get(event.room_id)
    if room is None:
        return snapshot
    because = RedactionInfo(
        sender=event.event.sender,
        content={},
        ts=event.event.origin_server_ts,
    )
    return _put_room(
        snapshot,
        event.room_id,
        redact_room(room, event.event.get_redacts(), because),
    )


def _apply_sync(snapshot: Snapshot, event: SyncStateChanged) -> Snapshot:
    sync = snapshot.sync.model_copy(update={"state": event.state})
    return snapshot.model_copy(update={"sync": sync})


_HANDLERS: dict[type, Callable[[Snapshot, Any], Snapshot]] = {
    RoomAdded: _apply_room_added,
    RoomNamed: _apply_room_named,
    MemberUpdated: _apply_member,
    TimelineAppended: _apply_timeline,
    StateEventSet: _apply_state_event,
    ReceiptsReceived: _apply_receipts,
    EventRedacted: _apply_redaction,
    SyncStateChanged: _apply_sync,
}


def redact_room(room: RoomState, event_id: str, because: RedactionInfo) -> RoomState:
    """Erase the content of every entry with event_id.

    A linear scan over the timeline and all state entries. Entries that are
    already redacted keep their first redaction. Returns room itself when
    nothing matched.
    """

    def matches(entry: EventEntry) -> bool:
        return entry.id == event_id and not entry.is_redacted

    updates: dict[str, Any] = {}

    if any(matches(entry) for entry in room.timeline):
        updates["timeline"] = tuple(
            entry.redact(because) if matches(entry) else entry
            for entry in room.timeline
        )

    state = dict(room.state)
    for event_type, entries in room.state.items():
        if any(matches(entry) for entry in entries.values()):
            state[event_type] = {
                state_key: entry.redact(because) if matches(entry) else entry
                for state_key, entry in entries.items()
            }
            updates["state"] = state

    return merge_room(room, **updates)


def reduce_protocol_event(event: ProtocolEvent, snapshot: Snapshot) -> Snapshot:
    """Fold an already parsed client event into the snapshot."""
    return _HANDLERS[type(event)](snapshot, event)


def apply_protocol_event(
    event_kind: str,
    args: list[Any],
    snapshot: Snapshot,
) -> Snapshot:
    """Fold one client event into the snapshot.

    Unknown kinds and args that do not fit their kind leave the snapshot
    unchanged.

    Args:
        event_kind: The client event name (Room, Room.timeline, sync, ...).
        args: Positional plain-value args of the event.
        snapshot: The previous snapshot.

    Returns:
        The new snapshot.
    """
    try:
        event = parse_protocol_event(event_kind, args)
    except ValidationError:
        return snapshot
    if event is None:
        return snapshot
    return reduce_protocol_event(event, snapshot)


# -----------------------------------------------------------------------------
# Selectors
# -----------------------------------------------------------------------------


def get_room(snapshot: Snapshot, room_id: str) -> RoomState | None:
    return snapshot.rooms.get(room_id)


def get_visible_timeline(snapshot: Snapshot, room_id: str) -> list[TimelineEntry]:
    """Timeline entries that have not been redacted, in arrival order."""
    room = snapshot.rooms.get(room_id)
    if room is None:
        return []
    return [entry for entry in room.timeline if not entry.is_redacted]


def get_state_entry(
    snapshot: Snapshot,
    room_id: str,
    event_type: str,
    state_key: str = "",
) -> StateEntry | None:
    """Get the current state event for (event_type, state_key)."""
    room = snapshot.rooms.get(room_id)
    if room is None:
        return None
    return room.state.get(event_type, {}).get(state_key)


def get_read_receipts(
    snapshot: Snapshot,
    room_id: str,
    event_id: str,
    receipt_type: str = "m.read",
) -> dict[str, Receipt]:
    """Receipts of one type for an event, keyed by user id."""
    room = snapshot.rooms.get(room_id)
    if room is None:
        return {}
    return room.receipts.get(event_id, {}).get(receipt_type, {})


def get_joined_members(snapshot: Snapshot, room_id: str) -> dict[str, MemberState]:
    """Members whose membership is "join"."""
    room = snapshot.rooms.get(room_id)
    if room is None:
        return {}
    return {
        user_id: member
        for user_id, member in room.members.items()
        if member.membership == "join"
    }
