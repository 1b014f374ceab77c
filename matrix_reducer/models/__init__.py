"""matrix-reducer data models."""

from matrix_reducer.models.events import (
    NAMESPACE,
    TagKind,
    CallStatus,
    EventKind,
    UnsupportedEventKind,
    ApiCallEvent,
    WrappedEvent,
    SeriesEvent,
    parse_event,
    parse_protocol_event,
    RoomNameSource,
    # Protocol event variants
    RoomAdded,
    RoomNamed,
    MemberUpdated,
    TimelineAppended,
    StateEventSet,
    ReceiptsReceived,
    EventRedacted,
    SyncStateChanged,
)
from matrix_reducer.models.snapshot import (
    Snapshot,
    CallRecord,
    RoomState,
    MemberState,
    TimelineEntry,
    StateEntry,
    RedactionInfo,
    Receipt,
    SyncState,
    initial_snapshot,
)

__all__ = [
    # Events
    "NAMESPACE",
    "TagKind",
    "CallStatus",
    "EventKind",
    "UnsupportedEventKind",
    "ApiCallEvent",
    "WrappedEvent",
    "SeriesEvent",
    "parse_event",
    "parse_protocol_event",
    "RoomNameSource",
    # Variants
    "RoomAdded",
    "RoomNamed",
    "MemberUpdated",
    "TimelineAppended",
    "StateEventSet",
    "ReceiptsReceived",
    "EventRedacted",
    "SyncStateChanged",
    # Snapshot
    "Snapshot",
    "CallRecord",
    "RoomState",
    "MemberState",
    "TimelineEntry",
    "StateEntry",
    "RedactionInfo",
    "Receipt",
    "SyncState",
    "initial_snapshot",
]
