"""Snapshot models produced by the reducer.

These are the read-side values that UI bindings consume:
- CallRecord: lifecycle of one named API call
- RoomState: normalized view of one room (members, timeline, state, receipts)
- SyncState: connection status reported by the client

Every model is frozen. Reductions build new values with model_copy() and
fresh containers, so a snapshot handed out earlier never changes.
Dumping with by_alias=True yields camelCase keys (apiCalls, lastResult, ...).
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SnapshotModel(BaseModel):
    """Base for all snapshot values."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# -----------------------------------------------------------------------------
# API calls
# -----------------------------------------------------------------------------


class CallRecord(SnapshotModel):
    """Tracked lifecycle of one remote procedure call.

    loading is True iff status is "pending". last_result and last_error are
    sticky: a later pending transition leaves them in place.
    """

    status: str
    loading: bool = False
    pending_state: Any = None
    last_result: Any = None
    last_error: Any = None


# -----------------------------------------------------------------------------
# Rooms
# -----------------------------------------------------------------------------


class MemberState(SnapshotModel):
    """Current membership of one user in a room."""

    membership: str
    name: str
    avatar_url: str | None = None


class RedactionInfo(SnapshotModel):
    """The redaction event that erased an entry."""

    sender: str
    content: dict[str, Any] = {}
    ts: int


class EventEntry(SnapshotModel):
    """A recorded room event.

    Once redacted_because is set, content is {} and stays that way.
    """

    id: str
    type: str
    content: dict[str, Any] = {}
    prev_content: dict[str, Any] = {}
    sender: str
    ts: int
    redacted_because: RedactionInfo | None = None

    @property
    def is_redacted(self) -> bool:
        return self.redacted_because is not None

    def redact(self, because: RedactionInfo) -> "EventEntry":
        """Return a copy with its content erased."""
        return self.model_copy(update={"content": {}, "redacted_because": because})


class TimelineEntry(EventEntry):
    """An entry in a room's timeline."""


class StateEntry(EventEntry):
    """The current state event for one (type, state_key) pair."""


class Receipt(SnapshotModel):
    """A single user's receipt for an event."""

    ts: int


class RoomState(SnapshotModel):
    """Normalized view of one room.

    timeline is append-only in arrival order. state is keyed by event type
    then state key. receipts is keyed by event id, receipt type, then user id.
    """

    name: str | None = None
    members: dict[str, MemberState] = {}
    timeline: tuple[TimelineEntry, ...] = ()
    state: dict[str, dict[str, StateEntry]] = {}
    receipts: dict[str, dict[str, dict[str, Receipt]]] = {}


# -----------------------------------------------------------------------------
# Snapshot
# -----------------------------------------------------------------------------


class SyncState(SnapshotModel):
    """Sync status of the client (e.g. PREPARED, SYNCING, ERROR)."""

    state: str | None = None


class Snapshot(SnapshotModel):
    """Complete normalized state.

    This is the only value the reducer hands out.
    """

    api_calls: dict[str, CallRecord] = {}
    rooms: dict[str, RoomState] = {}
    sync: SyncState = SyncState()


def initial_snapshot() -> Snapshot:
    """The snapshot before any event has been reduced."""
    return Snapshot()
