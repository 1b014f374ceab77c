"""Event models for the tagged events folded into a Snapshot.

Three wire shapes reach the reducer, all tagged "mrw.<kind>[.<sub>]":
- API lifecycle: {"tag": "mrw.wrapped_api.<status>", "method", "args", "result", "error"}
- Protocol:      {"tag": "mrw.wrapped_event", "eventKind", "args"}
- Series:        {"tag": "mrw.wrapped_event.series", "series": [tagged events]}

Protocol args are plain values (Matrix event JSON, room and member dicts)
produced by whatever maps SDK objects to events. Each known event kind is
parsed into its own typed variant.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from matrix_reducer.models.snapshot import Receipt


NAMESPACE = "mrw"


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------


class TagKind(str, Enum):
    """First tag segment after the namespace."""

    WRAPPED_EVENT = "wrapped_event"
    WRAPPED_API = "wrapped_api"


class CallStatus(str, Enum):
    """Lifecycle status of a wrapped API call."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


class EventKind(str, Enum):
    """Client events the normalizer understands."""

    ROOM = "Room"
    ROOM_NAME = "Room.name"
    MEMBER_MEMBERSHIP = "RoomMember.membership"
    MEMBER_NAME = "RoomMember.name"
    ROOM_TIMELINE = "Room.timeline"
    STATE_EVENTS = "RoomState.events"
    ROOM_RECEIPT = "Room.receipt"
    ROOM_REDACTION = "Room.redaction"
    SYNC = "sync"


class UnsupportedEventKind(ValueError):
    """Raised for a namespaced tag whose first segment is unknown."""

    def __init__(self, kind: str):
        super().__init__(f"Unsupported {NAMESPACE} event kind: {kind!r}")
        self.kind = kind


# -----------------------------------------------------------------------------
# Plain argument values
# -----------------------------------------------------------------------------


class RoomRef(BaseModel):
    """A room as handed over by the client."""

    room_id: str
    name: str | None = None


class RoomNameSource(BaseModel):
    """Argument of Room.name: a room ({room_id, name}) or an m.room.name event.

    The event form carries the new name in content.name. An argument with
    neither a name field nor content.name is rejected.
    """

    room_id: str | None = None
    name: str | None = None
    content: dict[str, Any] = {}

    @model_validator(mode="after")
    def check_name(self):
        if "name" in self.model_fields_set:
            return self
        if "name" not in self.content:
            raise ValueError("Room.name argument carries no name")
        name = self.content["name"]
        if name is not None and not isinstance(name, str):
            raise ValueError("m.room.name content.name must be a string")
        return self

    def get_name(self) -> str | None:
        if "name" in self.model_fields_set:
            return self.name
        return self.content.get("name")


class MemberInfo(BaseModel):
    """Current fields of a room member."""

    room_id: str
    user_id: str
    membership: str
    name: str | None = None
    avatar_url: str | None = None


class ClientEvent(BaseModel):
    """A room event in Matrix client-server JSON form."""

    event_id: str
    type: str
    room_id: str | None = None
    sender: str
    content: dict[str, Any] = {}
    prev_content: dict[str, Any] | None = None
    unsigned: dict[str, Any] = {}
    origin_server_ts: int = 0
    state_key: str | None = None
    redacts: str | None = None

    def get_prev_content(self) -> dict[str, Any]:
        """prev_content from the top level or unsigned, defaulting to {}."""
        if self.prev_content is not None:
            return self.prev_content
        return self.unsigned.get("prev_content") or {}

    def get_redacts(self) -> str | None:
        """The redacted event id (top level, or content for newer room versions)."""
        return self.redacts or self.content.get("redacts")


class ReceiptEvent(BaseModel):
    """An m.receipt event: event id -> receipt type -> user id -> receipt."""

    type: str = "m.receipt"
    room_id: str | None = None
    content: dict[str, dict[str, dict[str, Receipt]]] = {}


# -----------------------------------------------------------------------------
# Protocol event variants
# -----------------------------------------------------------------------------


def _resolve_room_id(*candidates: BaseModel | None) -> str | None:
    for candidate in candidates:
        room_id = getattr(candidate, "room_id", None)
        if room_id:
            return room_id
    return None


class _RoomScoped(BaseModel):
    """Variant that must resolve to a room id."""

    def _room_sources(self) -> tuple[BaseModel | None, ...]:
        return ()

    @property
    def room_id(self) -> str | None:
        return _resolve_room_id(*self._room_sources())

    @model_validator(mode="after")
    def check_room_id(self):
        if self.room_id is None:
            raise ValueError(f"{self.kind.value} event carries no room id")
        return self


class RoomAdded(_RoomScoped):
    kind: EventKind = EventKind.ROOM
    room: RoomRef

    def _room_sources(self):
        return (self.room,)


class RoomNamed(_RoomScoped):
    kind: EventKind = EventKind.ROOM_NAME
    room: RoomNameSource

    def _room_sources(self):
        return (self.room,)


class MemberUpdated(_RoomScoped):
    """RoomMember.membership or RoomMember.name: carries full member state."""

    kind: EventKind
    event: ClientEvent | None = None
    member: MemberInfo

    def _room_sources(self):
        return (self.member, self.event)


class TimelineAppended(_RoomScoped):
    kind: EventKind = EventKind.ROOM_TIMELINE
    event: ClientEvent
    room: RoomRef | None = None

    def _room_sources(self):
        return (self.event, self.room)


class StateEventSet(_RoomScoped):
    kind: EventKind = EventKind.STATE_EVENTS
    event: ClientEvent

    @model_validator(mode="after")
    def check_state_key(self):
        if self.event.state_key is None:
            raise ValueError("state event has no state_key")
        return self

    def _room_sources(self):
        return (self.event,)


class ReceiptsReceived(_RoomScoped):
    kind: EventKind = EventKind.ROOM_RECEIPT
    event: ReceiptEvent
    room: RoomRef | None = None

    def _room_sources(self):
        return (self.event, self.room)


class EventRedacted(_RoomScoped):
    kind: EventKind = EventKind.ROOM_REDACTION
    event: ClientEvent
    room: RoomRef | None = None

    @model_validator(mode="after")
    def check_redacts(self):
        if not self.event.get_redacts():
            raise ValueError("redaction does not name the redacted event")
        return self

    def _room_sources(self):
        return (self.event, self.room)


class SyncStateChanged(BaseModel):
    kind: EventKind = EventKind.SYNC
    state: str
    prev_state: str | None = None


ProtocolEvent = Union[
    RoomAdded,
    RoomNamed,
    MemberUpdated,
    TimelineAppended,
    StateEventSet,
    ReceiptsReceived,
    EventRedacted,
    SyncStateChanged,
]


# Variant class and the names of its positional args, per event kind.
_VARIANTS: dict[EventKind, tuple[type[BaseModel], tuple[str, ...]]] = {
    EventKind.ROOM: (RoomAdded, ("room",)),
    EventKind.ROOM_NAME: (RoomNamed, ("room",)),
    EventKind.MEMBER_MEMBERSHIP: (MemberUpdated, ("event", "member")),
    EventKind.MEMBER_NAME: (MemberUpdated, ("event", "member")),
    EventKind.ROOM_TIMELINE: (TimelineAppended, ("event", "room")),
    EventKind.STATE_EVENTS: (StateEventSet, ("event",)),
    EventKind.ROOM_RECEIPT: (ReceiptsReceived, ("event", "room")),
    EventKind.ROOM_REDACTION: (EventRedacted, ("event", "room")),
    EventKind.SYNC: (SyncStateChanged, ("state", "prev_state")),
}


def parse_protocol_event(event_kind: str, args: list[Any]) -> ProtocolEvent | None:
    """Parse positional args into the typed variant for event_kind.

    Returns None for kinds outside EventKind. Raises pydantic's
    ValidationError when args do not fit the kind.
    """
    try:
        kind = EventKind(event_kind)
    except ValueError:
        return None

    model_cls, names = _VARIANTS[kind]
    fields = {name: value for name, value in zip(names, args) if value is not None}
    return model_cls.model_validate({"kind": kind, **fields})


# -----------------------------------------------------------------------------
# Tagged envelopes
# -----------------------------------------------------------------------------


class ApiCallEvent(BaseModel):
    """One lifecycle transition of a wrapped API call."""

    model_config = ConfigDict(populate_by_name=True)

    method: str
    status: str = Field(min_length=1)
    args: Any = None
    result: Any = None
    error: Any = None
    call_id: Any = Field(default=None, alias="id")

    @property
    def tag(self) -> str:
        return f"{NAMESPACE}.{TagKind.WRAPPED_API.value}.{self.status}"

    def to_wire(self) -> dict[str, Any]:
        data = {"tag": self.tag, "method": self.method}
        if self.status == CallStatus.PENDING:
            data["args"] = self.args
        elif self.status == CallStatus.SUCCESS:
            data["result"] = self.result
        elif self.status == CallStatus.FAILURE:
            data["error"] = self.error
        if self.call_id is not None:
            data["id"] = self.call_id
        return data


class WrappedEvent(BaseModel):
    """A single client event: its kind plus positional args."""

    model_config = ConfigDict(populate_by_name=True)

    event_kind: str = Field(alias="eventKind")
    args: list[Any] = []

    @property
    def tag(self) -> str:
        return f"{NAMESPACE}.{TagKind.WRAPPED_EVENT.value}"

    def parse(self) -> ProtocolEvent | None:
        return parse_protocol_event(self.event_kind, self.args)

    def to_wire(self) -> dict[str, Any]:
        return {"tag": self.tag, "eventKind": self.event_kind, "args": list(self.args)}


class SeriesEvent(BaseModel):
    """A batch of tagged events reduced one after another.

    Items stay wire-shaped: each goes through reduce() on its own, so a
    foreign or malformed item passes through without dropping the batch.
    Only a nested series invalidates the whole batch.
    """

    series: list[dict[str, Any]]

    @field_validator("series")
    @classmethod
    def reject_nested(cls, series: list[dict[str, Any]]) -> list[dict[str, Any]]:
        for item in series:
            path = split_tag(item.get("tag"))
            if path and path[0] == TagKind.WRAPPED_EVENT and "series" in item:
                raise ValueError("series events cannot be nested")
        return series

    @property
    def tag(self) -> str:
        return f"{NAMESPACE}.{TagKind.WRAPPED_EVENT.value}.series"

    def to_wire(self) -> dict[str, Any]:
        return {"tag": self.tag, "series": [dict(item) for item in self.series]}


TaggedEvent = Union[ApiCallEvent, WrappedEvent, SeriesEvent]


def split_tag(tag: Any) -> list[str] | None:
    """Split a namespaced tag into the segments after the namespace.

    Returns None when tag is not a string of the form "mrw.<segment>...".
    """
    if not isinstance(tag, str):
        return None
    segments = tag.split(".")
    if segments[0] != NAMESPACE or len(segments) < 2:
        return None
    return segments[1:]


def parse_event(data: Mapping[str, Any]) -> TaggedEvent | None:
    """Parse a wire-shaped event into its envelope model.

    Returns None for tags outside the namespace. Raises UnsupportedEventKind
    for an unknown first segment, and pydantic's ValidationError for a
    recognized tag with a malformed body.
    """
    path = split_tag(data.get("tag"))
    if path is None:
        return None

    kind = path[0]
    if kind == TagKind.WRAPPED_API:
        status = path[1] if len(path) > 1 else ""
        return ApiCallEvent.model_validate({**data, "status": status})
    if kind == TagKind.WRAPPED_EVENT:
        if "series" in data:
            return SeriesEvent.model_validate(data)
        return WrappedEvent.model_validate(data)
    raise UnsupportedEventKind(kind)
