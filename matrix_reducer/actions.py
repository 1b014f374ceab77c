"""Builders for wire-shaped events.

Producers use these to emit events the reducer understands:
- api_pending / api_success / api_failure: one API call lifecycle
- wrap_event: a single client event with its plain-value args
- wrap_series: a batch of client events
- track_call: run a call and dispatch its whole lifecycle
"""

from collections.abc import Callable
from typing import Any

from matrix_reducer.models.events import (
    ApiCallEvent,
    CallStatus,
    SeriesEvent,
    WrappedEvent,
)


def api_pending(method: str, args: Any = None, call_id: Any = None) -> dict[str, Any]:
    """Event for a call that has just been made with args."""
    return ApiCallEvent(
        method=method, status=CallStatus.PENDING.value, args=args, call_id=call_id
    ).to_wire()


def api_success(method: str, result: Any = None, call_id: Any = None) -> dict[str, Any]:
    """Event for a call that returned result."""
    return ApiCallEvent(
        method=method, status=CallStatus.SUCCESS.value, result=result, call_id=call_id
    ).to_wire()


def api_failure(method: str, error: Any = None, call_id: Any = None) -> dict[str, Any]:
    """Event for a call that failed with error."""
    return ApiCallEvent(
        method=method, status=CallStatus.FAILURE.value, error=error, call_id=call_id
    ).to_wire()


def wrap_event(event_kind: str, *args: Any) -> dict[str, Any]:
    """Event for one client event, e.g. wrap_event("Room.timeline", event, room)."""
    return WrappedEvent(event_kind=event_kind, args=list(args)).to_wire()


def wrap_series(events: list[dict[str, Any]]) -> dict[str, Any]:
    """Event batching wire-shaped client events built by wrap_event().

    Raises:
        pydantic.ValidationError: If one of the events is itself a series.
    """
    return SeriesEvent.model_validate({"series": events}).to_wire()


def track_call(
    dispatch: Callable[[dict[str, Any]], Any],
    method: str,
    fn: Callable[..., Any],
    *args: Any,
    call_id: Any = None,
) -> Any:
    """Call fn(*args), dispatching pending and then success or failure.

    The failure event carries str(exc); the exception is re-raised to the
    caller after dispatch.

    Args:
        dispatch: Receives each event (typically a store's dispatch).
        method: Name the call is tracked under.
        fn: The call to make.
        *args: Arguments for fn, also recorded as the pending state.
        call_id: Optional id linking the three events.

    Returns:
        fn's return value.
    """
    dispatch(api_pending(method, list(args), call_id))
    try:
        result = fn(*args)
    except Exception as e:
        dispatch(api_failure(method, str(e), call_id))
        raise
    dispatch(api_success(method, result, call_id))
    return result
