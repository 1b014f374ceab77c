"""API-call reducer - tracks the lifecycle of wrapped API calls.

Each call name maps to one CallRecord:
- pending: loading, remembers the call's arguments as pending_state
- success: stores last_result
- failure: stores last_error

Key invariant: loading == (status == "pending").
last_result and last_error are sticky; a new pending call keeps them so the
UI can show the previous outcome while the next call is in flight.
"""

import copy

from matrix_reducer.models.events import ApiCallEvent, CallStatus
from matrix_reducer.models.snapshot import CallRecord, Snapshot


def apply_api_event(
    method: str,
    status: str,
    payload: ApiCallEvent,
    snapshot: Snapshot,
) -> Snapshot:
    """Fold one API lifecycle transition into the snapshot.

    Only api_calls[method] is replaced. rooms and sync are carried over
    as the same objects.

    Args:
        method: Name of the wrapped call.
        status: Status segment of the tag (pending, success, failure, ...).
        payload: The event carrying args, result or error.
        snapshot: The previous snapshot.

    Returns:
        The new snapshot.
    """
    update = {"status": status, "loading": status == CallStatus.PENDING}

    # Copied so later changes to the caller's objects cannot reach the snapshot
    if status == CallStatus.PENDING:
        update["pending_state"] = copy.deepcopy(payload.args)
    elif status == CallStatus.SUCCESS:
        update["last_result"] = copy.deepcopy(payload.result)
    elif status == CallStatus.FAILURE:
        update["last_error"] = copy.deepcopy(payload.error)
    # Unknown statuses only move status/loading

    previous = snapshot.api_calls.get(method)
    if previous is None:
        record = CallRecord(**update)
    else:
        record = previous.model_copy(update=update)

    return snapshot.model_copy(
        update={"api_calls": {**snapshot.api_calls, method: record}}
    )


def get_call(snapshot: Snapshot, method: str) -> CallRecord | None:
    """Get the record for a call, or None if it was never made."""
    return snapshot.api_calls.get(method)


def get_loading_calls(snapshot: Snapshot) -> list[str]:
    """Names of calls currently in flight, in first-seen order."""
    return [name for name, record in snapshot.api_calls.items() if record.loading]
