"""CLI tools for matrix-reducer.

Commands:
- replay: Fold a recorded event log and print the resulting snapshot
- history: Print a one-line summary of the snapshot after every event
- doctor: Run health checks on a recorded event log
"""

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from matrix_reducer.models.events import UnsupportedEventKind, parse_event
from matrix_reducer.models.snapshot import Snapshot
from matrix_reducer.reducers.router import replay, replay_history, summarize_snapshot
from matrix_reducer.store.jsonl_io import read_events_jsonl


def _load_events(path: str) -> list[dict] | None:
    """Read a log, printing the problem and returning None on failure."""
    input_path = Path(path)
    if not input_path.exists():
        print(f"Event log not found: {input_path}")
        return None
    try:
        return read_events_jsonl(input_path)
    except ValueError as e:
        print(f"Read error: {e}")
        return None


def cmd_replay(args: argparse.Namespace) -> int:
    """Fold a recorded event log and print the snapshot."""
    events = _load_events(args.log)
    if events is None:
        return 1

    if args.until is not None:
        events = events[: args.until]

    try:
        snapshot = replay(events)
    except UnsupportedEventKind as e:
        print(f"Replay error: {e}")
        return 1

    if args.json:
        print(snapshot.model_dump_json(indent=2, by_alias=True))
    else:
        _print_snapshot_summary(snapshot, len(events))

    return 0


def _print_snapshot_summary(snapshot: Snapshot, event_count: int) -> None:
    """Print a human-readable snapshot summary."""
    print(f"Events: {event_count}")
    print(f"Sync state: {snapshot.sync.state or '(none)'}")
    print()

    print("=== API calls ===")
    for method, record in snapshot.api_calls.items():
        print(f"  {method}: {record.status}")
    print()

    print("=== Rooms ===")
    for room_id, room in snapshot.rooms.items():
        redacted = sum(1 for entry in room.timeline if entry.is_redacted)
        print(f"  {room_id} ({room.name or 'unnamed'})")
        print(f"    Members: {len(room.members)}")
        print(f"    Timeline: {len(room.timeline)} ({redacted} redacted)")
        print(f"    State types: {sorted(room.state)}")
        print(f"    Receipts: {len(room.receipts)} events")


def cmd_history(args: argparse.Namespace) -> int:
    """Print the snapshot summary after each event."""
    events = _load_events(args.log)
    if events is None:
        return 1

    try:
        history = replay_history(events)
    except UnsupportedEventKind as e:
        print(f"Replay error: {e}")
        return 1

    for step, (event, snapshot) in enumerate(zip(events, history[1:]), 1):
        summary = summarize_snapshot(snapshot)
        label = event.get("eventKind") or event.get("method") or ""
        print(
            f"[{step:04d}] {event.get('tag')} {label}".rstrip()
            + f" rooms={summary['rooms']}"
            + f" timeline={summary['timeline_events']}"
            + f" calls={len(summary['api_calls'])}"
            + f" sync={summary['sync_state'] or '-'}"
        )

    return 0


def cmd_doctor(args: argparse.Namespace) -> int:
    """Run health checks on an event log.

    Checks:
    1. Every line is a JSON object
    2. Every namespaced event parses
    3. No unsupported event kinds
    4. Replay (no crashes)
    """
    print(f"Checking event log: {args.log}")
    print("=" * 50)

    events = _load_events(args.log)
    if events is None:
        print("\nDiagnosis: UNHEALTHY")
        return 1

    issues = []
    warnings = []

    for line_num, event in enumerate(events, 1):
        try:
            parsed = parse_event(event)
        except UnsupportedEventKind as e:
            issues.append(f"[{line_num}] {e}")
            continue
        except ValidationError as e:
            warnings.append(f"[{line_num}] Malformed {event.get('tag')}: {e.error_count()} errors")
            continue

        if parsed is None:
            warnings.append(f"[{line_num}] Ignored tag: {event.get('tag')!r}")

    print(f"Events found: {len(events)}")

    if not issues:
        try:
            summary = summarize_snapshot(replay(events))
            print(f"Rooms: {summary['rooms']}, timeline events: {summary['timeline_events']}")
        except Exception as e:
            issues.append(f"Reducer crash: {e}")

    print("=" * 50)

    if warnings:
        print(f"\nWarnings ({len(warnings)}):")
        for w in warnings:
            print(f"  [WARN] {w}")

    if issues:
        print(f"\nIssues ({len(issues)}):")
        for issue in issues:
            print(f"  [FAIL] {issue}")
        print("\nDiagnosis: UNHEALTHY")
        return 1

    print("\n[OK] All checks passed")
    print("Diagnosis: HEALTHY")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="matrix-reducer CLI - replay Matrix client event logs",
        prog="matrix-reducer",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # replay
    replay_parser = subparsers.add_parser("replay", help="Replay an event log")
    replay_parser.add_argument("log", help="Input JSONL event log")
    replay_parser.add_argument("--until", type=int, help="Only replay the first N events")
    replay_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # history
    history_parser = subparsers.add_parser("history", help="Summarize every step")
    history_parser.add_argument("log", help="Input JSONL event log")

    # doctor
    doctor_parser = subparsers.add_parser("doctor", help="Run health checks on an event log")
    doctor_parser.add_argument("log", help="Input JSONL event log")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "replay": cmd_replay,
        "history": cmd_history,
        "doctor": cmd_doctor,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
