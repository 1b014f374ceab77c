"""JSONL import/export for recorded event logs.

Used for debugging, sharing repros, and replaying a client session
step by step. Each line is one wire-shaped event.
"""

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any


def write_events_jsonl(
    events: Iterable[dict[str, Any]],
    output_path: str | Path,
) -> int:
    """Write events to a JSONL file.

    Args:
        events: Wire-shaped events, in arrival order.
        output_path: Path to write the JSONL file.

    Returns:
        Number of events written.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open(output_path, "w", encoding="utf-8") as f:
        for event in events:
            f.write(json.dumps(event, ensure_ascii=False) + "\n")
            count += 1

    return count


def read_events_jsonl(input_path: str | Path) -> list[dict[str, Any]]:
    """Read events from a JSONL file.

    Blank lines are skipped. Events are not validated here; the reducer
    decides what it understands.

    Args:
        input_path: Path to the JSONL file.

    Returns:
        The events, in file order.

    Raises:
        ValueError: If a line is not a JSON object.
    """
    input_path = Path(input_path)
    events = []

    with open(input_path, "r", encoding="utf-8") as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue

            try:
                data = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON on line {line_num}: {e}") from e

            if not isinstance(data, dict):
                raise ValueError(f"Invalid event on line {line_num}: expected an object")

            events.append(data)

    return events
