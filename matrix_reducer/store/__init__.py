"""Recorded event logs for matrix-reducer."""

from matrix_reducer.store.jsonl_io import read_events_jsonl, write_events_jsonl

__all__ = ["read_events_jsonl", "write_events_jsonl"]
