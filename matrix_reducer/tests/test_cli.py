"""CLI tests - replay, history and doctor commands."""

import json

import pytest

from matrix_reducer.actions import api_pending, api_success, wrap_event
from matrix_reducer.cli import main
from matrix_reducer.store.jsonl_io import write_events_jsonl


# =============================================================================
# Helpers
# =============================================================================


def make_log(tmp_path, events=None):
    """Write a sample event log and return its path."""
    if events is None:
        events = [
            wrap_event("sync", "PREPARED"),
            api_pending("login", ["u", "p"]),
            api_success("login", {"token": "t"}),
            wrap_event("Room", {"room_id": "!r1", "name": "Lobby"}),
            wrap_event("Room.timeline", {
                "event_id": "$e1",
                "type": "m.room.message",
                "room_id": "!r1",
                "sender": "@a:x",
                "content": {"body": "hi"},
                "origin_server_ts": 100,
            }),
        ]
    path = tmp_path / "log.jsonl"
    write_events_jsonl(events, path)
    return path


# =============================================================================
# replay
# =============================================================================


class TestReplay:
    def test_summary(self, tmp_path, capsys):
        path = make_log(tmp_path)
        assert main(["replay", str(path)]) == 0
        out = capsys.readouterr().out
        assert "Events: 5" in out
        assert "Sync state: PREPARED" in out
        assert "login: success" in out
        assert "!r1 (Lobby)" in out

    def test_json(self, tmp_path, capsys):
        path = make_log(tmp_path)
        assert main(["replay", str(path), "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["apiCalls"]["login"]["lastResult"] == {"token": "t"}
        assert data["rooms"]["!r1"]["timeline"][0]["prevContent"] == {}

    def test_until(self, tmp_path, capsys):
        path = make_log(tmp_path)
        assert main(["replay", str(path), "--until", "2", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["apiCalls"]["login"]["status"] == "pending"
        assert data["rooms"] == {}

    def test_missing_file(self, tmp_path, capsys):
        assert main(["replay", str(tmp_path / "nope.jsonl")]) == 1
        assert "not found" in capsys.readouterr().out

    def test_unsupported_kind(self, tmp_path, capsys):
        path = make_log(tmp_path, [{"tag": "mrw.wrapped_thing"}])
        assert main(["replay", str(path)]) == 1
        assert "wrapped_thing" in capsys.readouterr().out

    def test_bad_json(self, tmp_path, capsys):
        path = tmp_path / "log.jsonl"
        path.write_text("{oops\n", encoding="utf-8")
        assert main(["replay", str(path)]) == 1
        assert "line 1" in capsys.readouterr().out


# =============================================================================
# history
# =============================================================================


class TestHistory:
    def test_one_line_per_event(self, tmp_path, capsys):
        path = make_log(tmp_path)
        assert main(["history", str(path)]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 5
        assert lines[0].startswith("[0001] mrw.wrapped_event sync")
        assert "timeline=1" in lines[-1]


# =============================================================================
# doctor
# =============================================================================


class TestDoctor:
    def test_healthy(self, tmp_path, capsys):
        path = make_log(tmp_path)
        assert main(["doctor", str(path)]) == 0
        assert "HEALTHY" in capsys.readouterr().out

    def test_warnings_do_not_fail(self, tmp_path, capsys):
        path = make_log(tmp_path, [{"tag": "other"}, {"tag": "mrw.wrapped_api.pending"}])
        assert main(["doctor", str(path)]) == 0
        out = capsys.readouterr().out
        assert "Ignored tag" in out
        assert "Malformed" in out

    def test_unsupported_kind_fails(self, tmp_path, capsys):
        path = make_log(tmp_path, [{"tag": "mrw.bogus"}])
        assert main(["doctor", str(path)]) == 1
        assert "UNHEALTHY" in capsys.readouterr().out


def test_no_command(capsys):
    assert main([]) == 0
    assert "usage" in capsys.readouterr().out


def test_unknown_command():
    with pytest.raises(SystemExit):
        main(["frobnicate"])
