import json
import shlex
import subprocess
from pathlib import Path

import pytest

from gf_patterns.dispatch import PatternDispatcher
from gf_patterns.engines import EngineRegistry
from gf_patterns.errors import InvalidPatternError, PatternNotFoundError, UnknownEngineError
from gf_patterns.persistence import JsonPatternStore
from gf_patterns.schemas import Request, RequestMode


class _RecordingPopen:
    calls = []
    return_code = 0

    def __init__(self, argv, **kwargs):
        type(self).calls.append(argv)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def wait(self):
        return type(self).return_code


@pytest.fixture()
def store(tmp_path: Path) -> JsonPatternStore:
    return JsonPatternStore(tmp_path / "patterns")


@pytest.fixture()
def dispatcher(store: JsonPatternStore) -> PatternDispatcher:
    return PatternDispatcher(store=store, registry=EngineRegistry(default_engine="grep"))


@pytest.fixture()
def spawned(monkeypatch):
    _RecordingPopen.calls = []
    _RecordingPopen.return_code = 0
    monkeypatch.setattr("gf_patterns.executor.which", lambda exe: f"/usr/bin/{exe}")
    monkeypatch.setattr(subprocess, "Popen", _RecordingPopen)
    return _RecordingPopen


def test_save_and_dump_default_engine(dispatcher: PatternDispatcher):
    dispatcher.save("find-todos", "-nri", "TODO")
    assert dispatcher.dump("find-todos", ["src/"]) == 'grep -nri "TODO" src/'


def test_use_spawns_record_engine_and_returns_status(dispatcher: PatternDispatcher, spawned):
    dispatcher.save("find-errors", "-nri", "ERROR", engine="rg")
    spawned.return_code = 1

    assert dispatcher.use("find-errors", ["/var/log"]) == 1
    assert spawned.calls == [["rg", "-nri", "ERROR", "/var/log"]]


def test_dump_and_use_share_one_command(dispatcher: PatternDispatcher, spawned):
    dispatcher.save("parity", "-n --glob '*.md'", "-rf", engine="rg")
    args = ["docs dir", "README.md"]

    dumped = dispatcher.dump("parity", args)
    dispatcher.use("parity", args)

    assert shlex.split(dumped) == spawned.calls[0]
    assert tuple(spawned.calls[0]) == dispatcher.materialize("parity", args).argv


def test_engine_override_beats_record_engine(dispatcher: PatternDispatcher):
    dispatcher.save("logs", "-n", "WARN", engine="rg")
    assert dispatcher.dump("logs", ["x.log"], engine="ag") == 'ag -n "WARN" x.log'
    assert dispatcher.dump("logs", ["x.log"]) == 'rg -n "WARN" x.log'


def test_injected_default_engine(store: JsonPatternStore):
    dispatcher = PatternDispatcher(store=store, registry=EngineRegistry(default_engine="ack"))
    dispatcher.save("plain", "", "needle")
    assert dispatcher.materialize("plain").argv == ("ack", "needle")


def test_simple_search_without_flags(dispatcher: PatternDispatcher):
    dispatcher.save("simple-search", "", "pattern-to-search")
    assert dispatcher.materialize("simple-search").argv == ("grep", "pattern-to-search")


def test_save_rejects_unknown_engine_without_writing(dispatcher: PatternDispatcher, store: JsonPatternStore):
    with pytest.raises(UnknownEngineError):
        dispatcher.save("nope", "-n", "x", engine="sift")
    assert not store.exists("nope")


def test_stored_unknown_engine_is_reported_on_use(dispatcher: PatternDispatcher, store: JsonPatternStore):
    store.directory.mkdir(parents=True)
    store.path_for("legacy").write_text(json.dumps({"pattern": "x", "engine": "sift"}), encoding="utf-8")

    with pytest.raises(UnknownEngineError, match="sift"):
        dispatcher.dump("legacy")


@pytest.mark.parametrize(
    "name, pattern, message",
    [
        (None, "x", "Name cannot be empty"),
        ("", "x", "Name cannot be empty"),
        ("ok", None, "Pattern cannot be empty"),
        ("ok", "", "Pattern cannot be empty"),
    ],
)
def test_save_validation(dispatcher: PatternDispatcher, name, pattern, message):
    with pytest.raises(InvalidPatternError, match=message):
        dispatcher.save(name, "-n", pattern)


def test_save_rejects_unbalanced_flags_without_writing(dispatcher: PatternDispatcher, store: JsonPatternStore):
    with pytest.raises(InvalidPatternError, match="Cannot parse flags"):
        dispatcher.save("broken", "-n --glob '*.py", "x")
    assert not store.exists("broken")


def test_missing_pattern(dispatcher: PatternDispatcher):
    with pytest.raises(PatternNotFoundError, match="No such pattern 'nonexistent'"):
        dispatcher.dump("nonexistent")


def test_handle_routes_every_mode(dispatcher: PatternDispatcher, spawned, store: JsonPatternStore):
    saved = dispatcher.handle(Request(mode=RequestMode.SAVE, name="b", flags="-n", pattern="beta"))
    assert saved.exit_code == 0 and saved.output == []
    dispatcher.handle(Request(mode=RequestMode.SAVE, name="a", pattern="alpha", engine="rg"))
    store.path_for("c").write_text("{", encoding="utf-8")

    listed = dispatcher.handle(Request(mode=RequestMode.LIST))
    assert listed.output == ["a", "b"]
    assert len(listed.warnings) == 1 and "is malformed" in listed.warnings[0]

    dumped = dispatcher.handle(Request(mode=RequestMode.DUMP, name="a", args=["src"]))
    assert dumped.output == ['rg "alpha" src']

    spawned.return_code = 2
    used = dispatcher.handle(Request(mode=RequestMode.USE, name="b"))
    assert used.exit_code == 2
    assert spawned.calls == [["grep", "-n", "beta"]]

    dispatcher.handle(Request(mode=RequestMode.DELETE, name="b"))
    assert dispatcher.list_patterns().names == ["a"]


def test_handle_use_requires_a_name(dispatcher: PatternDispatcher):
    with pytest.raises(InvalidPatternError, match="Pattern name is required"):
        dispatcher.handle(Request(mode=RequestMode.USE))
