"""Tests for the shared state slots."""

import os
from pathlib import Path

from broadside.sync.store import FileStateStore, MemoryStateStore


def test_memory_store_revision_moves_on_every_write() -> None:
    store = MemoryStateStore()
    assert store.read() is None
    first = store.revision()
    store.write("{}")
    assert store.read() == "{}"
    assert store.revision() != first
    second = store.revision()
    store.write("{}")
    assert store.revision() != second

    store.clear()
    assert store.read() is None


def test_listeners_receive_the_writer_origin() -> None:
    store = MemoryStateStore()
    origins: list[object] = []
    store.listen(origins.append)

    writer = object()
    store.write("one", origin=writer)
    store.write("two")
    assert origins == [writer, None]

    store.unlisten(origins.append)
    store.write("three")
    assert len(origins) == 2


def test_file_store_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "state.json"
    store = FileStateStore(path)
    assert store.read() is None
    assert store.revision() is None

    store.write('{"gameState": "preparation"}')
    assert store.read() == '{"gameState": "preparation"}'
    assert store.revision() is not None
    assert [entry.name for entry in path.parent.iterdir()] == ["state.json"]


def test_file_stores_on_one_path_see_each_other(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    writer = FileStateStore(path)
    reader = FileStateStore(path)

    writer.write("first")
    assert reader.read() == "first"
    before = reader.revision()
    writer.write("second, longer")
    assert reader.read() == "second, longer"
    assert reader.revision() != before


def test_file_revision_sees_same_size_rewrite_within_one_tick(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    store = FileStateStore(path)
    store.write("team a")
    stat = path.stat()
    before = store.revision()

    store.write("team b")
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns))
    assert path.stat().st_size == stat.st_size
    assert store.revision() != before
