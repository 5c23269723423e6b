from __future__ import annotations

import threading
from pathlib import Path

from watchdog.events import DirCreatedEvent, FileCreatedEvent, FileDeletedEvent, FileModifiedEvent, FileMovedEvent

from todo_lister.file_index import VaultWatcher
from todo_lister.index import TodoIndex
from todo_lister.models import CREATED, DELETED, MODIFIED, RENAMED, DocumentEvent, DocumentRef
from todo_lister.server import LoopThread
from todo_lister.sources import OpenBuffers, VaultStorage


class RecordingWatcher(VaultWatcher):
    def __init__(self, index, storage, buffers=None):
        super().__init__(index, storage, loop=None, buffers=buffers)
        self.events = []

    def submit(self, evt):
        self.events.append(evt)


def _watcher(tmp_path: Path, buffers=None) -> RecordingWatcher:
    storage = VaultStorage(tmp_path)
    return RecordingWatcher(TodoIndex(storage), storage, buffers=buffers)


def test_content_events_become_document_events(tmp_path: Path) -> None:
    watcher = _watcher(tmp_path)

    watcher.dispatch(FileCreatedEvent(str(tmp_path / "a.md")))
    watcher.dispatch(FileModifiedEvent(str(tmp_path / "sub" / "b.md")))

    assert watcher.events == [
        DocumentEvent(CREATED, DocumentRef("a.md")),
        DocumentEvent(MODIFIED, DocumentRef("sub/b.md")),
    ]


def test_directories_and_unsupported_files_are_ignored(tmp_path: Path) -> None:
    watcher = _watcher(tmp_path)

    watcher.dispatch(DirCreatedEvent(str(tmp_path / "folder")))
    watcher.dispatch(FileCreatedEvent(str(tmp_path / "image.png")))
    watcher.dispatch(FileModifiedEvent(str(tmp_path / ".obsidian" / "workspace.md")))
    watcher.dispatch(FileDeletedEvent(str(tmp_path / "image.png")))

    assert watcher.events == []


def test_delete_and_move_events(tmp_path: Path) -> None:
    watcher = _watcher(tmp_path)

    watcher.dispatch(FileDeletedEvent(str(tmp_path / "gone.md")))
    watcher.dispatch(FileMovedEvent(str(tmp_path / "a.md"), str(tmp_path / "b.md")))
    watcher.dispatch(FileMovedEvent(str(tmp_path / "c.md"), str(tmp_path / ".trash" / "c.md")))

    assert watcher.events == [
        DocumentEvent(DELETED, DocumentRef("gone.md")),
        DocumentEvent(RENAMED, DocumentRef("b.md"), old_path="a.md"),
        DocumentEvent(DELETED, DocumentRef("c.md")),
    ]


def test_moves_carry_open_buffers_along(tmp_path: Path) -> None:
    buffers = OpenBuffers()
    buffers.open("a.md", "draft TODO")
    buffers.open("c.md", "scratch TODO")
    watcher = _watcher(tmp_path, buffers=buffers)

    watcher.dispatch(FileMovedEvent(str(tmp_path / "a.md"), str(tmp_path / "b.md")))
    watcher.dispatch(FileMovedEvent(str(tmp_path / "c.md"), str(tmp_path / ".trash" / "c.md")))

    assert buffers.get_open_content("a.md") is None
    assert buffers.get_open_content("b.md") == "draft TODO"
    assert "c.md" not in buffers
    assert len(buffers) == 1


def test_submitted_events_reach_the_index(tmp_path: Path) -> None:
    (tmp_path / "a.md").write_text("water plants TODO\n", encoding="utf-8")
    storage = VaultStorage(tmp_path)
    index = TodoIndex(storage)
    changes = []
    done = threading.Event()

    def on_change(change):
        changes.append(change)
        done.set()

    loop = LoopThread().start()
    try:
        watcher = VaultWatcher(index, storage, loop.loop, on_change=on_change)
        watcher.dispatch(FileCreatedEvent(str(tmp_path / "a.md")))
        assert done.wait(5)
    finally:
        loop.stop()

    assert changes[0].path == "a.md"
    assert index.lookup("a.md").items == ("water plants",)
