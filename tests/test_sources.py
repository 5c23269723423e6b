from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from todo_lister.errors import DocumentReadError, UnsupportedDocumentError
from todo_lister.index import TodoIndex
from todo_lister.sources import OpenBuffers, VaultStorage


def _vault(tmp_path: Path) -> Path:
    (tmp_path / "sub").mkdir()
    (tmp_path / ".obsidian").mkdir()
    (tmp_path / "a.md").write_text("alpha TODO\n", encoding="utf-8")
    (tmp_path / "sub" / "b.md").write_text("TODO: beta\n", encoding="utf-8")
    (tmp_path / ".obsidian" / "c.md").write_text("hidden TODO\n", encoding="utf-8")
    (tmp_path / "d.txt").write_text("not scanned TODO\n", encoding="utf-8")
    return tmp_path


def test_list_all_honours_extensions_and_ignored_dirs(tmp_path: Path) -> None:
    storage = VaultStorage(_vault(tmp_path))

    assert [d.path for d in storage.list_all()] == ["a.md", "sub/b.md"]


def test_read_returns_text(tmp_path: Path) -> None:
    storage = VaultStorage(_vault(tmp_path))

    assert asyncio.run(storage.read("sub/b.md")) == "TODO: beta\n"


def test_read_missing_document_raises(tmp_path: Path) -> None:
    storage = VaultStorage(tmp_path)

    with pytest.raises(DocumentReadError) as err:
        storage.read_sync("missing.md")
    assert err.value.path == "missing.md"


def test_read_binary_document_raises(tmp_path: Path) -> None:
    (tmp_path / "blob.md").write_bytes(b"\x00\x01\x02TODO")
    storage = VaultStorage(tmp_path)

    with pytest.raises(DocumentReadError):
        storage.read_sync("blob.md")


def test_read_unsupported_document_raises(tmp_path: Path) -> None:
    storage = VaultStorage(_vault(tmp_path))

    with pytest.raises(UnsupportedDocumentError):
        storage.read_sync("d.txt")


def test_non_utf8_text_is_decoded(tmp_path: Path) -> None:
    (tmp_path / "legacy.md").write_bytes("café au lait TODO\n".encode("latin-1"))
    storage = VaultStorage(tmp_path)

    assert "TODO" in storage.read_sync("legacy.md")


def test_ref_for_absolute_path_is_vault_relative(tmp_path: Path) -> None:
    storage = VaultStorage(tmp_path)

    ref = storage.ref_for(tmp_path / "sub" / "b.md")

    assert ref.path == "sub/b.md"
    assert ref.display_name == "b"


def test_open_buffers_track_unsaved_content() -> None:
    buffers = OpenBuffers()
    buffers.open("a.md", "draft TODO")
    buffers.rename("a.md", "b.md")

    assert buffers.get_open_content("a.md") is None
    assert buffers.get_open_content("b.md") == "draft TODO"
    assert "b.md" in buffers

    buffers.close("b.md")
    assert len(buffers) == 0


def test_cold_load_of_a_vault(tmp_path: Path) -> None:
    storage = VaultStorage(_vault(tmp_path))
    index = TodoIndex(storage)

    report = asyncio.run(index.load_all(storage.list_all()))

    assert report.ok
    assert [(g.doc.display_name, g.items) for g in index.enumerate()] == [
        ("a", ("alpha",)),
        ("b", ("beta",)),
    ]


def test_byte_order_mark_is_dropped_on_read(tmp_path: Path) -> None:
    (tmp_path / "a.md").write_bytes(b"\xef\xbb\xbf" + "TODO\ncall mom\n".encode("utf-8"))
    storage = VaultStorage(tmp_path)
    index = TodoIndex(storage)

    asyncio.run(index.load_all(storage.list_all()))

    assert index.lookup("a.md").items == ("call mom",)
