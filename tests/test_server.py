from __future__ import annotations

import asyncio

from fakes import FakeStorage
from todo_lister.index import TodoIndex
from todo_lister.models import DocumentRef
from todo_lister.server import create_app
from todo_lister.sources import OpenBuffers


def _client():
    storage = FakeStorage({"notes/b.md": "bravo TODO", "a.md": "TODO: alpha"})
    buffers = OpenBuffers()
    index = TodoIndex(storage, live=buffers)
    asyncio.run(index.load_all([DocumentRef("notes/b.md"), DocumentRef("a.md")]))
    app = create_app(index, buffers)
    return app.test_client(), storage, index


def test_list_and_lookup() -> None:
    client, _, _ = _client()

    listing = client.get("/api/todos").get_json()
    assert [g["path"] for g in listing["groups"]] == ["a.md", "notes/b.md"]
    assert listing["count"] == 2

    assert client.get("/api/todos/notes/b.md").get_json()["group"]["items"] == ["bravo"]
    assert client.get("/api/todos/missing.md").status_code == 404


def test_open_buffer_overrides_disk_until_closed() -> None:
    client, _, index = _client()

    resp = client.put("/api/buffers/a.md", json={"content": "TODO: draft"})
    assert resp.get_json()["change"]["group"]["items"] == ["draft"]
    assert index.lookup("a.md").items == ("draft",)

    resp = client.delete("/api/buffers/a.md")
    assert resp.get_json()["change"]["group"]["items"] == ["alpha"]
    assert client.get("/api/changes/last").get_json()["change"]["path"] == "a.md"


def test_refresh_picks_up_disk_changes() -> None:
    client, storage, _ = _client()
    storage.docs["a.md"] = "nothing left"

    change = client.post("/api/refresh/a.md").get_json()["change"]

    assert change["group"] is None
    assert client.get("/api/todos").get_json()["count"] == 1


def test_buffer_without_content_is_rejected() -> None:
    client, _, _ = _client()

    assert client.put("/api/buffers/a.md", json={}).status_code == 400
