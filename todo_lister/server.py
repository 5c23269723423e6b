"""JSON view over a TodoIndex for presentation layers (Flask)."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable, Coroutine, Optional

from flask import Flask, jsonify, request

from .index import TodoIndex
from .models import DocumentRef
from .sources import OpenBuffers

logger = logging.getLogger("todo_lister.server")

Runner = Callable[[Coroutine[Any, Any, Any]], Any]


class LoopThread:
    """An asyncio event loop running on a daemon thread."""

    def __init__(self):
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name="todo-lister-loop", daemon=True)

    def _run(self):
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def start(self) -> "LoopThread":
        self._thread.start()
        return self

    def run(self, coro, timeout: Optional[float] = None):
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result(timeout)

    def stop(self):
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join()
        self.loop.close()


def create_app(index: TodoIndex, buffers: Optional[OpenBuffers] = None, runner: Runner = asyncio.run) -> Flask:
    app = Flask(__name__)

    @app.get("/api/todos")
    def list_todos():
        groups = index.enumerate()
        return jsonify({"groups": [g.to_dict() for g in groups], "count": len(groups)})

    @app.get("/api/todos/<path:doc_path>")
    def get_todos(doc_path):
        group = index.lookup(doc_path)
        if group is None:
            return jsonify({"error": "not found", "path": doc_path}), 404
        return jsonify({"group": group.to_dict()})

    @app.post("/api/refresh/<path:doc_path>")
    def refresh(doc_path):
        change = runner(index.upsert(DocumentRef.from_path(doc_path)))
        return jsonify({"change": change.to_dict()})

    @app.get("/api/changes/last")
    def last_change():
        change = index.last_change
        return jsonify({"change": change.to_dict() if change else None})

    @app.put("/api/buffers/<path:doc_path>")
    def open_buffer(doc_path):
        if buffers is None:
            return jsonify({"error": "live buffers disabled"}), 400
        data = request.get_json(silent=True) or {}
        content = data.get("content")
        if not isinstance(content, str):
            return jsonify({"error": "missing content"}), 400
        buffers.open(doc_path, content)
        change = runner(index.upsert(DocumentRef.from_path(doc_path)))
        return jsonify({"change": change.to_dict()})

    @app.delete("/api/buffers/<path:doc_path>")
    def close_buffer(doc_path):
        if buffers is None:
            return jsonify({"error": "live buffers disabled"}), 400
        buffers.close(doc_path)
        change = runner(index.upsert(DocumentRef.from_path(doc_path)))
        return jsonify({"change": change.to_dict()})

    return app
