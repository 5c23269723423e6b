"""Document sources: durable storage, open (unsaved) buffers and enumeration."""

from __future__ import annotations

import asyncio
import logging
import pathlib
import threading
from typing import Dict, Iterable, List, Optional, Protocol, Union

from .errors import DocumentReadError, UnsupportedDocumentError
from .models import DocumentRef
from .utils.io import read_text

logger = logging.getLogger("todo_lister.sources")

DEFAULT_EXTENSIONS = (".md",)
DEFAULT_IGNORE_DIRS = (".git", ".obsidian", ".trash", ".todo-lister")


class StorageReader(Protocol):
    async def read(self, path: str) -> str:
        """Return the stored content of ``path`` or raise DocumentReadError."""


class LiveContentProvider(Protocol):
    def get_open_content(self, path: str) -> Optional[str]:
        """Return unsaved content for ``path`` if it is open for editing."""


class VaultStorage:
    """Filesystem-backed storage rooted at a vault directory.

    Document keys are POSIX paths relative to the root.
    """

    def __init__(self, root, extensions: Iterable[str] = DEFAULT_EXTENSIONS, ignore_dirs: Iterable[str] = DEFAULT_IGNORE_DIRS):
        self.root = pathlib.Path(root).resolve()
        self.extensions = {e.lower() for e in extensions}
        self.ignore_dirs = set(ignore_dirs)

    @classmethod
    def from_config(cls, cfg, root=None) -> "VaultStorage":
        idx = cfg.get("index", {})
        return cls(
            root or cfg.get("vault", {}).get("path", "."),
            extensions=idx.get("extensions") or DEFAULT_EXTENSIONS,
            ignore_dirs=idx.get("ignore_dirs") or DEFAULT_IGNORE_DIRS,
        )

    def ref_for(self, path: Union[str, pathlib.Path]) -> DocumentRef:
        p = pathlib.Path(path)
        if p.is_absolute():
            try:
                p = p.resolve().relative_to(self.root)
            except ValueError:
                p = pathlib.Path(p.name)
        return DocumentRef.from_path(p.as_posix())

    def resolve(self, path: str) -> pathlib.Path:
        return self.root / pathlib.PurePosixPath(path)

    def is_ignored(self, path: Union[str, pathlib.Path]) -> bool:
        return any(part in self.ignore_dirs for part in pathlib.PurePath(path).parts)

    def is_supported(self, doc: DocumentRef) -> bool:
        return doc.extension in self.extensions and not self.is_ignored(doc.path)

    def read_sync(self, path: str) -> str:
        doc = DocumentRef.from_path(path)
        if not self.is_supported(doc):
            raise UnsupportedDocumentError(path, f"unsupported document type '{doc.extension or '<none>'}'")
        try:
            return read_text(self.resolve(path))
        except (OSError, ValueError, LookupError) as exc:
            raise DocumentReadError(path, str(exc) or exc.__class__.__name__) from exc

    async def read(self, path: str) -> str:
        return await asyncio.to_thread(self.read_sync, path)

    def list_all(self) -> List[DocumentRef]:
        docs = []
        for p in sorted(self.root.rglob("*")):
            if p.is_dir():
                continue
            rel = p.relative_to(self.root)
            if self.is_ignored(rel):
                continue
            doc = DocumentRef.from_path(rel.as_posix())
            if doc.extension not in self.extensions:
                continue
            docs.append(doc)
        logger.debug("Enumerated %d documents under %s", len(docs), self.root)
        return docs


class OpenBuffers:
    """Registry of documents currently open with unsaved content."""

    def __init__(self):
        self._lock = threading.Lock()
        self._buffers: Dict[str, str] = {}

    def open(self, path: str, content: str):
        with self._lock:
            self._buffers[path] = content

    def close(self, path: str):
        with self._lock:
            self._buffers.pop(path, None)

    def rename(self, old_path: str, new_path: str):
        with self._lock:
            if old_path in self._buffers:
                self._buffers[new_path] = self._buffers.pop(old_path)

    def get_open_content(self, path: str) -> Optional[str]:
        with self._lock:
            return self._buffers.get(path)

    def __contains__(self, path: str) -> bool:
        with self._lock:
            return path in self._buffers

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffers)
