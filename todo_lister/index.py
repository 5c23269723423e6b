"""In-memory index of TODO groups keyed by document path."""

from __future__ import annotations

import asyncio
import dataclasses
import hashlib
import logging
import threading
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from .errors import DocumentReadError
from .extractor import DEFAULT_RULES, Rule, extract
from .models import (
    CREATED,
    DELETED,
    MODIFIED,
    RENAMED,
    DocumentEvent,
    DocumentRef,
    IndexChange,
    LoadFailure,
    LoadReport,
    TodoGroup,
)
from .plaintext import strip_markdown
from .sources import LiveContentProvider, StorageReader

logger = logging.getLogger("todo_lister.index")

_INDEXED = "indexed"
_SKIPPED = "skipped"

class TodoIndex:
    """Owns the ``path -> TodoGroup`` mapping and keeps it in sync with documents.

    A document with no TODO items has no entry. Every write is tagged with a
    per-path generation taken when the work started; a write whose generation
    has been superseded (by a later upsert, a removal or a rename) is dropped,
    so a slow read can never resurrect or overwrite fresher state.
    """

    def __init__(
        self,
        storage: StorageReader,
        live: Optional[LiveContentProvider] = None,
        normalize: Callable[[str], str] = strip_markdown,
        rules: Sequence[Rule] = DEFAULT_RULES,
        supports: Optional[Callable[[DocumentRef], bool]] = None,
    ):
        self.storage = storage
        self.live = live
        self.normalize = normalize
        self.rules = tuple(rules)
        self._supports = supports or getattr(storage, "is_supported", None) or (lambda doc: True)
        self._lock = threading.Lock()
        self._groups: Dict[str, TodoGroup] = {}
        self._hashes: Dict[str, str] = {}
        self._generation: Dict[str, int] = {}
        self._last_change: Optional[IndexChange] = None

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------
    def enumerate(self) -> List[TodoGroup]:
        with self._lock:
            groups = list(self._groups.values())
        return sorted(groups, key=TodoGroup.sort_key)

    def lookup(self, path: str) -> Optional[TodoGroup]:
        with self._lock:
            return self._groups.get(path)

    @property
    def last_change(self) -> Optional[IndexChange]:
        with self._lock:
            return self._last_change

    def __len__(self) -> int:
        with self._lock:
            return len(self._groups)

    def __contains__(self, path: str) -> bool:
        with self._lock:
            return path in self._groups

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    async def load_all(self, documents: Iterable[DocumentRef]) -> LoadReport:
        """Cold-load every document concurrently.

        A failing document is reported in the returned LoadReport and left
        without an entry; it never affects the other documents.
        """
        docs = list(documents)
        results = await asyncio.gather(*(self._load_cold(d) for d in docs), return_exceptions=True)
        report = LoadReport()
        for doc, res in zip(docs, results):
            if isinstance(res, DocumentReadError):
                logger.warning("Skipping %s: %s", doc.path, res.reason)
                report.failures.append(LoadFailure(doc.path, res.reason))
            elif isinstance(res, Exception):
                logger.error("Failed to index %s", doc.path, exc_info=res)
                report.failures.append(LoadFailure(doc.path, f"{res.__class__.__name__}: {res}"))
            elif isinstance(res, BaseException):
                raise res
            elif res == _SKIPPED:
                report.skipped.append(doc.path)
            else:
                report.indexed.append(doc.path)
        logger.info(
            "Loaded %d documents (%d with TODOs, %d skipped, %d failed)",
            len(report.indexed), len(self), len(report.skipped), len(report.failures),
        )
        return report

    async def upsert(self, doc: DocumentRef) -> IndexChange:
        """Re-extract ``doc``, preferring its open buffer over stored content."""
        token = self._begin(doc.path)
        if not self._supports(doc):
            self._commit(doc, token, None, None)
            return self._record(IndexChange(doc.path, None))
        text = self._open_content(doc.path)
        if text is None:
            try:
                text = await self.storage.read(doc.path)
            except DocumentReadError as exc:
                logger.warning("Could not refresh %s: %s", doc.path, exc.reason)
                return self._read_failed(doc, token, exc.reason)
            except Exception as exc:
                logger.error("Failed to refresh %s", doc.path, exc_info=exc)
                return self._read_failed(doc, token, f"{exc.__class__.__name__}: {exc}")
        group = self._apply(doc, token, text)
        return self._record(IndexChange(doc.path, group))

    def remove(self, doc: Union[DocumentRef, str]) -> IndexChange:
        path = doc.path if isinstance(doc, DocumentRef) else doc
        self._discard(path)
        return self._record(IndexChange(path, None))

    async def rename(self, old_path: str, doc: DocumentRef) -> IndexChange:
        self._discard(old_path)
        change = await self.upsert(doc)
        return self._record(dataclasses.replace(change, previous_path=old_path))

    async def dispatch(self, event: DocumentEvent) -> IndexChange:
        if event.kind in (CREATED, MODIFIED):
            return await self.upsert(event.doc)
        if event.kind == DELETED:
            return self.remove(event.doc)
        if event.kind == RENAMED:
            return await self.rename(event.old_path, event.doc)
        raise ValueError(f"unknown document event kind '{event.kind}'")

    def clear(self):
        with self._lock:
            for path in self._generation:
                self._generation[path] += 1
            self._groups.clear()
            self._hashes.clear()
            self._last_change = None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    async def _load_cold(self, doc: DocumentRef) -> str:
        token = self._begin(doc.path)
        if not self._supports(doc):
            return _SKIPPED
        try:
            text = await self.storage.read(doc.path)
        except BaseException:
            self._commit(doc, token, None, None)
            raise
        self._apply(doc, token, text)
        return _INDEXED

    def _read_failed(self, doc: DocumentRef, token: int, reason: str) -> IndexChange:
        self._commit(doc, token, None, None)
        return self._record(IndexChange(doc.path, self.lookup(doc.path), error=reason))

    def _open_content(self, path: str) -> Optional[str]:
        if self.live is None:
            return None
        return self.live.get_open_content(path) or None

    def _apply(self, doc: DocumentRef, token: int, text: str) -> Optional[TodoGroup]:
        h = hashlib.sha256(text.encode("utf-8", errors="ignore")).hexdigest()
        with self._lock:
            if self._hashes.get(doc.path) == h and self._generation.get(doc.path) == token:
                logger.debug("%s unchanged (%s); keeping entry", doc.path, h[:8])
                return self._groups.get(doc.path)
        items = extract(text, normalize=self.normalize, rules=self.rules)
        group = TodoGroup(doc, tuple(items)) if items else None
        return self._commit(doc, token, group, h)

    def _begin(self, path: str) -> int:
        with self._lock:
            token = self._generation.get(path, 0) + 1
            self._generation[path] = token
            return token

    def _commit(self, doc: DocumentRef, token: int, group: Optional[TodoGroup], h: Optional[str]) -> Optional[TodoGroup]:
        with self._lock:
            if self._generation.get(doc.path) != token:
                logger.debug("Dropping stale result for %s", doc.path)
                return self._groups.get(doc.path)
            if group is None:
                self._groups.pop(doc.path, None)
            else:
                self._groups[doc.path] = group
            if h is None:
                self._hashes.pop(doc.path, None)
            else:
                self._hashes[doc.path] = h
            return group

    def _discard(self, path: str):
        with self._lock:
            self._generation[path] = self._generation.get(path, 0) + 1
            self._groups.pop(path, None)
            self._hashes.pop(path, None)

    def _record(self, change: IndexChange) -> IndexChange:
        with self._lock:
            self._last_change = change
        return change
