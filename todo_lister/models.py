"""Data models shared by the extractor, the index and its consumers."""

from __future__ import annotations

import dataclasses
import posixpath
from typing import Any, Dict, List, Optional, Tuple


@dataclasses.dataclass(frozen=True, slots=True)
class DocumentRef:
    """Identity of a document: a unique path key plus its file name."""

    path: str

    @property
    def name(self) -> str:
        return posixpath.basename(self.path)

    @property
    def display_name(self) -> str:
        # extension stripped for display only, never for the key
        stem, _ext = posixpath.splitext(self.name)
        return stem or self.name

    @property
    def extension(self) -> str:
        return posixpath.splitext(self.name)[1].lower()

    @classmethod
    def from_path(cls, path) -> "DocumentRef":
        return cls(path=str(path).replace("\\", "/"))


@dataclasses.dataclass(frozen=True, slots=True)
class TodoGroup:
    """TODO items of one document, in the order they were found."""

    doc: DocumentRef
    items: Tuple[str, ...]

    def __post_init__(self):
        if not self.items:
            raise ValueError(f"TodoGroup for {self.doc.path} must have at least one item")

    @property
    def path(self) -> str:
        return self.doc.path

    def sort_key(self) -> Tuple[str, str]:
        return (self.doc.display_name, self.doc.path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.doc.path,
            "name": self.doc.display_name,
            "items": list(self.items),
        }


@dataclasses.dataclass(frozen=True, slots=True)
class IndexChange:
    """The key touched by a mutating index call and its resulting entry.

    ``group`` is ``None`` when the path no longer has an entry.
    """

    path: str
    group: Optional[TodoGroup]
    previous_path: Optional[str] = None
    error: Optional[str] = None

    @property
    def removed(self) -> bool:
        return self.group is None

    def affected_paths(self) -> List[str]:
        if self.previous_path and self.previous_path != self.path:
            return [self.previous_path, self.path]
        return [self.path]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "previous_path": self.previous_path,
            "group": self.group.to_dict() if self.group else None,
            "error": self.error,
        }


@dataclasses.dataclass(frozen=True, slots=True)
class LoadFailure:
    path: str
    error: str


@dataclasses.dataclass(slots=True)
class LoadReport:
    """Outcome of a bulk load: indexed paths, skipped paths and per-document failures."""

    indexed: List[str] = dataclasses.field(default_factory=list)
    skipped: List[str] = dataclasses.field(default_factory=list)
    failures: List[LoadFailure] = dataclasses.field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_dict(self) -> Dict[str, Any]:
        return {
            "indexed": list(self.indexed),
            "skipped": list(self.skipped),
            "failures": [{"path": f.path, "error": f.error} for f in self.failures],
        }


CREATED = "created"
MODIFIED = "modified"
DELETED = "deleted"
RENAMED = "renamed"
EVENT_KINDS = (CREATED, MODIFIED, DELETED, RENAMED)


@dataclasses.dataclass(frozen=True, slots=True)
class DocumentEvent:
    """A document lifecycle notification pushed into the index."""

    kind: str
    doc: DocumentRef
    old_path: Optional[str] = None

    def __post_init__(self):
        if self.kind not in EVENT_KINDS:
            raise ValueError(f"unknown document event kind '{self.kind}'")
        if self.kind == RENAMED and not self.old_path:
            raise ValueError("renamed events need old_path")
