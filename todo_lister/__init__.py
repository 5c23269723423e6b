"""Extract TODO annotations from a vault of text documents and keep them indexed."""

from .extractor import extract
from .index import TodoIndex
from .models import DocumentEvent, DocumentRef, IndexChange, LoadReport, TodoGroup
from .sources import OpenBuffers, VaultStorage

__all__ = [
    "extract",
    "TodoIndex",
    "DocumentEvent",
    "DocumentRef",
    "IndexChange",
    "LoadReport",
    "TodoGroup",
    "OpenBuffers",
    "VaultStorage",
]
