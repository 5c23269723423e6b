class TodoListerError(Exception):
    """Base exception for TODO lister errors."""


class DocumentReadError(TodoListerError):
    """Raised when a document's content cannot be fetched from storage."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"could not read {path}: {reason}")
        self.path = path
        self.reason = reason


class UnsupportedDocumentError(DocumentReadError):
    """Raised when a document is filtered out by its type (e.g. binary files)."""


class ConfigError(TodoListerError):
    """Raised when a configuration file is malformed."""
