"""Error types raised by the access-control core."""
from __future__ import annotations


class AccessError(Exception):
    """Base class for every error raised by `src.access`."""


class StoreError(AccessError):
    def __init__(self, path, message: str):
        self.path = str(path)
        super().__init__(f"{message}: {self.path}")


class StoreUnreadableError(StoreError):
    """The store file exists but could not be opened or read."""


class StoreCorruptError(StoreError):
    """The store file content does not parse as a list of identity records."""


class StoreWriteError(StoreError):
    """Rewriting the store file failed; the pending record was not persisted."""


class InvalidEmbeddingError(AccessError, ValueError):
    """Embedding cannot be compared: empty, non-finite, zero magnitude or wrong length."""
