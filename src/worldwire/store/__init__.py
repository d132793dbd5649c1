"""Document storage for event records."""

from worldwire.store.base import (
    BatchCommitError,
    DocumentStore,
    StoreError,
    StoreUnavailableError,
    WriteOp,
    with_timeout,
)
from worldwire.store.jsonfile import JsonFileDocumentStore
from worldwire.store.memory import InMemoryDocumentStore
from worldwire.store.writer import StoreWriter, WriteStats, apply_enrichment, event_id, slugify

__all__ = [
    "BatchCommitError",
    "DocumentStore",
    "InMemoryDocumentStore",
    "JsonFileDocumentStore",
    "StoreError",
    "StoreUnavailableError",
    "StoreWriter",
    "WriteOp",
    "WriteStats",
    "apply_enrichment",
    "event_id",
    "slugify",
    "with_timeout",
]
