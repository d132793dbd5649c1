"""Document store protocol and errors."""

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class StoreError(Exception):
    """Base error for document store failures."""


class StoreUnavailableError(StoreError):
    """The store cannot be reached at all."""


class BatchCommitError(StoreError):
    """An atomic batch commit failed; none of its writes were applied."""


@dataclass(frozen=True)
class WriteOp:
    """A single write inside a batch.

    With ``merge`` the document's fields are merged into the existing one
    instead of replacing it.
    """

    doc_id: str
    document: dict[str, Any]
    merge: bool = False


class DocumentStore(Protocol):
    """Interface for the keyed document store holding event records."""

    max_batch_size: int

    async def ping(self) -> None:
        """Check that the store is reachable.

        Raises:
            StoreUnavailableError: If the store cannot be used.
        """
        ...

    async def exists(self, doc_id: str) -> bool: ...

    async def get(self, doc_id: str) -> dict[str, Any] | None: ...

    async def set(self, doc_id: str, document: dict[str, Any], *, merge: bool = False) -> None: ...

    async def batch_commit(self, writes: list[WriteOp]) -> None:
        """Apply all writes atomically.

        Raises:
            BatchCommitError: If the batch failed. No write was applied.
        """
        ...

    async def list_documents(self, limit: int) -> list[tuple[str, dict[str, Any]]]:
        """List up to ``limit`` documents, least recently updated first."""
        ...


async def with_timeout(call: Awaitable[T], timeout_seconds: float, operation: str) -> T:
    """Await a store call, treating a timeout as an unreachable store.

    Raises:
        StoreUnavailableError: If the call did not finish in time.
    """
    try:
        return await asyncio.wait_for(call, timeout_seconds)
    except TimeoutError as e:
        msg = f"Store {operation} timed out after {timeout_seconds}s"
        raise StoreUnavailableError(msg) from e
