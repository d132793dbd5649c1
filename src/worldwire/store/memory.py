"""In-memory document store for tests and dry runs."""

import copy
from typing import Any

from worldwire.store.base import BatchCommitError, StoreUnavailableError, WriteOp


class InMemoryDocumentStore:
    """Dictionary-backed store.

    Args:
        max_batch_size: Largest accepted batch.
        available: When False, ``ping`` raises StoreUnavailableError.
    """

    def __init__(self, *, max_batch_size: int = 500, available: bool = True) -> None:
        self.max_batch_size = max_batch_size
        self.available = available
        self.documents: dict[str, dict[str, Any]] = {}
        self.commits = 0

    async def ping(self) -> None:
        if not self.available:
            raise StoreUnavailableError("In-memory store marked unavailable")

    async def exists(self, doc_id: str) -> bool:
        return doc_id in self.documents

    async def get(self, doc_id: str) -> dict[str, Any] | None:
        doc = self.documents.get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def set(self, doc_id: str, document: dict[str, Any], *, merge: bool = False) -> None:
        self._apply(WriteOp(doc_id=doc_id, document=document, merge=merge))

    async def batch_commit(self, writes: list[WriteOp]) -> None:
        if len(writes) > self.max_batch_size:
            raise BatchCommitError(
                f"Batch of {len(writes)} exceeds maximum of {self.max_batch_size}"
            )
        for op in writes:
            self._apply(op)
        self.commits += 1

    async def list_documents(self, limit: int) -> list[tuple[str, dict[str, Any]]]:
        ordered = sorted(self.documents.items(), key=lambda item: str(item[1].get("updatedAt", "")))
        return [(doc_id, copy.deepcopy(doc)) for doc_id, doc in ordered[:limit]]

    def _apply(self, op: WriteOp) -> None:
        document = copy.deepcopy(op.document)
        if op.merge and op.doc_id in self.documents:
            self.documents[op.doc_id].update(document)
        else:
            self.documents[op.doc_id] = document
