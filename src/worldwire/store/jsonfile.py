"""Document store keeping one JSON file per document in a directory."""

import json
import logging
import os
import re
import uuid
from pathlib import Path
from typing import Any

from worldwire.store.base import BatchCommitError, StoreError, StoreUnavailableError, WriteOp

logger = logging.getLogger(__name__)

_SAFE_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


class JsonFileDocumentStore:
    """Directory-backed store: ``<root>/<id>.json`` per document.

    A batch commit stages every document to a temporary file first and only
    renames them into place once all of them were written, so a batch that
    fails while staging leaves the collection untouched.

    Args:
        root: Directory acting as the collection.
        max_batch_size: Largest accepted batch.
    """

    def __init__(self, root: Path | str, *, max_batch_size: int = 500) -> None:
        self._root = Path(root)
        self.max_batch_size = max_batch_size

    @property
    def root(self) -> Path:
        return self._root

    async def ping(self) -> None:
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            marker = self._root / f".ping-{uuid.uuid4().hex}"
            marker.write_text("ok")
            marker.unlink()
        except OSError as e:
            raise StoreUnavailableError(f"Store directory {self._root} is not writable: {e}") from e

    async def exists(self, doc_id: str) -> bool:
        return self._path(doc_id).is_file()

    async def get(self, doc_id: str) -> dict[str, Any] | None:
        path = self._path(doc_id)
        if not path.is_file():
            return None
        try:
            return json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Failed to read document {doc_id}: {e}") from e

    async def set(self, doc_id: str, document: dict[str, Any], *, merge: bool = False) -> None:
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            staged = self._stage(WriteOp(doc_id=doc_id, document=document, merge=merge))
            os.replace(staged, self._path(doc_id))
        except (OSError, TypeError, ValueError) as e:
            raise StoreError(f"Failed to write document {doc_id}: {e}") from e

    async def batch_commit(self, writes: list[WriteOp]) -> None:
        if len(writes) > self.max_batch_size:
            raise BatchCommitError(
                f"Batch of {len(writes)} exceeds maximum of {self.max_batch_size}"
            )

        staged: list[tuple[Path, Path]] = []
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            for op in writes:
                staged.append((self._stage(op), self._path(op.doc_id)))
        except (OSError, TypeError, ValueError, StoreError) as e:
            for temp, _ in staged:
                temp.unlink(missing_ok=True)
            raise BatchCommitError(f"Batch of {len(writes)} failed while staging: {e}") from e

        for temp, target in staged:
            os.replace(temp, target)
        logger.debug("Committed batch of %d documents to %s", len(writes), self._root)

    async def list_documents(self, limit: int) -> list[tuple[str, dict[str, Any]]]:
        if not self._root.is_dir():
            return []
        documents: list[tuple[str, dict[str, Any]]] = []
        for path in self._root.glob("*.json"):
            try:
                documents.append((path.stem, json.loads(path.read_text())))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Skipping unreadable document %s: %s", path.name, e)
        documents.sort(key=lambda item: str(item[1].get("updatedAt", "")))
        return documents[:limit]

    def _path(self, doc_id: str) -> Path:
        if not _SAFE_ID_RE.match(doc_id):
            raise StoreError(f"Invalid document id: {doc_id!r}")
        return self._root / f"{doc_id}.json"

    def _stage(self, op: WriteOp) -> Path:
        document = dict(op.document)
        target = self._path(op.doc_id)
        if op.merge and target.is_file():
            existing = json.loads(target.read_text())
            existing.update(document)
            document = existing
        temp = self._root / f".{op.doc_id}.{uuid.uuid4().hex}.tmp"
        temp.write_text(json.dumps(document, indent=2, ensure_ascii=False))
        return temp
