# src/tessera/core/store.py
"""
Document stores the widget pipeline reads from.

Widgets never own storage. They need two things from it:
- Batched lookup of documents by id (joins)
- A full scan of documents (the `list` task)
"""

import json
import logging
from collections.abc import AsyncIterator, Iterable, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from tessera.contracts import Document, RequestContext

logger = logging.getLogger(__name__)


@runtime_checkable
class DocumentStore(Protocol):
    """Protocol for document storage backends."""

    async def find_by_ids(
        self,
        ctx: RequestContext,
        ids: Sequence[str],
        *,
        doc_type: str | None = None,
    ) -> list[Document]:
        """Fetch documents by id in a single round trip.

        Args:
            ctx: Request context (backends may apply visibility rules)
            ids: Document ids; order of the result is unspecified
            doc_type: Restrict matches to this document type

        Returns:
            Matching documents. Unknown ids are silently absent.
        """
        ...

    def iterate(self) -> AsyncIterator[Document]:
        """Iterate over every stored document."""
        ...


class MemoryDocumentStore:
    """In-process document store.

    Useful for tests and for sites small enough to load at startup.
    """

    def __init__(self, documents: Iterable[Document] = ()) -> None:
        self._documents: dict[str, Document] = {}
        for document in documents:
            self.insert(document)

    def insert(self, document: Document) -> None:
        """Add or replace a document by id."""
        self._documents[document.id] = document

    def __len__(self) -> int:
        return len(self._documents)

    async def find_by_ids(
        self,
        ctx: RequestContext,
        ids: Sequence[str],
        *,
        doc_type: str | None = None,
    ) -> list[Document]:
        found: list[Document] = []
        for doc_id in ids:
            document = self._documents.get(doc_id)
            if document is None:
                continue
            if doc_type is not None and document.type != doc_type:
                continue
            found.append(document)
        return found

    async def iterate(self) -> AsyncIterator[Document]:
        for document in list(self._documents.values()):
            yield document


class JsonDocumentStore(MemoryDocumentStore):
    """Document store loaded from a JSON file holding a list of documents.

    Structure: [{"_id": "...", "slug": "...", "type": "...", ...}, ...]
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        raw = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(raw, list):
            raise ValueError(
                f"Document file {path} must contain a JSON list, "
                f"got {type(raw).__name__}"
            )
        super().__init__(Document.from_dict(item) for item in raw if isinstance(item, dict))
        logger.debug("Loaded %d documents from %s", len(self), path)

    @property
    def path(self) -> Path:
        return self._path
