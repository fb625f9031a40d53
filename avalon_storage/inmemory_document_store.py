# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""In-memory document store for testing and local development."""

import copy
import logging
import threading
import uuid
from collections import defaultdict
from typing import Any, Dict, List, Optional

from .document_store import DESCENDING, DocumentNotFoundError, DocumentStore

logger = logging.getLogger(__name__)


def _matches(doc: Dict[str, Any], filter_dict: Dict[str, Any]) -> bool:
    return all(doc.get(key) == value for key, value in filter_dict.items())


class InMemoryDocumentStore(DocumentStore):
    """In-memory document store.

    Calls may arrive from several threadpool workers at once, so every
    access to ``collections`` happens under a lock. Documents are deep
    copied on the way in and out.
    """

    def __init__(self):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = defaultdict(dict)
        self.connected = False
        self._lock = threading.Lock()

    def connect(self) -> None:
        self.connected = True
        logger.debug("InMemoryDocumentStore: connected")

    def disconnect(self) -> None:
        self.connected = False
        logger.debug("InMemoryDocumentStore: disconnected")

    def insert_document(self, collection: str, doc: Dict[str, Any]) -> str:
        doc_id = doc.get("_id") or str(uuid.uuid4())
        doc_copy = copy.deepcopy(doc)
        doc_copy["_id"] = doc_id

        with self._lock:
            self.collections[collection][doc_id] = doc_copy
        logger.debug(f"InMemoryDocumentStore: inserted document {doc_id} into {collection}")
        return doc_id

    def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self.collections[collection].get(doc_id)
            if doc is None:
                logger.debug(f"InMemoryDocumentStore: document {doc_id} not found in {collection}")
                return None
            return copy.deepcopy(doc)

    def query_documents(
        self,
        collection: str,
        filter_dict: Dict[str, Any],
        limit: Optional[int] = 100,
        skip: int = 0,
        sort_by: Optional[str] = None,
        sort_order: int = DESCENDING,
    ) -> List[Dict[str, Any]]:
        with self._lock:
            results = [
                copy.deepcopy(doc)
                for doc in self.collections[collection].values()
                if _matches(doc, filter_dict)
            ]

        if sort_by is not None:
            # Documents missing the sort field go last in either direction
            present = [doc for doc in results if doc.get(sort_by) is not None]
            missing = [doc for doc in results if doc.get(sort_by) is None]
            present.sort(key=lambda doc: doc[sort_by], reverse=sort_order == DESCENDING)
            results = present + missing

        end = None if limit is None else skip + limit
        results = results[skip:end]

        logger.debug(
            f"InMemoryDocumentStore: query on {collection} with {filter_dict} "
            f"returned {len(results)} documents"
        )
        return results

    def update_document(self, collection: str, doc_id: str, patch: Dict[str, Any]) -> None:
        with self._lock:
            if doc_id not in self.collections[collection]:
                raise DocumentNotFoundError(f"Document {doc_id} not found in collection {collection}")
            self.collections[collection][doc_id].update(copy.deepcopy(patch))
        logger.debug(f"InMemoryDocumentStore: updated document {doc_id} in {collection}")

    def delete_document(self, collection: str, doc_id: str) -> None:
        with self._lock:
            if doc_id not in self.collections[collection]:
                raise DocumentNotFoundError(f"Document {doc_id} not found in collection {collection}")
            del self.collections[collection][doc_id]
        logger.debug(f"InMemoryDocumentStore: deleted document {doc_id} from {collection}")

    def delete_documents(self, collection: str, filter_dict: Dict[str, Any]) -> int:
        with self._lock:
            docs = self.collections[collection]
            doomed = [doc_id for doc_id, doc in docs.items() if _matches(doc, filter_dict)]
            for doc_id in doomed:
                del docs[doc_id]
        logger.debug(f"InMemoryDocumentStore: deleted {len(doomed)} documents from {collection}")
        return len(doomed)

    def count_documents(self, collection: str, filter_dict: Dict[str, Any]) -> int:
        with self._lock:
            return sum(1 for doc in self.collections[collection].values() if _matches(doc, filter_dict))

    def clear_all(self) -> None:
        """Clear all collections (useful for testing)."""
        with self._lock:
            self.collections.clear()
