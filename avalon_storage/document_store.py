# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Abstract document store interface for NoSQL backends."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

ASCENDING = 1
DESCENDING = -1


class DocumentStoreError(Exception):
    """Base exception for document store errors."""
    pass


class DocumentStoreNotConnectedError(DocumentStoreError):
    """Exception raised when attempting operations on a disconnected store."""
    pass


class DocumentStoreConnectionError(DocumentStoreError):
    """Exception raised when connection to the document store fails."""
    pass


class DocumentNotFoundError(DocumentStoreError):
    """Exception raised when a document is not found."""
    pass


class DocumentStore(ABC):
    """Abstract base class for document storage backends.

    Documents are plain dictionaries keyed by a string ``_id``. Filters are
    simple field equality checks combined with AND.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the document store.

        Raises:
            DocumentStoreConnectionError: If connection fails
        """
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the document store."""
        pass

    @abstractmethod
    def insert_document(self, collection: str, doc: Dict[str, Any]) -> str:
        """Insert a document into the specified collection.

        Args:
            collection: Name of the collection
            doc: Document data; an ``_id`` is generated when absent

        Returns:
            Document ID as string
        """
        pass

    @abstractmethod
    def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Retrieve a document by its ID, or None if not found."""
        pass

    @abstractmethod
    def query_documents(
        self,
        collection: str,
        filter_dict: Dict[str, Any],
        limit: Optional[int] = 100,
        skip: int = 0,
        sort_by: Optional[str] = None,
        sort_order: int = DESCENDING,
    ) -> List[Dict[str, Any]]:
        """Query documents matching the filter criteria.

        Args:
            collection: Name of the collection
            filter_dict: Field equality filter
            limit: Maximum number of documents to return (None for no limit)
            skip: Number of matching documents to skip
            sort_by: Optional field to sort on before skip/limit apply
            sort_order: ASCENDING (1) or DESCENDING (-1)

        Returns:
            List of matching documents
        """
        pass

    @abstractmethod
    def update_document(self, collection: str, doc_id: str, patch: Dict[str, Any]) -> None:
        """Update a document with the provided patch.

        Raises:
            DocumentNotFoundError: If document does not exist
        """
        pass

    @abstractmethod
    def delete_document(self, collection: str, doc_id: str) -> None:
        """Delete a document by its ID.

        Raises:
            DocumentNotFoundError: If document does not exist
        """
        pass

    @abstractmethod
    def delete_documents(self, collection: str, filter_dict: Dict[str, Any]) -> int:
        """Delete every document matching the filter.

        Returns:
            Number of deleted documents
        """
        pass

    @abstractmethod
    def count_documents(self, collection: str, filter_dict: Dict[str, Any]) -> int:
        """Count documents matching the filter."""
        pass
