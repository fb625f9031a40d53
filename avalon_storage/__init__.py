# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Avalon Storage Adapter.

Document persistence behind a small abstract interface, with an in-memory
driver for tests and local development and a MongoDB driver for
deployments.
"""

__version__ = "0.1.0"

from .document_store import (
    DocumentNotFoundError,
    DocumentStore,
    DocumentStoreConnectionError,
    DocumentStoreError,
    DocumentStoreNotConnectedError,
)
from .factory import create_document_store
from .inmemory_document_store import InMemoryDocumentStore
from .mongo_document_store import MongoDocumentStore

__all__ = [
    "__version__",
    "DocumentStore",
    "DocumentStoreError",
    "DocumentStoreNotConnectedError",
    "DocumentStoreConnectionError",
    "DocumentNotFoundError",
    "InMemoryDocumentStore",
    "MongoDocumentStore",
    "create_document_store",
]
