# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Factory for creating document store instances."""

import os

from .document_store import DocumentStore
from .inmemory_document_store import InMemoryDocumentStore
from .mongo_document_store import MongoDocumentStore


def create_document_store(store_type: str | None = None, **kwargs) -> DocumentStore:
    """Create a document store instance.

    Args:
        store_type: "inmemory" or "mongodb". Defaults to DOCUMENT_STORE_TYPE env
            or "inmemory".
        **kwargs: Driver options. For "mongodb": host, port, username, password,
            database, plus any MongoClient option.

    Returns:
        DocumentStore instance (not yet connected)

    Raises:
        ValueError: If store_type is not recognized
    """
    store_type = (store_type or os.getenv("DOCUMENT_STORE_TYPE") or "inmemory").lower()

    if store_type == "inmemory":
        return InMemoryDocumentStore()
    elif store_type in ("mongodb", "mongo"):
        return MongoDocumentStore(**kwargs)
    else:
        raise ValueError(
            f"Unknown document store type: {store_type}. "
            f"Must be one of: inmemory, mongodb"
        )
