# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""MongoDB document store implementation."""

import logging
import uuid
from typing import Any

from pymongo import MongoClient
from pymongo.errors import ConnectionFailure, PyMongoError

from .document_store import (
    DESCENDING,
    DocumentNotFoundError,
    DocumentStore,
    DocumentStoreConnectionError,
    DocumentStoreError,
    DocumentStoreNotConnectedError,
)

logger = logging.getLogger(__name__)


class MongoDocumentStore(DocumentStore):
    """MongoDB document store.

    Document ids are generated client side as UUID strings, so ``_id`` is
    always a plain string and never an ObjectId.
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        username: str | None = None,
        password: str | None = None,
        database: str | None = None,
        **kwargs
    ):
        """Initialize MongoDB document store.

        Args:
            host: MongoDB host (required)
            port: MongoDB port (required)
            username: MongoDB username (optional)
            password: MongoDB password (optional)
            database: Database name (required)
            **kwargs: Additional MongoClient options

        Raises:
            ValueError: If host, port or database is not provided
        """
        if not host:
            raise ValueError("MongoDB host is required.")
        if port is None:
            raise ValueError("MongoDB port is required.")
        if not database:
            raise ValueError("MongoDB database is required.")

        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.database_name = database
        self.client_options = kwargs
        self.client = None
        self.database = None

    def connect(self) -> None:
        connection_params = {
            "host": self.host,
            "port": self.port,
            "tz_aware": True,
        }
        if self.username and self.password:
            connection_params["username"] = self.username
            connection_params["password"] = self.password
            if "authSource" not in self.client_options:
                connection_params["authSource"] = "admin"
        connection_params.update(self.client_options)

        try:
            self.client = MongoClient(**connection_params)
            self.client.admin.command('ping')
            self.database = self.client[self.database_name]
            logger.info("MongoDocumentStore: connected to %s:%s/%s", self.host, self.port, self.database_name)
        except ConnectionFailure as e:
            logger.error("MongoDocumentStore: connection failed - %s", e, exc_info=True)
            raise DocumentStoreConnectionError(f"Failed to connect to MongoDB at {self.host}:{self.port}") from e
        except PyMongoError as e:
            logger.error("MongoDocumentStore: unexpected error during connect - %s", e, exc_info=True)
            raise DocumentStoreConnectionError(f"Unexpected error connecting to MongoDB: {e}") from e

    def disconnect(self) -> None:
        if self.client:
            self.client.close()
            self.client = None
            self.database = None
            logger.info("MongoDocumentStore: disconnected")

    def _collection(self, collection: str):
        if self.database is None:
            raise DocumentStoreNotConnectedError("Not connected to MongoDB")
        return self.database[collection]

    def insert_document(self, collection: str, doc: dict[str, Any]) -> str:
        coll = self._collection(collection)
        doc_copy = dict(doc)
        doc_copy.setdefault("_id", str(uuid.uuid4()))
        try:
            coll.insert_one(doc_copy)
        except PyMongoError as e:
            raise DocumentStoreError(f"Failed to insert document into {collection}") from e
        logger.debug(f"MongoDocumentStore: inserted document {doc_copy['_id']} into {collection}")
        return doc_copy["_id"]

    def get_document(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        coll = self._collection(collection)
        try:
            return coll.find_one({"_id": doc_id})
        except PyMongoError as e:
            raise DocumentStoreError(f"Failed to retrieve document {doc_id} from {collection}") from e

    def query_documents(
        self,
        collection: str,
        filter_dict: dict[str, Any],
        limit: int | None = 100,
        skip: int = 0,
        sort_by: str | None = None,
        sort_order: int = DESCENDING,
    ) -> list[dict[str, Any]]:
        coll = self._collection(collection)
        try:
            cursor = coll.find(filter_dict)
            if sort_by is not None:
                cursor = cursor.sort(sort_by, sort_order)
            if skip:
                cursor = cursor.skip(skip)
            if limit is not None:
                if limit <= 0:
                    return []
                cursor = cursor.limit(limit)
            return list(cursor)
        except PyMongoError as e:
            raise DocumentStoreError(f"Failed to query documents from {collection}") from e

    def update_document(self, collection: str, doc_id: str, patch: dict[str, Any]) -> None:
        coll = self._collection(collection)
        try:
            result = coll.update_one({"_id": doc_id}, {"$set": patch})
        except PyMongoError as e:
            raise DocumentStoreError(f"Failed to update document {doc_id} in {collection}") from e
        if result.matched_count == 0:
            raise DocumentNotFoundError(f"Document {doc_id} not found in collection {collection}")

    def delete_document(self, collection: str, doc_id: str) -> None:
        coll = self._collection(collection)
        try:
            result = coll.delete_one({"_id": doc_id})
        except PyMongoError as e:
            raise DocumentStoreError(f"Failed to delete document {doc_id} from {collection}") from e
        if result.deleted_count == 0:
            raise DocumentNotFoundError(f"Document {doc_id} not found in collection {collection}")

    def delete_documents(self, collection: str, filter_dict: dict[str, Any]) -> int:
        coll = self._collection(collection)
        try:
            return coll.delete_many(filter_dict).deleted_count
        except PyMongoError as e:
            raise DocumentStoreError(f"Failed to delete documents from {collection}") from e

    def count_documents(self, collection: str, filter_dict: dict[str, Any]) -> int:
        coll = self._collection(collection)
        try:
            return coll.count_documents(filter_dict)
        except PyMongoError as e:
            raise DocumentStoreError(f"Failed to count documents in {collection}") from e
