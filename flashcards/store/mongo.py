"""
MongoDB store for flashcard documents.

One document per (namespace, key):
    {"_id": "<namespace>:<key>", "namespace": ..., "key": ..., "value": ..., "updated_at": ...}
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pymongo import MongoClient
from pymongo.collection import Collection

from flashcards.dates import utc_now
from flashcards.store.base import FlashcardStore

logger = logging.getLogger(__name__)

COLLECTION_NAME = "flashcard_store"


# ---- Connection Management ----

def get_collection(uri: str, database_name: str) -> Collection:
    """
    Open the flashcard store collection.

    Returns:
        MongoDB collection object
    """
    client = MongoClient(
        uri,
        maxPoolSize=10,  # Connection pool size
        minPoolSize=1,   # Keep at least 1 connection alive
        maxIdleTimeMS=60000  # Keep connections alive for 60 seconds
    )
    return client[database_name][COLLECTION_NAME]


class MongoStore(FlashcardStore):
    """
    Store backed by a MongoDB collection.

    Pass a ready collection (tests, shared clients) or a URI.
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        namespace: str = "default",
        database_name: str = "flashcards",
        collection: Optional[Collection] = None,
    ):
        if collection is None:
            if not uri:
                raise ValueError("MongoStore needs a MongoDB uri or a collection")
            collection = get_collection(uri, database_name)
        self.collection = collection
        self.namespace = namespace

    def _doc_id(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get(self, key: str) -> Optional[Any]:
        doc = self.collection.find_one({"_id": self._doc_id(key)})
        return doc.get("value") if doc else None

    def set(self, key: str, value: Any) -> None:
        self.collection.replace_one(
            {"_id": self._doc_id(key)},
            {
                "_id": self._doc_id(key),
                "namespace": self.namespace,
                "key": key,
                "value": value,
                "updated_at": utc_now(),
            },
            upsert=True,
        )

    def delete(self, key: str) -> None:
        self.collection.delete_one({"_id": self._doc_id(key)})

    def clear(self) -> None:
        result = self.collection.delete_many({"namespace": self.namespace})
        logger.info("Cleared %d documents for namespace %s", result.deleted_count, self.namespace)

    def __repr__(self):
        return f"<MongoStore({self.collection.name}, {self.namespace})>"
