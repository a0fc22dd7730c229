# tinypet/core/persistence.py
"""
Persistence gateways: one named slot holding one serialized GameState.

The gateways only move JSON-friendly dicts around. Encoding, decoding and
the decode-or-reset policy live in tinypet.services.storage.
"""
import json
import os
from tempfile import NamedTemporaryFile
from typing import Any, Dict, Optional, Protocol

import structlog
from pymongo import MongoClient
from pymongo.collection import Collection

from tinypet.core.settings import Settings

log = structlog.get_logger(__name__)


class PersistenceGateway(Protocol):
    def read(self) -> Optional[Dict[str, Any]]:
        """Return the stored payload, or None when the slot is empty."""
        ...

    def write(self, payload: Dict[str, Any]) -> None:
        ...

    def delete(self) -> None:
        ...


class InMemoryPersistence:
    """Keeps the slot in process memory. Used for tests and throwaway sessions."""

    def __init__(self, payload: Optional[Dict[str, Any]] = None):
        self.payload = json.loads(json.dumps(payload)) if payload is not None else None
        self.writes = 0

    def read(self) -> Optional[Dict[str, Any]]:
        if self.payload is None:
            return None
        # Copy through JSON so callers never share state with the slot
        return json.loads(json.dumps(self.payload))

    def write(self, payload: Dict[str, Any]) -> None:
        self.payload = json.loads(json.dumps(payload))
        self.writes += 1

    def delete(self) -> None:
        self.payload = None


class JsonFilePersistence:
    """
    JSON file slot with atomic writes.

    Data is written to a temporary file in the same directory and then
    os.replace() swaps it into place, so a crash mid-write never leaves a
    truncated save behind.
    """

    def __init__(self, path: str):
        self.path = path

    def read(self) -> Optional[Dict[str, Any]]:
        if not os.path.exists(self.path):
            return None
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def write(self, payload: Dict[str, Any]) -> None:
        directory = os.path.dirname(self.path) or "."
        os.makedirs(directory, exist_ok=True)
        temp_name = None
        try:
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=directory,
                prefix=".save-",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                temp_name = tmp.name
                json.dump(payload, tmp, indent=2, ensure_ascii=False)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(temp_name, self.path)
        except Exception:
            if temp_name and os.path.exists(temp_name):
                os.remove(temp_name)
            raise

    def delete(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)


class MongoPersistence:
    """Stores the slot as a single MongoDB document keyed by slot name."""

    def __init__(self, collection: Collection, slot: str):
        self.collection = collection
        self.slot = slot

    @classmethod
    def from_settings(cls, settings: Settings) -> "MongoPersistence":
        if not settings.MONGO_CONNECTION_URI:
            raise ValueError("MONGO_CONNECTION_URI must be set for the mongo backend.")
        log.info("Connecting to MongoDB...", database=settings.MONGO_DATABASE_NAME)
        client = MongoClient(settings.MONGO_CONNECTION_URI)
        collection = client[settings.MONGO_DATABASE_NAME][settings.MONGO_COLLECTION_NAME]
        return cls(collection, settings.SAVE_SLOT)

    def read(self) -> Optional[Dict[str, Any]]:
        document = self.collection.find_one({"slot": self.slot})
        if document is None:
            return None
        return document.get("state")

    def write(self, payload: Dict[str, Any]) -> None:
        self.collection.update_one(
            {"slot": self.slot},
            {"$set": {"slot": self.slot, "state": payload}},
            upsert=True  # Create if not exists, update if exists
        )

    def delete(self) -> None:
        self.collection.delete_one({"slot": self.slot})


def build_persistence(settings: Settings) -> PersistenceGateway:
    backend = settings.PERSISTENCE_BACKEND
    if backend == "memory":
        return InMemoryPersistence()
    if backend == "file":
        return JsonFilePersistence(settings.SAVE_FILE_PATH)
    if backend == "mongo":
        return MongoPersistence.from_settings(settings)
    raise ValueError(f"Unknown persistence backend: {backend}")
