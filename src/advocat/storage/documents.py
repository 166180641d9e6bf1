"""Keyed document stores.

Collections hold JSON-compatible documents addressed by a string key
(an email for users and case maps, a token for sessions). ``upsert``
creates the document when absent and replaces it otherwise.
"""
from __future__ import annotations
import copy
import json
import logging
import os
import threading
from typing import Any, Dict, Optional

from advocat.errors import PersistenceError

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


class DocumentStore:
    def find(self, collection: str, key: str) -> Optional[Document]:
        raise NotImplementedError

    def upsert(self, collection: str, key: str, document: Document) -> None:
        raise NotImplementedError

    def delete(self, collection: str, key: str) -> bool:
        raise NotImplementedError


class MemoryDocumentStore(DocumentStore):
    def __init__(self):
        self._data: Dict[str, Dict[str, Document]] = {}
        self._lock = threading.Lock()

    def find(self, collection, key):
        with self._lock:
            doc = self._data.get(collection, {}).get(key)
            return copy.deepcopy(doc) if doc is not None else None

    def upsert(self, collection, key, document):
        with self._lock:
            self._data.setdefault(collection, {})[key] = copy.deepcopy(document)

    def delete(self, collection, key):
        with self._lock:
            return self._data.get(collection, {}).pop(key, None) is not None


class JsonFileDocumentStore(DocumentStore):
    """One ``<collection>.json`` file per collection under ``directory``."""

    def __init__(self, directory: str):
        self.directory = directory
        self._lock = threading.Lock()

    def _path(self, collection: str) -> str:
        return os.path.join(self.directory, f"{collection}.json")

    def _read(self, collection: str) -> Dict[str, Document]:
        path = self._path(collection)
        if not os.path.exists(path):
            return {}
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f) or {}
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Failed to read {path}: {e}") from e

    def _write(self, collection: str, data: Dict[str, Document]) -> None:
        path = self._path(collection)
        tmp = f"{path}.tmp"
        try:
            os.makedirs(self.directory, exist_ok=True)
            with open(tmp, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp, path)
        except OSError as e:
            raise PersistenceError(f"Failed to write {path}: {e}") from e

    def find(self, collection, key):
        with self._lock:
            return self._read(collection).get(key)

    def upsert(self, collection, key, document):
        with self._lock:
            data = self._read(collection)
            data[key] = document
            self._write(collection, data)

    def delete(self, collection, key):
        with self._lock:
            data = self._read(collection)
            if key not in data:
                return False
            del data[key]
            self._write(collection, data)
            return True
