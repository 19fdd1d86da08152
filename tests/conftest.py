"""
Shared test fixtures.

Provides: in-memory async recipe collection, sample documents, settings env
System role: Test infrastructure for query engine, transport and loader tests
"""

import itertools
import os
from types import SimpleNamespace
from typing import Any, Dict, Iterable, List, Optional

import pytest

os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")

from recipe_catalog.core.config import get_settings  # noqa: E402


class FakeCursor:
    """Async-iterable cursor over a snapshot of documents."""

    def __init__(self, docs: List[Dict[str, Any]], error: Optional[Exception] = None) -> None:
        self._docs = docs
        self._error = error
        self._i = 0

    def __aiter__(self) -> "FakeCursor":
        return self

    async def __anext__(self) -> Dict[str, Any]:
        if self._error is not None:
            raise self._error
        if self._i >= len(self._docs):
            raise StopAsyncIteration
        doc = self._docs[self._i]
        self._i += 1
        return dict(doc)


class FakeCollection:
    """
    Minimal stand-in for an AsyncIOMotorCollection.

    Supports find / find_one (exact field match), insert_many, delete_many and
    create_index. Setting ``error`` makes every store call raise it.
    """

    def __init__(self, docs: Iterable[Dict[str, Any]] = ()) -> None:
        self._ids = itertools.count(1)
        self.docs: List[Dict[str, Any]] = []
        self.error: Optional[Exception] = None
        self.calls: List[str] = []
        for d in docs:
            self._store(d)

    def _store(self, doc: Dict[str, Any]) -> None:
        stored = dict(doc)
        stored.setdefault("_id", next(self._ids))
        self.docs.append(stored)

    @staticmethod
    def _matches(doc: Dict[str, Any], flt: Dict[str, Any]) -> bool:
        return all(k in doc and doc[k] == v for k, v in flt.items())

    def find(self, flt: Optional[Dict[str, Any]] = None) -> FakeCursor:
        self.calls.append("find")
        snapshot = [d for d in self.docs if self._matches(d, flt or {})]
        return FakeCursor(snapshot, self.error)

    async def find_one(self, flt: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        self.calls.append("find_one")
        if self.error is not None:
            raise self.error
        for d in self.docs:
            if self._matches(d, flt or {}):
                return dict(d)
        return None

    async def insert_many(self, docs: List[Dict[str, Any]]) -> SimpleNamespace:
        self.calls.append("insert_many")
        if self.error is not None:
            raise self.error
        if not docs:
            raise ValueError("documents must be a non-empty list")
        for d in docs:
            self._store(d)
        return SimpleNamespace(inserted_ids=[d["_id"] for d in self.docs[-len(docs):]])

    async def delete_many(self, flt: Dict[str, Any]) -> SimpleNamespace:
        self.calls.append("delete_many")
        if self.error is not None:
            raise self.error
        before = len(self.docs)
        self.docs = [d for d in self.docs if not self._matches(d, flt)]
        return SimpleNamespace(deleted_count=before - len(self.docs))

    async def create_index(self, keys: Any, **kwargs: Any) -> str:
        self.calls.append("create_index")
        if self.error is not None:
            raise self.error
        return kwargs.get("name", "index")


PANCAKES: Dict[str, Any] = {
    "title": "Pancakes",
    "ingredients": [{"name": "flour", "qty": "2 cups"}],
    "instructions": ["Mix", "Cook"],
    "tags": ["breakfast"],
    "media": [],
}

SOUP: Dict[str, Any] = {
    "title": "Soup",
    "ingredients": [{"name": "water", "qty": "1 l"}, {"name": "salt", "qty": "a pinch"}],
    "instructions": ["Boil", "Season", "Serve"],
    "tags": ["dinner", "starter"],
    "media": [
        {"anchor": "step-1", "url": "https://example.com/boil.jpg"},
        {"anchor": "step-3", "url": "https://example.com/serve.jpg"},
    ],
}


@pytest.fixture
def pancakes_doc() -> Dict[str, Any]:
    return dict(PANCAKES)


@pytest.fixture
def soup_doc() -> Dict[str, Any]:
    return dict(SOUP)


@pytest.fixture
def empty_collection() -> FakeCollection:
    return FakeCollection()


@pytest.fixture
def collection() -> FakeCollection:
    return FakeCollection([PANCAKES, SOUP])


@pytest.fixture
def fresh_settings():
    """Clear the cached settings before and after a test that changes env vars."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
