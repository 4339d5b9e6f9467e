"""Shared pytest fixtures.

Services run against ``InMemoryDatabase``, a small async double of the pymongo
collection methods the services call (equality filters, ``$set``/``$push``/``$pull``).
"""

import copy
from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult

from postboard.app import App
from postboard.config import Config
from postboard.core.core import Core
from postboard.web.server import create_fastapi_app

TEST_SECRET = "test-access-token-secret-0123456789abcdef"


def _resolve(value: Any, parts: list[str]) -> list[Any]:
    if not parts:
        return [value]
    if isinstance(value, list):
        return [found for item in value for found in _resolve(item, parts)]
    if isinstance(value, dict) and parts[0] in value:
        return _resolve(value[parts[0]], parts[1:])
    return []


def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    return all(expected in _resolve(doc, key.split(".")) for key, expected in query.items())


class InMemoryCursor:
    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self._docs = docs

    def sort(self, key: str, direction: int = 1) -> "InMemoryCursor":
        self._docs.sort(key=lambda d: d.get(key), reverse=direction < 0)
        return self

    async def __aiter__(self) -> AsyncIterator[dict[str, Any]]:
        for doc in self._docs:
            yield copy.deepcopy(doc)


class InMemoryCollection:
    def __init__(self) -> None:
        self.docs: list[dict[str, Any]] = []
        self._unique_keys: list[str] = []

    async def create_index(self, keys: list[tuple[str, int]], unique: bool = False, **_: Any) -> str:
        if unique and len(keys) == 1:
            self._unique_keys.append(keys[0][0])
        return "_".join(f"{k}_{d}" for k, d in keys)

    def _check_unique(self, doc: dict[str, Any], ignore: dict[str, Any] | None = None) -> None:
        for key in ["_id", *self._unique_keys]:
            if doc.get(key) is None:
                continue
            if any(other is not ignore and other.get(key) == doc.get(key) for other in self.docs):
                raise DuplicateKeyError(f"E11000 duplicate key error: {key}")

    def _first(self, query: dict[str, Any]) -> dict[str, Any] | None:
        return next((doc for doc in self.docs if _matches(doc, query)), None)

    def _apply(self, doc: dict[str, Any], update: dict[str, Any]) -> bool:
        before = copy.deepcopy(doc)
        candidate = copy.deepcopy(doc)
        for key, value in update.get("$set", {}).items():
            candidate[key] = copy.deepcopy(value)
        for key, value in update.get("$push", {}).items():
            candidate.setdefault(key, []).append(copy.deepcopy(value))
        for key, condition in update.get("$pull", {}).items():
            candidate[key] = [item for item in candidate.get(key, []) if not _matches(item, condition)]
        self._check_unique(candidate, ignore=doc)
        doc.clear()
        doc.update(candidate)
        return doc != before

    async def insert_one(self, doc: dict[str, Any]) -> InsertOneResult:
        self._check_unique(doc)
        self.docs.append(copy.deepcopy(doc))
        return InsertOneResult(doc["_id"], True)

    async def find_one(self, query: dict[str, Any], sort: list[tuple[str, int]] | None = None) -> dict[str, Any] | None:
        docs = [doc for doc in self.docs if _matches(doc, query)]
        for key, direction in reversed(sort or []):
            docs.sort(key=lambda d, k=key: d.get(k), reverse=direction < 0)
        return copy.deepcopy(docs[0]) if docs else None

    def find(self, query: dict[str, Any] | None = None) -> InMemoryCursor:
        return InMemoryCursor([doc for doc in self.docs if _matches(doc, query or {})])

    async def update_one(self, query: dict[str, Any], update: dict[str, Any]) -> UpdateResult:
        doc = self._first(query)
        if doc is None:
            return UpdateResult({"n": 0, "nModified": 0}, True)
        modified = self._apply(doc, update)
        return UpdateResult({"n": 1, "nModified": int(modified)}, True)

    async def find_one_and_update(
        self, query: dict[str, Any], update: dict[str, Any], return_document: bool = ReturnDocument.BEFORE
    ) -> dict[str, Any] | None:
        doc = self._first(query)
        if doc is None:
            return None
        before = copy.deepcopy(doc)
        self._apply(doc, update)
        return copy.deepcopy(doc) if return_document == ReturnDocument.AFTER else before

    async def find_one_and_delete(self, query: dict[str, Any]) -> dict[str, Any] | None:
        doc = self._first(query)
        if doc is not None:
            self.docs.remove(doc)
        return doc

    async def delete_many(self, query: dict[str, Any]) -> DeleteResult:
        removed = [doc for doc in self.docs if _matches(doc, query)]
        self.docs = [doc for doc in self.docs if doc not in removed]
        return DeleteResult({"n": len(removed)}, True)


class InMemoryDatabase:
    def __init__(self) -> None:
        self._collections: dict[str, InMemoryCollection] = {}

    def get_collection(self, name: str) -> InMemoryCollection:
        return self._collections.setdefault(name, InMemoryCollection())


class FakeClock:
    """Controllable clock for token signer tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> None:
        self.current += delta


@pytest.fixture
def config():
    return Config(
        _env_file=None,
        database_url="mongodb://localhost:27017/postboard_test",
        host="127.0.0.1",
        port=8000,
        debug=True,
        access_token_secret=TEST_SECRET,
    )


@pytest.fixture
def database():
    return InMemoryDatabase()


@pytest.fixture
def clock():
    return FakeClock()


@pytest_asyncio.fixture
async def core(config, database):
    """Core wired to the in-memory database with services started."""
    core = Core(config, database)
    async with core.lifespan():
        yield core


@pytest_asyncio.fixture
async def client(config, database):
    """HTTP client against the FastAPI app, backed by the in-memory database."""
    app = App(config, database)
    fastapi_app = create_fastapi_app(app, config)
    fastapi_app.state.app = app
    fastapi_app.state.config = config
    async with app.lifespan():
        transport = ASGITransport(app=fastapi_app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
