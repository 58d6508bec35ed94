"""
Shared pytest fixtures.

The application talks to MongoDB only through DatabaseManager, whose client
constructor is injectable. Tests hand it a factory that builds an in-memory
client exposing the slice of the motor API the routes use: find().to_list(),
find_one, insert_one, delete_one, and admin.command("ping").
"""
import asyncio
import copy
from collections import defaultdict
from typing import Any, Dict, List

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from pymongo.errors import ServerSelectionTimeoutError
from pymongo.results import DeleteResult, InsertOneResult

from quick_bazaar.config.database import DatabaseManager
from quick_bazaar.config.settings import Settings
from quick_bazaar.main import create_app


def _matches(doc: Dict[str, Any], filter_query: Dict[str, Any]) -> bool:
    for field, condition in filter_query.items():
        if field not in doc:
            return False
        value = doc[field]
        if isinstance(condition, dict) and "$gt" in condition:
            try:
                if not value > condition["$gt"]:
                    return False
            except TypeError:
                return False
        elif value != condition:
            return False
    return True


class FakeCursor:
    def __init__(self, docs: List[Dict[str, Any]]):
        self._docs = docs

    async def to_list(self, length=None):
        return [copy.deepcopy(doc) for doc in self._docs]


class FakeCollection:
    def __init__(self):
        self.docs: List[Dict[str, Any]] = []
        self.error = None

    def _check(self):
        if self.error is not None:
            raise self.error

    def find(self, filter_query=None):
        self._check()
        return FakeCursor([doc for doc in self.docs if _matches(doc, filter_query or {})])

    async def find_one(self, filter_query=None):
        self._check()
        for doc in self.docs:
            if _matches(doc, filter_query or {}):
                return copy.deepcopy(doc)
        return None

    async def insert_one(self, document):
        self._check()
        document.setdefault("_id", ObjectId())
        self.docs.append(copy.deepcopy(document))
        return InsertOneResult(document["_id"], acknowledged=True)

    async def delete_one(self, filter_query):
        self._check()
        for index, doc in enumerate(self.docs):
            if _matches(doc, filter_query):
                del self.docs[index]
                return DeleteResult({"n": 1, "ok": 1.0}, acknowledged=True)
        return DeleteResult({"n": 0, "ok": 1.0}, acknowledged=True)

    def seed(self, *docs):
        for doc in docs:
            doc = dict(doc)
            doc.setdefault("_id", ObjectId())
            self.docs.append(doc)
        return self


class FakeDatabase:
    def __init__(self, name: str):
        self.name = name
        self.collections: Dict[str, FakeCollection] = defaultdict(FakeCollection)

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections[name]


class FakeAdmin:
    def __init__(self, store: "FakeMongo"):
        self.store = store

    async def command(self, name: str):
        self.store.pings += 1
        if self.store.ping_delay:
            await asyncio.sleep(self.store.ping_delay)
        if self.store.ping_error is not None:
            raise self.store.ping_error
        return {"ok": 1.0}


class FakeClient:
    def __init__(self, store: "FakeMongo", uri: str, **kwargs):
        self.store = store
        self.uri = uri
        self.kwargs = kwargs
        self.closed = False
        self.admin = FakeAdmin(store)

    def __getitem__(self, name: str) -> FakeDatabase:
        return self.store.database(name)

    def close(self):
        self.closed = True


class FakeMongo:
    """In-memory deployment shared by every client the factory builds."""

    def __init__(self):
        self.clients: List[FakeClient] = []
        self.databases: Dict[str, FakeDatabase] = {}
        self.pings = 0
        self.ping_error = None
        self.ping_delay = 0.0

    def client_factory(self, uri: str, **kwargs) -> FakeClient:
        client = FakeClient(self, uri, **kwargs)
        self.clients.append(client)
        return client

    def database(self, name: str = "QuickBazaarDB") -> FakeDatabase:
        if name not in self.databases:
            self.databases[name] = FakeDatabase(name)
        return self.databases[name]

    def collection(self, name: str) -> FakeCollection:
        return self.database()[name]


@pytest.fixture
def mongo():
    return FakeMongo()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        mongodb_url="mongodb://fake-host:27017",
        database_name="QuickBazaarDB",
        connect_on_startup=False,
    )


@pytest.fixture
def db_manager(settings, mongo):
    return DatabaseManager(settings, client_factory=mongo.client_factory)


@pytest.fixture
def app(settings, db_manager):
    return create_app(settings, db_manager)


@pytest_asyncio.fixture
async def test_client(app):
    """HTTPX AsyncClient routed straight into the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def unreachable():
    return ServerSelectionTimeoutError("fake-host:27017: connection refused")
