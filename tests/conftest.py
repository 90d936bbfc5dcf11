# tests/conftest.py
import copy

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError

from config import settings
from main import app

UNIQUE_FIELDS = {
    "users": ["email", "username"],
    "products": ["sku"],
}


class InsertOneResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id


class DeleteResult:
    def __init__(self, deleted_count):
        self.deleted_count = deleted_count


class FakeCursor:
    def __init__(self, docs):
        self.docs = docs

    def sort(self, key, direction=1):
        self.docs.sort(key=lambda d: d[key], reverse=direction < 0)
        return self

    def skip(self, n):
        self.docs = self.docs[n:]
        return self

    def limit(self, n):
        self.docs = self.docs[:n]
        return self

    async def _iter(self):
        for d in self.docs:
            yield d

    def __aiter__(self):
        return self._iter()


class FakeCollection:
    """Just enough of the motor collection API for the routers."""

    def __init__(self, db_name, name, unique=()):
        self.db_name = db_name
        self.name = name
        self.unique = list(unique)
        self.docs = []

    def _matches(self, doc, filt):
        return all(doc.get(k) == v for k, v in filt.items())

    def _project(self, doc, projection):
        d = copy.deepcopy(doc)
        for k, v in (projection or {}).items():
            if not v:
                d.pop(k, None)
        return d

    def _check_unique(self, doc, skip_id=None):
        for field in self.unique:
            if field not in doc:
                continue
            for other in self.docs:
                if other["_id"] != skip_id and other.get(field) == doc[field]:
                    msg = (
                        f"E11000 duplicate key error collection: {self.db_name}.{self.name} "
                        f'index: {field}_1 dup key: {{ {field}: "{doc[field]}" }}'
                    )
                    raise DuplicateKeyError(
                        msg, 11000, {"code": 11000, "errmsg": msg, "keyValue": {field: doc[field]}}
                    )

    async def insert_one(self, doc):
        doc = copy.deepcopy(doc)
        doc.setdefault("_id", ObjectId())
        self._check_unique(doc)
        self.docs.append(doc)
        return InsertOneResult(doc["_id"])

    async def find_one(self, filt, projection=None):
        for d in self.docs:
            if self._matches(d, filt):
                return self._project(d, projection)
        return None

    def find(self, filt, projection=None):
        return FakeCursor([self._project(d, projection) for d in self.docs if self._matches(d, filt)])

    async def find_one_and_update(self, filt, update, return_document=None, projection=None):
        for d in self.docs:
            if self._matches(d, filt):
                updated = {**d, **update.get("$set", {})}
                self._check_unique(updated, skip_id=d["_id"])
                d.update(update.get("$set", {}))
                return self._project(d, projection)
        return None

    async def delete_one(self, filt):
        for i, d in enumerate(self.docs):
            if self._matches(d, filt):
                del self.docs[i]
                return DeleteResult(1)
        return DeleteResult(0)

    async def create_index(self, keys, **kwargs):
        if kwargs.get("unique") and keys not in self.unique:
            self.unique.append(keys)
        return f"{keys}_1"


class FakeDatabase(dict):
    def __init__(self, name):
        super().__init__()
        self.name = name

    def __missing__(self, key):
        col = FakeCollection(self.name, key, UNIQUE_FIELDS.get(key, ()))
        self[key] = col
        return col


class FakeAdmin:
    async def command(self, cmd):
        return {"ok": 1.0}


class FakeMongoClient(dict):
    admin = FakeAdmin()

    def __missing__(self, key):
        db = FakeDatabase(key)
        self[key] = db
        return db

    def close(self):
        pass


@pytest.fixture
def mongo():
    client = FakeMongoClient()
    app.state.mongo = client
    yield client
    del app.state.mongo


@pytest.fixture
def db(mongo):
    return mongo[settings.DB_NAME]


@pytest.fixture
def client(mongo):
    return TestClient(app)


@pytest.fixture
def make_client(mongo):
    # independent cookie jars over the same fake database
    return lambda: TestClient(app)


def register_and_login(c, username="alice", email="alice@example.com", password="s3cret-pass"):
    r = c.post("/auth/register", json={"username": username, "email": email, "password": password})
    assert r.status_code == 201, r.text
    r = c.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()


@pytest.fixture
def login():
    return register_and_login
