"""Shared fixtures: an in-memory Firestore double, a mocked S3 client and an API client."""

import uuid
from collections.abc import AsyncIterator
from typing import Any
from unittest.mock import MagicMock

import pytest
from google.cloud import firestore
from httpx import ASGITransport, AsyncClient

import dependencies
from dependencies import get_firestore, get_s3_service
from main import app
from services.firestore import FirestoreDB
from services.s3 import S3Service

# -- Constants --

BUCKET = "test-bucket"
PRESIGNED_URL = "https://test-bucket.s3.amazonaws.com/signed"

USERS: dict[str, dict[str, Any]] = {
    "alice-token": {"uid": "alice", "email": "alice@example.com", "name": "Alice Liddell"},
    "bob-token": {"uid": "bob", "email": "bob@example.com"},
}
ALICE = {"Authorization": "Bearer alice-token"}
BOB = {"Authorization": "Bearer bob-token"}

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


# -- Firestore double --


class FakeSnapshot:
    def __init__(self, doc_id: str, data: dict[str, Any] | None):
        self.id = doc_id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> dict[str, Any] | None:
        return dict(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, docs: dict[str, dict[str, Any]], doc_id: str):
        self._docs = docs
        self.id = doc_id

    def set(self, data: dict[str, Any]) -> None:
        self._docs[self.id] = dict(data)

    def get(self) -> FakeSnapshot:
        return FakeSnapshot(self.id, self._docs.get(self.id))

    def update(self, data: dict[str, Any]) -> None:
        self._docs[self.id].update(data)

    def delete(self) -> None:
        self._docs.pop(self.id, None)


class FakeQuery:
    def __init__(self, docs: dict[str, dict[str, Any]], filters=(), order=None):
        self._docs = docs
        self._filters = filters
        self._order = order

    def where(self, *, filter):
        return FakeQuery(self._docs, self._filters + (filter,), self._order)

    def order_by(self, field: str, direction=firestore.Query.ASCENDING):
        return FakeQuery(self._docs, self._filters, (field, direction))

    def stream(self):
        rows = [
            (doc_id, data)
            for doc_id, data in self._docs.items()
            if all(data.get(f.field_path) == f.value for f in self._filters)
        ]
        if self._order:
            field, direction = self._order
            rows.sort(key=lambda row: row[1].get(field) or "", reverse=direction == firestore.Query.DESCENDING)
        for doc_id, data in rows:
            yield FakeSnapshot(doc_id, data)


class FakeCollection(FakeQuery):
    def document(self, doc_id: str | None = None) -> FakeDocument:
        return FakeDocument(self._docs, doc_id or uuid.uuid4().hex[:20])


class FakeFirestoreClient:
    def __init__(self):
        self.collections: dict[str, dict[str, dict[str, Any]]] = {}

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self.collections.setdefault(name, {}))


# -- Fixtures --


@pytest.fixture
def firestore_client() -> FakeFirestoreClient:
    client = FakeFirestoreClient()
    client.collections["users"] = {"alice": {"username": "alice", "email": "alice@example.com"}}
    return client


@pytest.fixture
def db(firestore_client: FakeFirestoreClient) -> FirestoreDB:
    return FirestoreDB(firestore_client)


@pytest.fixture
def s3_client() -> MagicMock:
    client = MagicMock()
    client.generate_presigned_url.return_value = PRESIGNED_URL
    return client


@pytest.fixture
def s3(s3_client: MagicMock) -> S3Service:
    return S3Service(BUCKET, s3_client)


def fake_verify_id_token(token: str, **kwargs: Any) -> dict[str, Any]:
    if token not in USERS:
        raise ValueError("Token is not a valid Firebase ID token")
    return USERS[token]


@pytest.fixture
async def client(db: FirestoreDB, s3: S3Service, monkeypatch: pytest.MonkeyPatch) -> AsyncIterator[AsyncClient]:
    monkeypatch.setattr(dependencies, "verify_id_token", fake_verify_id_token)
    app.dependency_overrides[get_firestore] = lambda: db
    app.dependency_overrides[get_s3_service] = lambda: s3
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


async def create_post(client: AsyncClient, headers: dict[str, str], **fields: Any) -> dict[str, Any]:
    data = {"title": "Hello", "content": "World", **fields}
    resp = await client.post("/api/posts", data=data, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["post"]
