"""
Shared pytest fixtures for the document store test suite.

Fixtures are reusable test setup/data automatically available to all tests.
Just add fixture name as a function parameter to use it.

Types:
    - Fakes: In-memory stand-ins for the async Firestore client
    - Components: Pre-configured driver instances ready to use
    - Mocks: Patched Firebase Admin SDK entry points
"""

import asyncio
import copy
from typing import Any, Dict, List, Optional

import pytest
from google.api_core.exceptions import NotFound, ServiceUnavailable

from database.firebase.firestore_driver import FirestoreDriver, FirestoreDriverOptions


# ==============================================================================
# FAKE ASYNC FIRESTORE
# ==============================================================================

class FakeDocumentSnapshot:
    """Mimics google.cloud.firestore AsyncDocumentSnapshot."""

    def __init__(self, reference: "FakeDocumentReference", data: Optional[Dict[str, Any]]):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._data)


class FakeDocumentReference:
    """Mimics AsyncDocumentReference: awaitable get/set/update/delete."""

    def __init__(self, client: "FakeFirestore", collection: str, doc_id: str):
        self._client = client
        self._collection = collection
        self.id = doc_id

    @property
    def _docs(self) -> Dict[str, Dict[str, Any]]:
        return self._client.store.setdefault(self._collection, {})

    async def get(self) -> FakeDocumentSnapshot:
        self._client.record_call("get", self.id)
        return FakeDocumentSnapshot(self, self._docs.get(self.id))

    async def set(self, data: Dict[str, Any]) -> None:
        self._client.record_call("set", self.id)
        self._docs[self.id] = copy.deepcopy(data)

    async def update(self, data: Dict[str, Any]) -> None:
        self._client.record_call("update", self.id)
        if self.id not in self._docs:
            raise NotFound(f"No document to update: {self.id}")
        self._docs[self.id].update(copy.deepcopy(data))

    async def delete(self) -> None:
        self._client.record_call("delete", self.id)
        self._docs.pop(self.id, None)


class FakeQuery:
    """Mimics AsyncQuery: chained equality filters and an async stream()."""

    def __init__(self, client: "FakeFirestore", collection: str, filters: Optional[List] = None):
        self._client = client
        self._collection = collection
        self.filters = list(filters or [])

    def where(self, *, filter) -> "FakeQuery":
        assert filter.op_string == "=="
        return FakeQuery(self._client, self._collection, self.filters + [filter])

    def _matches(self, data: Dict[str, Any]) -> bool:
        missing = object()
        return all(data.get(f.field_path, missing) == f.value for f in self.filters)

    async def stream(self):
        self._client.record_call("stream", self._collection)
        if self._client.fail_stream:
            raise ServiceUnavailable("backend unavailable")
        docs = self._client.store.setdefault(self._collection, {})
        for doc_id, data in list(docs.items()):
            if self._matches(data):
                reference = FakeDocumentReference(self._client, self._collection, doc_id)
                yield FakeDocumentSnapshot(reference, data)


class FakeCollectionReference(FakeQuery):
    """Mimics AsyncCollectionReference."""

    def __init__(self, client: "FakeFirestore", collection: str):
        super().__init__(client, collection)
        self.id = collection

    def document(self, doc_id: str) -> FakeDocumentReference:
        return FakeDocumentReference(self._client, self._collection, doc_id)


class FakeFirestore:
    """
    In-memory async Firestore client.

    fail_writes_after: number of update/delete calls allowed before the
    next one raises ServiceUnavailable (None disables the failure).
    """

    def __init__(self):
        self.store: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self.fail_stream = False
        self.fail_writes_after: Optional[int] = None
        self._writes = 0

    def record_call(self, op: str, target: str) -> None:
        self.calls.append((op, target))
        if op in ("update", "delete") and self.fail_writes_after is not None:
            if self._writes >= self.fail_writes_after:
                raise ServiceUnavailable(f"{op} rejected for {target}")
            self._writes += 1

    def collection(self, name: str) -> FakeCollectionReference:
        return FakeCollectionReference(self, name)

    def docs(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self.store.setdefault(collection, {})


# ==============================================================================
# MOCKS & COMPONENTS
# ==============================================================================

@pytest.fixture
def fake_firestore() -> FakeFirestore:
    """Empty in-memory Firestore."""
    return FakeFirestore()


@pytest.fixture
def mock_firebase(mocker, fake_firestore):
    """
    Patch the Firebase Admin SDK used by the driver.

    Returns:
        Tuple of (mock firebase_admin module, mock firestore_async module)
    """
    mock_admin = mocker.patch("database.firebase.firestore_driver.firebase_admin")
    mock_admin.get_app.side_effect = ValueError("app does not exist")
    mock_async = mocker.patch("database.firebase.firestore_driver.firestore_async")
    mock_async.client.return_value = fake_firestore
    mocker.patch("database.firebase.firestore_driver.credentials")
    return mock_admin, mock_async


@pytest.fixture
def driver_options() -> FirestoreDriverOptions:
    """Options pointing at a test collection."""
    return FirestoreDriverOptions(
        collection_name="test-records",
        firebase_config={"projectId": "test-project"},
    )


@pytest.fixture
def driver(mock_firebase, driver_options) -> FirestoreDriver:
    """Disconnected FirestoreDriver with the SDK patched."""
    return FirestoreDriver(driver_options)


@pytest.fixture
def connected_driver(driver) -> FirestoreDriver:
    """FirestoreDriver already connected to the fake Firestore."""
    asyncio.run(driver.connect())
    return driver


@pytest.fixture
def driver_factory(mock_firebase):
    """
    Build independent connected drivers, each backed by a fresh fake store.

    Useful in hypothesis tests where function-scoped fixtures are shared
    across examples.
    """
    _, mock_async = mock_firebase

    def _make() -> FirestoreDriver:
        mock_async.client.return_value = FakeFirestore()
        new_driver = FirestoreDriver(FirestoreDriverOptions(collection_name="property-records"))
        asyncio.run(new_driver.connect())
        return new_driver

    return _make
