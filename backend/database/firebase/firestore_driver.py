"""
Firestore-backed implementation of the document store Driver.

Queries are translated into Firestore equality filters; everything else is
forwarded to the async Firestore client from the Firebase Admin SDK.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import firebase_admin
from firebase_admin import credentials, firestore_async
from google.cloud.firestore_v1 import GeoPoint
from google.cloud.firestore_v1.base_document import BaseDocumentReference
from google.cloud.firestore_v1.base_query import FieldFilter

from database.driver import (
    CREATED_AT_FIELD,
    Driver,
    FILTER_VALUE_TYPES,
    ID_FIELD,
    Query,
    Record,
    UPDATED_AT_FIELD,
)
from database.errors import NotConnectedError, UnsupportedFilterValueError
from database.identifiers import generate_id, utc_now_iso
from shared.config import (
    get_default_collection,
    get_firebase_credentials,
    load_environment,
)

logger = logging.getLogger(__name__)

DEFAULT_APP_NAME = "[DEFAULT]"

# Firestore-native values (sync and async document references included)
FIRESTORE_FILTER_VALUE_TYPES = FILTER_VALUE_TYPES + (GeoPoint, BaseDocumentReference)


@dataclass
class FirestoreDriverOptions:
    """
    Configuration for FirestoreDriver.

    credentials accepts a service-account dict, a path to a key file, or
    None to fall back to Application Default Credentials.
    """
    collection_name: str
    firebase_config: Dict[str, Any] = field(default_factory=dict)
    credentials: Optional[Union[Dict[str, Any], str]] = None
    app_name: str = DEFAULT_APP_NAME
    database_id: Optional[str] = None

    def __post_init__(self):
        if not self.collection_name:
            raise ValueError("collection_name must be a non-empty string")

    @classmethod
    def from_env(cls, collection_name: Optional[str] = None) -> "FirestoreDriverOptions":
        """
        Build options from FIREBASE_ADMIN_KEY, FIREBASE_PROJECT_ID,
        FIRESTORE_DATABASE_ID and FIRESTORE_COLLECTION (.env is honoured).
        """
        load_environment()
        firebase_config: Dict[str, Any] = {}
        project_id = os.getenv("FIREBASE_PROJECT_ID")
        if project_id:
            firebase_config["projectId"] = project_id

        return cls(
            collection_name=collection_name or get_default_collection(),
            firebase_config=firebase_config,
            credentials=get_firebase_credentials(),
            database_id=os.getenv("FIRESTORE_DATABASE_ID") or None,
        )


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


@dataclass(frozen=True)
class FirestoreConnection:
    """Live handles held while the driver is connected."""
    app: Any
    db: Any
    collection_ref: Any


class FirestoreDriver(Driver):
    """
    Schema-less driver over a single Firestore collection.

    Every stored record carries _id, _createdAt and _updatedAt. update() and
    delete() touch matching documents one at a time; a failure part way
    through leaves the earlier documents already changed.
    """

    def __init__(self, options: FirestoreDriverOptions):
        self.options = options
        self._connection: Optional[FirestoreConnection] = None
        logger.info(f"Initialized FirestoreDriver for collection: {options.collection_name}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        if self._connection is None:
            return ConnectionState.DISCONNECTED
        return ConnectionState.CONNECTED

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    @property
    def collection_name(self) -> str:
        return self.options.collection_name

    def _build_credential(self):
        if self.options.credentials is None:
            return None
        return credentials.Certificate(self.options.credentials)

    def _get_or_create_app(self):
        try:
            return firebase_admin.get_app(self.options.app_name)
        except ValueError:
            app = firebase_admin.initialize_app(
                self._build_credential(),
                self.options.firebase_config or None,
                name=self.options.app_name,
            )
            logger.info(f"Firebase Admin SDK initialized (app: {self.options.app_name})")
            return app

    async def connect(self) -> None:
        """
        Initialise the Firebase app and bind the target collection.

        Calling connect() again re-binds the collection. Errors from the SDK
        propagate and leave the driver disconnected.
        """
        try:
            app = self._get_or_create_app()
            db = firestore_async.client(app=app, database_id=self.options.database_id)
            collection_ref = db.collection(self.options.collection_name)
        except Exception as e:
            self._connection = None
            logger.error(f"Failed to connect to Firestore collection {self.collection_name}: {e}")
            raise

        self._connection = FirestoreConnection(app=app, db=db, collection_ref=collection_ref)
        logger.info(f"Connected to Firestore collection: {self.collection_name}")

    async def disconnect(self) -> None:
        """Release local references. Firestore needs no explicit disconnect."""
        self._connection = None
        logger.info(f"Disconnected from Firestore collection: {self.collection_name}")

    def _require_connection(self) -> FirestoreConnection:
        connection = self._connection
        if connection is None:
            raise NotConnectedError()
        return connection

    # ------------------------------------------------------------------
    # Handles (None while disconnected)
    # ------------------------------------------------------------------

    @property
    def app(self):
        return self._connection.app if self._connection else None

    @property
    def firestore(self):
        return self._connection.db if self._connection else None

    @property
    def collection_ref(self):
        return self._connection.collection_ref if self._connection else None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_query(query: Query) -> None:
        for key, value in query.items():
            if not isinstance(value, FIRESTORE_FILTER_VALUE_TYPES):
                raise UnsupportedFilterValueError(key, value)

    def _build_query(self, connection: FirestoreConnection, query: Query):
        """Translate a query dict into chained equality filters."""
        firestore_query = connection.collection_ref
        for key, value in query.items():
            firestore_query = firestore_query.where(filter=FieldFilter(key, "==", value))
        return firestore_query

    async def _find(self, connection: FirestoreConnection, query: Query) -> list:
        """Return document snapshots matching query."""
        self._validate_query(query)
        try:
            firestore_query = self._build_query(connection, query)
            return [snapshot async for snapshot in firestore_query.stream()]
        except Exception as e:
            logger.error(f"Error querying {self.collection_name} with {query}: {e}")
            raise

    # ------------------------------------------------------------------
    # Data operations
    # ------------------------------------------------------------------

    async def set(self, data: Record) -> Record:
        connection = self._require_connection()

        record_id = generate_id()
        now = utc_now_iso()
        record = {
            **data,
            ID_FIELD: record_id,
            CREATED_AT_FIELD: now,
            UPDATED_AT_FIELD: now,
        }

        try:
            await connection.collection_ref.document(record_id).set(record)
        except Exception as e:
            logger.error(f"Error storing record {record_id} in {self.collection_name}: {e}")
            raise

        logger.debug(f"Stored record {record_id} in {self.collection_name}")
        return record

    async def get(self, query: Query) -> List[Record]:
        connection = self._require_connection()
        snapshots = await self._find(connection, query)
        return [snapshot.to_dict() for snapshot in snapshots]

    async def get_one(self, query: Query) -> Optional[Record]:
        connection = self._require_connection()

        record_id = query.get(ID_FIELD)
        if record_id:
            if not isinstance(record_id, str):
                raise UnsupportedFilterValueError(ID_FIELD, record_id)
            try:
                snapshot = await connection.collection_ref.document(record_id).get()
            except Exception as e:
                logger.error(f"Error retrieving record {record_id} from {self.collection_name}: {e}")
                raise
            if snapshot.exists:
                return snapshot.to_dict()
            return None

        results = await self.get(query)
        return results[0] if results else None

    async def update(self, query: Query, data: Record) -> int:
        connection = self._require_connection()

        snapshots = await self._find(connection, query)
        count = 0
        for snapshot in snapshots:
            update_data = {key: value for key, value in data.items() if key != ID_FIELD}
            update_data[UPDATED_AT_FIELD] = utc_now_iso()
            try:
                await snapshot.reference.update(update_data)
            except Exception as e:
                logger.error(
                    f"Error updating record {snapshot.id} in {self.collection_name} "
                    f"after {count} update(s): {e}"
                )
                raise
            count += 1

        logger.info(f"Updated {count} record(s) in {self.collection_name}")
        return count

    async def delete(self, query: Query) -> int:
        connection = self._require_connection()

        snapshots = await self._find(connection, query)
        count = 0
        for snapshot in snapshots:
            try:
                await snapshot.reference.delete()
            except Exception as e:
                logger.error(
                    f"Error deleting record {snapshot.id} from {self.collection_name} "
                    f"after {count} deletion(s): {e}"
                )
                raise
            count += 1

        logger.info(f"Deleted {count} record(s) from {self.collection_name}")
        return count

    async def exists(self, query: Query) -> bool:
        self._require_connection()
        return await super().exists(query)

    async def count(self, query: Query) -> int:
        self._require_connection()
        return await super().count(query)

    async def clear(self) -> int:
        self._require_connection()
        removed = await super().clear()
        logger.info(f"Cleared collection {self.collection_name}")
        return removed
