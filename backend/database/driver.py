"""
Backend-neutral document store contract.

Applications talk to a Driver so the storage engine behind it (Firestore,
another NoSQL store, ...) can be swapped without touching calling code.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

# Reserved fields stamped onto every stored record
ID_FIELD = "_id"
CREATED_AT_FIELD = "_createdAt"
UPDATED_AT_FIELD = "_updatedAt"

FilterValue = Union[str, int, float, bool, None, datetime, bytes, list, dict]
FILTER_VALUE_TYPES = (str, int, float, bool, type(None), datetime, bytes, list, dict)

Record = Dict[str, Any]
Query = Dict[str, FilterValue]


class Driver(ABC):
    """
    Uniform async CRUD contract over one schema-less collection.

    Implementations must raise NotConnectedError from every data operation
    while disconnected, and must return None / 0 rather than raising when
    nothing matches.
    """

    @abstractmethod
    async def connect(self) -> None:
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        ...

    @abstractmethod
    async def set(self, data: Record) -> Record:
        """Insert a new record and return it with its reserved fields."""

    @abstractmethod
    async def get(self, query: Query) -> List[Record]:
        """Return every record matching all key/value pairs in query."""

    @abstractmethod
    async def get_one(self, query: Query) -> Optional[Record]:
        """Return one matching record, or None."""

    @abstractmethod
    async def update(self, query: Query, data: Record) -> int:
        """Merge data into every matching record and return how many changed."""

    @abstractmethod
    async def delete(self, query: Query) -> int:
        """Remove every matching record and return how many were removed."""

    async def exists(self, query: Query) -> bool:
        return await self.get_one(query) is not None

    async def count(self, query: Query) -> int:
        return len(await self.get(query))

    async def clear(self) -> int:
        """Remove every record in the bound collection."""
        return await self.delete({})

    async def __aenter__(self) -> "Driver":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()
