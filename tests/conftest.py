from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

import pytest

from staffbook.core.exceptions import PersistenceError, StoreUnavailableError
from staffbook.core.store import order_documents


class InMemoryDocumentStore:
    def __init__(
        self,
        collections: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        reject: Optional[Callable[[str, Dict[str, Any]], bool]] = None,
        unavailable: bool = False,
    ):
        self.collections: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self._id = 0
        for name, docs in (collections or {}).items():
            for doc in docs:
                self._id += 1
                self.collections[name].append({"id": str(self._id), **doc})
        self.reject = reject
        self.unavailable = unavailable
        self.create_calls: List[str] = []
        self.fetched: List[str] = []

    async def create(self, collection: str, record: Dict[str, Any]) -> str:
        self.create_calls.append(collection)
        if self.unavailable:
            raise StoreUnavailableError("store is offline")
        if self.reject is not None and self.reject(collection, record):
            raise PersistenceError("record rejected")
        self._id += 1
        self.collections[collection].append({"id": str(self._id), **record})
        return str(self._id)

    async def get_all(self, collection: str, order_field: Optional[str] = None) -> List[Dict[str, Any]]:
        if self.unavailable:
            raise StoreUnavailableError("store is offline")
        self.fetched.append(collection)
        await asyncio.sleep(0)
        docs = [dict(d) for d in self.collections.get(collection, [])]
        return order_documents(docs, order_field)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def make_store():
    return InMemoryDocumentStore


@pytest.fixture
def employee_rows() -> List[Dict[str, Any]]:
    return [
        {"name": "Asha", "employeeId": "E1", "employeeType": "Staff", "designation": "Clerk"},
        {"name": "Ravi", "employeeId": "E2", "employeeType": "labour", "designation": "Loader"},
        {"name": "Mina", "employeeId": "E3", "employeeType": "STAFF", "designation": "Accountant"},
    ]
