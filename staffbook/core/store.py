# staffbook/core/store.py
"""
Document store client used by the import executor and export assembler.

Only two operations are needed by the pipeline: ``create`` and ``get_all``.
Failures are signalled with ``PersistenceError`` (one record rejected) or
``StoreUnavailableError`` (the store itself is gone).
"""
import logging
from typing import Any, Dict, List, Optional, Protocol

from pydantic_core import PydanticSerializationError, to_jsonable_python
from tortoise.exceptions import (
    BaseORMException,
    ConfigurationError,
    DBConnectionError,
    IntegrityError,
    OperationalError,
)

from staffbook.core.exceptions import PersistenceError, StoreUnavailableError
from staffbook.models.db import Document

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    async def create(self, collection: str, record: Dict[str, Any]) -> str:
        raise NotImplementedError

    async def get_all(self, collection: str, order_field: Optional[str] = None) -> List[Dict[str, Any]]:
        """Newest-first when ``order_field`` is given, insertion order otherwise."""
        raise NotImplementedError


def order_documents(docs: List[Dict[str, Any]], order_field: Optional[str]) -> List[Dict[str, Any]]:
    if not order_field:
        return docs
    present = [d for d in docs if d.get(order_field) not in (None, "")]
    missing = [d for d in docs if d.get(order_field) in (None, "")]
    # Stored dates are ISO strings, so string order is chronological
    present.sort(key=lambda d: str(d[order_field]), reverse=True)
    return present + missing


class TortoiseDocumentStore:
    """Keeps every collection in the single ``documents`` table."""

    async def create(self, collection: str, record: Dict[str, Any]) -> str:
        try:
            data = to_jsonable_python(record)
        except PydanticSerializationError as e:
            raise PersistenceError(f"Record is not serializable: {e}") from e

        try:
            doc = await Document.create(collection=collection, data=data)
        except IntegrityError as e:
            raise PersistenceError(str(e)) from e
        except (DBConnectionError, ConfigurationError, OperationalError, ConnectionError) as e:
            logger.error(f"Document store unavailable while writing to {collection}: {e}")
            raise StoreUnavailableError(str(e)) from e
        except BaseORMException as e:
            raise PersistenceError(str(e)) from e

        return str(doc.id)

    async def get_all(self, collection: str, order_field: Optional[str] = None) -> List[Dict[str, Any]]:
        try:
            docs = await Document.filter(collection=collection).order_by("id")
        except (DBConnectionError, ConfigurationError, OperationalError, ConnectionError) as e:
            logger.error(f"Document store unavailable while reading {collection}: {e}")
            raise StoreUnavailableError(str(e)) from e

        records = [{"id": str(doc.id), **doc.data} for doc in docs]
        return order_documents(records, order_field)


def get_store() -> DocumentStore:
    # FastAPI dependency; tests override it with an in-memory store
    return TortoiseDocumentStore()
