# staffbook/tasks/import_tasks.py

import json
import logging
from typing import Any, Dict, Type

from staffbook.core.exceptions import PersistenceError, StoreUnavailableError
from staffbook.core.store import DocumentStore
from staffbook.schemas.canonical import (
    AllowanceCanonical,
    CanonicalRecord,
    EmployeeCanonical,
    HolidayCanonical,
    ShiftCanonical,
)
from staffbook.schemas.registry import ImportableType, get_schema
from staffbook.schemas.validation import ImportResult, RawRow, ValidationOutcome

logger = logging.getLogger(__name__)

CANONICAL_MODELS: Dict[ImportableType, Type[CanonicalRecord]] = {
    ImportableType.EMPLOYEE: EmployeeCanonical,
    ImportableType.SHIFT: ShiftCanonical,
    ImportableType.HOLIDAY: HolidayCanonical,
    ImportableType.ALLOWANCE: AllowanceCanonical,
}


def normalize_to_canonical(row: RawRow, import_type) -> Dict[str, Any]:
    """
    Turn a validated spreadsheet row into the record stored for its type.
    Types without a canonical model (companies) are stored as-is.
    """
    model = CANONICAL_MODELS.get(ImportableType(import_type))
    if model is None:
        return dict(row)
    return model.model_validate(row).model_dump()


async def run_import(store: DocumentStore, outcome: ValidationOutcome, import_type) -> ImportResult:
    """
    Persist every valid row, one at a time and in file order.

    A row the store rejects becomes a warning and the loop moves on. If the
    store itself goes away, or anything else escapes the loop, the whole run
    is reported as failed.
    """
    schema = get_schema(import_type)
    errors = outcome.error_messages
    success_count = 0
    warnings = []

    logger.info(f"Importing {len(outcome.valid)} {schema.collection} rows ({len(errors)} rejected by validation)")

    try:
        for position, row in enumerate(outcome.valid, start=1):
            record = normalize_to_canonical(row, schema.type)
            try:
                await store.create(schema.collection, record)
                success_count += 1
            except PersistenceError as e:
                logger.error(f"Failed to import valid row {position} into {schema.collection}: {e}")
                warnings.append(f"Failed to import row: {json.dumps(row, default=str)}")
    except StoreUnavailableError:
        logger.exception(f"Import into {schema.collection} aborted, store unavailable")
        return ImportResult(success=0, errors=["Failed to process import"], warnings=[])
    except Exception:
        logger.exception(f"Import into {schema.collection} aborted")
        return ImportResult(success=0, errors=["Failed to process import"], warnings=[])

    logger.info(f"Imported {success_count}/{len(outcome.valid)} {schema.collection} rows")
    return ImportResult(success=success_count, errors=errors, warnings=warnings)
