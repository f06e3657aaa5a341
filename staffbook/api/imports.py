# staffbook/api/imports.py

import io
import logging
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import StreamingResponse

from staffbook.core.config import settings
from staffbook.core.exceptions import EmptyFileError, ParseError
from staffbook.core.store import DocumentStore, get_store
from staffbook.schemas.registry import ImportSchema, get_schema, list_schemas
from staffbook.schemas.validation import (
    DryRunSummary,
    ImportPreview,
    ImportResult,
    RowValidationResult,
)
from staffbook.schemas.validators import FIRST_DATA_ROW, check_row, validate_rows
from staffbook.services.exports import ExportFormat, build_template
from staffbook.tasks.import_tasks import normalize_to_canonical, run_import
from staffbook.utils.parser import ParsedTable, parse_table

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/import", tags=["import"])


def _schema_or_400(import_type: str) -> ImportSchema:
    try:
        return get_schema(import_type)
    except ValueError:
        raise HTTPException(400, f"Unsupported import type: {import_type}")


async def _read_table(file: UploadFile) -> ParsedTable:
    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(413, "File is too large.")
    try:
        return parse_table(content, file.filename)
    except (ParseError, EmptyFileError) as e:
        logger.warning(f"Rejected upload {file.filename}: {e}")
        raise HTTPException(400, str(e))


@router.get("/types", response_model=List[ImportSchema])
async def list_import_types():
    return list_schemas()


@router.get("/{import_type}/template")
async def download_template(import_type: str, format: ExportFormat = Query(default=ExportFormat.XLSX)):
    schema = _schema_or_400(import_type)
    export = build_template(schema.type, format)
    return StreamingResponse(
        io.BytesIO(export.content),
        media_type=export.media_type,
        headers={"Content-Disposition": f"attachment; filename={export.filename}"},
    )


@router.post("/{import_type}/preview", response_model=ImportPreview)
async def preview_import(import_type: str, file: UploadFile = File(...)):
    schema = _schema_or_400(import_type)
    table = await _read_table(file)

    row_results: List[RowValidationResult] = []
    for idx, row in enumerate(table.rows, start=FIRST_DATA_ROW):
        issues = check_row(row, schema.type, idx, settings.STRICT_HOLIDAY_DATES)
        row_results.append(RowValidationResult(
            row_number=idx,
            status="error" if issues else "valid",
            issues=issues,
            normalized_data=None if issues else normalize_to_canonical(row, schema.type),
        ))

    will_succeed = sum(1 for r in row_results if r.status == "valid")
    summary = DryRunSummary(
        total_rows=len(table.rows),
        will_succeed=will_succeed,
        will_fail=len(table.rows) - will_succeed,
        issues=[issue for r in row_results for issue in r.issues],
    )

    return ImportPreview(
        type=schema.type.value,
        filename=file.filename,
        headers=table.headers,
        total_rows=len(table.rows),
        preview_rows=table.rows[:settings.PREVIEW_ROWS],
        summary=summary,
        rows=row_results,
    )


@router.post("/{import_type}", response_model=ImportResult)
async def import_file(
    import_type: str,
    file: UploadFile = File(...),
    store: DocumentStore = Depends(get_store),
):
    schema = _schema_or_400(import_type)
    table = await _read_table(file)

    outcome = validate_rows(table.rows, schema.type, strict_dates=settings.STRICT_HOLIDAY_DATES)
    return await run_import(store, outcome, schema.type)
