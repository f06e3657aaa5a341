# staffbook/api/exports.py
import io
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from staffbook.core.exceptions import StoreUnavailableError
from staffbook.core.store import DocumentStore, get_store
from staffbook.services.exports import (
    ExportFile,
    ExportFormat,
    ExportKind,
    build_allowance_report,
    export_data,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/export", tags=["export"])


def _download(export: ExportFile) -> StreamingResponse:
    return StreamingResponse(
        io.BytesIO(export.content),
        media_type=export.media_type,
        headers={"Content-Disposition": f"attachment; filename={export.filename}"},
    )


@router.get("/allowances/monthly-report")
async def allowance_monthly_report(store: DocumentStore = Depends(get_store)):
    try:
        export = await build_allowance_report(store)
    except StoreUnavailableError as e:
        logger.error(f"Allowance report failed: {e}")
        raise HTTPException(503, "Error exporting data")
    return _download(export)


@router.get("/{kind}")
async def export_collection(
    kind: ExportKind,
    format: ExportFormat = Query(default=ExportFormat.XLSX),
    store: DocumentStore = Depends(get_store),
):
    try:
        export = await export_data(kind, store, format)
    except StoreUnavailableError as e:
        logger.error(f"Export of {kind.value} failed: {e}")
        raise HTTPException(503, "Error exporting data")
    return _download(export)
