"""Import endpoints."""

from typing import Annotated

from fastapi import APIRouter, File, Request, UploadFile

from welltrack.core.exceptions import BadRequestException
from welltrack.core.rate_limit import write_limit
from welltrack.dependencies import CurrentUserId, DatabaseSession
from welltrack.schemas.imports import ImportResult
from welltrack.services.import_service import ImportService, read_upload

router = APIRouter()


@router.post("/csv", response_model=ImportResult, summary="Import a WellTrack CSV file")
@write_limit
async def import_csv(
    request: Request,
    user_id: CurrentUserId,
    db: DatabaseSession,
    file: Annotated[UploadFile | None, File(description="CSV file in the export format")] = None,
) -> ImportResult:
    """
    Import symptom, mood, medication and habit log rows.

    Accepted rows are saved even when other rows fail; the response counts
    imported and skipped rows per section and lists one error per skipped row.
    """
    if file is None:
        raise BadRequestException("No file uploaded")
    text = await read_upload(file)
    return await ImportService(db).import_csv(user_id, text)
