"""Medication log endpoints."""

from fastapi import APIRouter, Request, Response, status

from welltrack.core.rate_limit import write_limit
from welltrack.dependencies import CurrentUserId, DatabaseSession, Dates, Pagination
from welltrack.schemas.logs import MedicationLogCreate, MedicationLogResponse, MedicationLogUpdate
from welltrack.services.common import parse_id
from welltrack.services.medication_log_service import MedicationLogService

router = APIRouter()


@router.get("", response_model=list[MedicationLogResponse], summary="List medication logs")
async def list_medication_logs(
    user_id: CurrentUserId,
    db: DatabaseSession,
    dates: Dates,
    page: Pagination,
) -> list[MedicationLogResponse]:
    """The user's medication logs, newest first by creation time, each with its medication."""
    return await MedicationLogService(db).list_logs(user_id, dates.start, dates.end, page.limit, page.offset)


@router.post(
    "",
    response_model=MedicationLogResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log a medication dose",
)
@write_limit
async def create_medication_log(
    request: Request,
    data: MedicationLogCreate,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> MedicationLogResponse:
    return await MedicationLogService(db).create_log(user_id, data)


@router.patch("/{log_id}", response_model=MedicationLogResponse, summary="Update a medication log")
@write_limit
async def update_medication_log(
    request: Request,
    log_id: str,
    data: MedicationLogUpdate,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> MedicationLogResponse:
    return await MedicationLogService(db).update_log(user_id, parse_id(log_id, "Medication log"), data)


@router.delete(
    "/{log_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a medication log",
)
@write_limit
async def delete_medication_log(
    request: Request,
    log_id: str,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> Response:
    await MedicationLogService(db).delete_log(user_id, parse_id(log_id, "Medication log"))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
