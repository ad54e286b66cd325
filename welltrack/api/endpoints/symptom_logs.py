"""Symptom log endpoints."""

from fastapi import APIRouter, Request, Response, status

from welltrack.core.rate_limit import write_limit
from welltrack.dependencies import CurrentUserId, DatabaseSession, Dates, Pagination
from welltrack.schemas.logs import SymptomLogCreate, SymptomLogResponse, SymptomLogUpdate
from welltrack.services.common import parse_id
from welltrack.services.symptom_log_service import SymptomLogService

router = APIRouter()


@router.get("", response_model=list[SymptomLogResponse], summary="List symptom logs")
async def list_symptom_logs(
    user_id: CurrentUserId,
    db: DatabaseSession,
    dates: Dates,
    page: Pagination,
) -> list[SymptomLogResponse]:
    """The user's symptom logs, newest first, each with its symptom."""
    return await SymptomLogService(db).list_logs(user_id, dates.start, dates.end, page.limit, page.offset)


@router.post(
    "",
    response_model=SymptomLogResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log a symptom",
)
@write_limit
async def create_symptom_log(
    request: Request,
    data: SymptomLogCreate,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> SymptomLogResponse:
    return await SymptomLogService(db).create_log(user_id, data)


@router.patch("/{log_id}", response_model=SymptomLogResponse, summary="Update a symptom log")
@write_limit
async def update_symptom_log(
    request: Request,
    log_id: str,
    data: SymptomLogUpdate,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> SymptomLogResponse:
    return await SymptomLogService(db).update_log(user_id, parse_id(log_id, "Symptom log"), data)


@router.delete(
    "/{log_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a symptom log",
)
@write_limit
async def delete_symptom_log(
    request: Request,
    log_id: str,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> Response:
    await SymptomLogService(db).delete_log(user_id, parse_id(log_id, "Symptom log"))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
