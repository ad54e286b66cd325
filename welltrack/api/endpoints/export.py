"""Export endpoints."""

import asyncio

import structlog
from fastapi import APIRouter, Response

from welltrack.dependencies import CurrentUserId, DatabaseSession, Dates
from welltrack.services.export_service import ExportService, export_filename
from welltrack.services.pdf_service import render_pdf
from welltrack.services.user_service import UserService

logger = structlog.get_logger(__name__)

router = APIRouter()


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


@router.get(
    "/csv",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}}},
    summary="Export logs as CSV",
)
async def export_csv(user_id: CurrentUserId, db: DatabaseSession, dates: Dates) -> Response:
    """
    All of the user's logs in the WellTrack CSV format.

    ``startDate``/``endDate`` bound symptom, mood and habit logs by when they
    were logged and medication logs by when they were recorded.
    """
    content = await ExportService(db).export_csv(user_id, dates.start, dates.end)
    return Response(
        content=content,
        media_type="text/csv",
        headers=_attachment(export_filename("csv")),
    )


@router.get(
    "/pdf",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
    summary="Export logs as a PDF report",
)
async def export_pdf(user_id: CurrentUserId, db: DatabaseSession, dates: Dates) -> Response:
    profile = await UserService(db).get_profile(user_id)
    data = await ExportService(db).collect(user_id, dates.start, dates.end)

    content = await asyncio.to_thread(
        render_pdf,
        data,
        profile.display_name or profile.email,
        dates.start,
        dates.end,
    )
    logger.info("pdf_export_generated", user_id=str(user_id), size=len(content))

    return Response(
        content=content,
        media_type="application/pdf",
        headers=_attachment(export_filename("pdf")),
    )
