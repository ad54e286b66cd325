"""Medication endpoints."""

from fastapi import APIRouter, Request, Response, status

from welltrack.core.rate_limit import write_limit
from welltrack.dependencies import CurrentUserId, DatabaseSession
from welltrack.schemas.trackables import MedicationCreate, MedicationResponse, MedicationUpdate
from welltrack.services.common import parse_id
from welltrack.services.medication_service import MedicationService

router = APIRouter()


@router.get("", response_model=list[MedicationResponse], summary="List medications")
async def list_medications(user_id: CurrentUserId, db: DatabaseSession) -> list[MedicationResponse]:
    """The user's active medications, ordered by name."""
    return await MedicationService(db).list_medications(user_id)


@router.post(
    "",
    response_model=MedicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a medication",
)
@write_limit
async def create_medication(
    request: Request,
    data: MedicationCreate,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> MedicationResponse:
    return await MedicationService(db).create_medication(user_id, data)


@router.patch("/{medication_id}", response_model=MedicationResponse, summary="Update a medication")
@write_limit
async def update_medication(
    request: Request,
    medication_id: str,
    data: MedicationUpdate,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> MedicationResponse:
    """Other users' medications cannot be changed (403)."""
    return await MedicationService(db).update_medication(user_id, parse_id(medication_id, "Medication"), data)


@router.delete(
    "/{medication_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a medication",
)
@write_limit
async def delete_medication(
    request: Request,
    medication_id: str,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> Response:
    await MedicationService(db).delete_medication(user_id, parse_id(medication_id, "Medication"))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
