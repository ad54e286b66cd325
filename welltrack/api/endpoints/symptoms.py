"""Symptom endpoints."""

from fastapi import APIRouter, Request, Response, status

from welltrack.core.rate_limit import write_limit
from welltrack.dependencies import CurrentUserId, DatabaseSession
from welltrack.schemas.trackables import SymptomCreate, SymptomResponse, SymptomUpdate
from welltrack.services.common import parse_id
from welltrack.services.symptom_service import SymptomService

router = APIRouter()


@router.get("", response_model=list[SymptomResponse], summary="List symptoms")
async def list_symptoms(user_id: CurrentUserId, db: DatabaseSession) -> list[SymptomResponse]:
    """System symptoms and the user's own, ordered by name."""
    return await SymptomService(db).list_symptoms(user_id)


@router.post(
    "",
    response_model=SymptomResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a custom symptom",
)
@write_limit
async def create_symptom(
    request: Request,
    data: SymptomCreate,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> SymptomResponse:
    return await SymptomService(db).create_symptom(user_id, data)


@router.patch("/{symptom_id}", response_model=SymptomResponse, summary="Update a custom symptom")
@write_limit
async def update_symptom(
    request: Request,
    symptom_id: str,
    data: SymptomUpdate,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> SymptomResponse:
    """System symptoms and other users' symptoms cannot be changed (403)."""
    return await SymptomService(db).update_symptom(user_id, parse_id(symptom_id, "Symptom"), data)


@router.delete(
    "/{symptom_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a custom symptom",
)
@write_limit
async def delete_symptom(
    request: Request,
    symptom_id: str,
    user_id: CurrentUserId,
    db: DatabaseSession,
) -> Response:
    await SymptomService(db).delete_symptom(user_id, parse_id(symptom_id, "Symptom"))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
