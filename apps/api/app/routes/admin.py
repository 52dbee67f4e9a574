"""Admin content-management routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from app.routes.dependencies import get_admin_folktale_service, get_admin_principal
from app.schemas.auth import Principal
from app.schemas.error import ErrorResponse
from app.schemas.folktale import (
    AdminFolktaleList,
    DeleteFolktaleResponse,
    FolktaleEnvelope,
    FolktaleInput,
)
from app.services.admin_folktales import AdminFolktaleService

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)


@router.post("/folktales", response_model=FolktaleEnvelope, status_code=status.HTTP_201_CREATED)
async def create_folktale(
    payload: FolktaleInput,
    admin: Annotated[Principal, Depends(get_admin_principal)],
    service: Annotated[AdminFolktaleService, Depends(get_admin_folktale_service)],
) -> FolktaleEnvelope:
    return service.create_folktale(admin=admin, payload=payload)


@router.get("/folktales", response_model=AdminFolktaleList)
async def list_folktales(
    _: Annotated[Principal, Depends(get_admin_principal)],
    service: Annotated[AdminFolktaleService, Depends(get_admin_folktale_service)],
) -> AdminFolktaleList:
    return service.list_folktales()


@router.put(
    "/folktales/{folktaleId}",
    response_model=FolktaleEnvelope,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_folktale(
    folktale_id: Annotated[str, Path(alias="folktaleId")],
    payload: FolktaleInput,
    admin: Annotated[Principal, Depends(get_admin_principal)],
    service: Annotated[AdminFolktaleService, Depends(get_admin_folktale_service)],
) -> FolktaleEnvelope:
    return service.update_folktale(admin=admin, folktale_id=folktale_id, payload=payload)


@router.delete(
    "/folktales/{folktaleId}",
    response_model=DeleteFolktaleResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def delete_folktale(
    folktale_id: Annotated[str, Path(alias="folktaleId")],
    admin: Annotated[Principal, Depends(get_admin_principal)],
    service: Annotated[AdminFolktaleService, Depends(get_admin_folktale_service)],
) -> DeleteFolktaleResponse:
    return service.delete_folktale(admin=admin, folktale_id=folktale_id)
