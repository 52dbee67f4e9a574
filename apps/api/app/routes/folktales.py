"""Public folktale routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from app.routes.dependencies import get_authenticated_principal, get_folktale_service
from app.schemas.auth import MessageResponse, Principal
from app.schemas.bookmark import Bookmark, CreateBookmarkRequest
from app.schemas.comment import Comment, CreateCommentRequest
from app.schemas.error import ErrorResponse
from app.schemas.folktale import Folktale, FolktalePage, RateFolktaleRequest
from app.services.folktales import FolktaleService

router = APIRouter(prefix="/folktales", tags=["Folktales"])

_AUTH_RESPONSES = {401: {"model": ErrorResponse}}
_NOT_FOUND_RESPONSES = {404: {"model": ErrorResponse}}


@router.get("", response_model=FolktalePage)
async def list_folktales(
    service: Annotated[FolktaleService, Depends(get_folktale_service)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    region: str | None = None,
    genre: str | None = None,
    age_group: str | None = None,
    search: str | None = None,
) -> FolktalePage:
    return service.list_folktales(
        page=page,
        limit=limit,
        region=region,
        genre=genre,
        age_group=age_group,
        search=search,
    )


@router.get("/popular", response_model=list[Folktale])
async def popular_folktales(
    service: Annotated[FolktaleService, Depends(get_folktale_service)],
) -> list[Folktale]:
    return service.popular_folktales()


@router.get("/random", response_model=Folktale, responses=_NOT_FOUND_RESPONSES)
async def random_folktale(
    service: Annotated[FolktaleService, Depends(get_folktale_service)],
) -> Folktale:
    return service.random_folktale()


@router.post(
    "/bookmarks",
    response_model=Bookmark,
    status_code=status.HTTP_201_CREATED,
    responses={**_AUTH_RESPONSES, **_NOT_FOUND_RESPONSES, 409: {"model": ErrorResponse}},
)
async def add_bookmark(
    payload: CreateBookmarkRequest,
    principal: Annotated[Principal, Depends(get_authenticated_principal)],
    service: Annotated[FolktaleService, Depends(get_folktale_service)],
) -> Bookmark:
    return service.add_bookmark(principal=principal, folktale_id=payload.folktale_id)


@router.get("/bookmarks", response_model=list[Bookmark], responses=_AUTH_RESPONSES)
async def list_bookmarks(
    principal: Annotated[Principal, Depends(get_authenticated_principal)],
    service: Annotated[FolktaleService, Depends(get_folktale_service)],
) -> list[Bookmark]:
    return service.list_bookmarks(principal=principal)


@router.delete(
    "/bookmarks/{folktaleId}",
    response_model=MessageResponse,
    responses={**_AUTH_RESPONSES, **_NOT_FOUND_RESPONSES},
)
async def remove_bookmark(
    folktale_id: Annotated[str, Path(alias="folktaleId")],
    principal: Annotated[Principal, Depends(get_authenticated_principal)],
    service: Annotated[FolktaleService, Depends(get_folktale_service)],
) -> MessageResponse:
    return service.remove_bookmark(principal=principal, folktale_id=folktale_id)


@router.get("/{folktaleId}", response_model=Folktale, responses=_NOT_FOUND_RESPONSES)
async def get_folktale(
    folktale_id: Annotated[str, Path(alias="folktaleId")],
    service: Annotated[FolktaleService, Depends(get_folktale_service)],
) -> Folktale:
    return service.view_folktale(folktale_id=folktale_id)


@router.post(
    "/{folktaleId}/rate",
    response_model=Folktale,
    responses={**_AUTH_RESPONSES, **_NOT_FOUND_RESPONSES, 409: {"model": ErrorResponse}},
)
async def rate_folktale(
    folktale_id: Annotated[str, Path(alias="folktaleId")],
    payload: RateFolktaleRequest,
    principal: Annotated[Principal, Depends(get_authenticated_principal)],
    service: Annotated[FolktaleService, Depends(get_folktale_service)],
) -> Folktale:
    return service.rate_folktale(principal=principal, folktale_id=folktale_id, rating=payload.rating)


@router.post(
    "/{folktaleId}/comments",
    response_model=Comment,
    status_code=status.HTTP_201_CREATED,
    responses={**_AUTH_RESPONSES, **_NOT_FOUND_RESPONSES, 409: {"model": ErrorResponse}},
)
async def add_comment(
    folktale_id: Annotated[str, Path(alias="folktaleId")],
    payload: CreateCommentRequest,
    principal: Annotated[Principal, Depends(get_authenticated_principal)],
    service: Annotated[FolktaleService, Depends(get_folktale_service)],
) -> Comment:
    return service.add_comment(principal=principal, folktale_id=folktale_id, content=payload.content)


@router.get("/{folktaleId}/comments", response_model=list[Comment])
async def list_comments(
    folktale_id: Annotated[str, Path(alias="folktaleId")],
    service: Annotated[FolktaleService, Depends(get_folktale_service)],
) -> list[Comment]:
    return service.list_comments(folktale_id=folktale_id)
