"""Admin content-management service layer."""

from __future__ import annotations

import logging

from app.core.logging_safety import safe_log_identifier
from app.domain.identifiers import is_object_id
from app.errors import ApiError, not_found, server_error
from app.repositories.memory import InMemoryStore
from app.schemas.auth import Principal
from app.schemas.folktale import (
    AdminFolktale,
    AdminFolktaleList,
    DeletedFolktaleData,
    DeleteFolktaleResponse,
    FolktaleEnvelope,
    FolktaleInput,
)
from app.services.cascade_delete import (
    CascadingDeleteCoordinator,
    FolktaleNotFound,
    InvalidFolktaleId,
)
from app.services.folktales import to_comment, to_folktale

logger = logging.getLogger(__name__)


def _invalid_id() -> ApiError:
    return ApiError(status_code=400, code="invalid_id", message="Invalid folktale ID format")


def _folktale_fields(payload: FolktaleInput) -> dict[str, str | None]:
    return {
        "title": payload.title,
        "content": payload.content,
        "region": payload.region,
        "genre": payload.genre,
        "age_group": payload.age_group,
        "image_url": str(payload.image_url),
        "audio_url": str(payload.audio_url) if payload.audio_url is not None else None,
    }


class AdminFolktaleService:
    def __init__(self, store: InMemoryStore, coordinator: CascadingDeleteCoordinator) -> None:
        self._store = store
        self._coordinator = coordinator

    def create_folktale(self, *, admin: Principal, payload: FolktaleInput) -> FolktaleEnvelope:
        record = self._store.create_folktale(created_by=admin.id, **_folktale_fields(payload))
        logger.info(
            "folktale.created folktale_id=%s admin_id=%s",
            safe_log_identifier(record.id, prefix="fid"),
            safe_log_identifier(admin.id, prefix="uid"),
        )
        return FolktaleEnvelope(message="Folktale created successfully", data=to_folktale(record))

    def update_folktale(self, *, admin: Principal, folktale_id: str, payload: FolktaleInput) -> FolktaleEnvelope:
        if not is_object_id(folktale_id):
            raise _invalid_id()

        record = self._store.update_folktale(folktale_id, updated_by=admin.id, **_folktale_fields(payload))
        if record is None:
            raise not_found("Folktale not found")
        return FolktaleEnvelope(message="Folktale updated successfully", data=to_folktale(record))

    def list_folktales(self) -> AdminFolktaleList:
        records, _ = self._store.list_folktales()
        data = [
            AdminFolktale(
                **to_folktale(record).model_dump(),
                comments=[
                    to_comment(comment, self._store)
                    for comment in self._store.list_comments_for_folktale(record.id)
                ],
            )
            for record in records
        ]
        message = "Folktales retrieved successfully" if data else "No folktales found"
        return AdminFolktaleList(message=message, data=data)

    def delete_folktale(self, *, admin: Principal, folktale_id: str) -> DeleteFolktaleResponse:
        try:
            outcome = self._coordinator.delete_folktale(folktale_id)
        except Exception as exc:
            logger.exception(
                "admin.delete_failed folktale_id=%s admin_id=%s",
                safe_log_identifier(folktale_id, prefix="fid"),
                safe_log_identifier(admin.id, prefix="uid"),
            )
            raise server_error("Internal server error while deleting folktale") from exc

        if isinstance(outcome, InvalidFolktaleId):
            raise _invalid_id()
        if isinstance(outcome, FolktaleNotFound):
            raise not_found("Folktale not found")

        return DeleteFolktaleResponse(
            message="Folktale and associated comments deleted successfully",
            data=DeletedFolktaleData(id=outcome.folktale_id),
        )
