"""Folktale service layer: browsing, ratings, comments and bookmarks."""

from __future__ import annotations

import logging
import random

from app.core.logging_safety import safe_log_identifier
from app.domain.ratings import average_rating
from app.errors import ApiError, not_found
from app.repositories.memory import (
    BookmarkRecord,
    CommentRecord,
    DuplicateRecordError,
    FolktaleRecord,
    InMemoryStore,
)
from app.schemas.auth import MessageResponse, Principal
from app.schemas.bookmark import Bookmark, BookmarkedFolktale
from app.schemas.comment import Comment
from app.schemas.folktale import Folktale, FolktalePage, Rating

logger = logging.getLogger(__name__)

POPULAR_LIMIT = 5


def to_folktale(record: FolktaleRecord) -> Folktale:
    return Folktale(
        id=record.id,
        title=record.title,
        content=record.content,
        region=record.region,
        genre=record.genre,
        age_group=record.age_group,
        image_url=record.image_url,
        audio_url=record.audio_url,
        views=record.views,
        ratings=[Rating(user_id=entry.user_id, rating=entry.rating) for entry in record.ratings],
        average_rating=average_rating(entry.rating for entry in record.ratings),
        created_by=record.created_by,
        updated_by=record.updated_by,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def to_comment(record: CommentRecord, store: InMemoryStore) -> Comment:
    author = store.users.get(record.user_id)
    return Comment(
        id=record.id,
        folktale_id=record.folktale_id,
        user_id=record.user_id,
        username=author.username if author is not None else None,
        content=record.content,
        created_at=record.created_at,
    )


def _folktale_not_found() -> ApiError:
    return not_found("Folktale not found")


class FolktaleService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def list_folktales(
        self,
        *,
        page: int,
        limit: int,
        region: str | None = None,
        genre: str | None = None,
        age_group: str | None = None,
        search: str | None = None,
    ) -> FolktalePage:
        records, total = self._store.list_folktales(
            region=region,
            genre=genre,
            age_group=age_group,
            search=search,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return FolktalePage(folktales=[to_folktale(record) for record in records], total=total)

    def popular_folktales(self) -> list[Folktale]:
        return [to_folktale(record) for record in self._store.most_viewed_folktales(POPULAR_LIMIT)]

    def random_folktale(self) -> Folktale:
        records = list(self._store.folktales.values())
        if not records:
            raise _folktale_not_found()
        return to_folktale(random.choice(records))

    def view_folktale(self, *, folktale_id: str) -> Folktale:
        record = self._store.increment_views(folktale_id)
        if record is None:
            raise _folktale_not_found()
        return to_folktale(record)

    def rate_folktale(self, *, principal: Principal, folktale_id: str, rating: int) -> Folktale:
        try:
            record = self._store.add_rating(folktale_id=folktale_id, user_id=principal.id, rating=rating)
        except DuplicateRecordError as exc:
            raise ApiError(
                status_code=409,
                code="already_rated",
                message="You have already rated this folktale",
            ) from exc
        if record is None:
            raise _folktale_not_found()

        logger.info(
            "folktale.rated folktale_id=%s user_id=%s rating=%d",
            safe_log_identifier(folktale_id, prefix="fid"),
            safe_log_identifier(principal.id, prefix="uid"),
            rating,
        )
        return to_folktale(record)

    def add_comment(self, *, principal: Principal, folktale_id: str, content: str) -> Comment:
        try:
            record = self._store.create_comment(folktale_id=folktale_id, user_id=principal.id, content=content)
        except DuplicateRecordError as exc:
            raise ApiError(
                status_code=409,
                code="already_commented",
                message="You have already commented on this folktale",
            ) from exc
        if record is None:
            raise _folktale_not_found()
        return to_comment(record, self._store)

    def list_comments(self, *, folktale_id: str) -> list[Comment]:
        return [to_comment(record, self._store) for record in self._store.list_comments_for_folktale(folktale_id)]

    def add_bookmark(self, *, principal: Principal, folktale_id: str) -> Bookmark:
        try:
            record = self._store.create_bookmark(user_id=principal.id, folktale_id=folktale_id)
        except DuplicateRecordError as exc:
            raise ApiError(
                status_code=409,
                code="already_bookmarked",
                message="Folktale already bookmarked",
            ) from exc
        if record is None:
            raise _folktale_not_found()
        return self._to_bookmark(record)

    def list_bookmarks(self, *, principal: Principal) -> list[Bookmark]:
        return [self._to_bookmark(record) for record in self._store.list_bookmarks_for_user(principal.id)]

    def remove_bookmark(self, *, principal: Principal, folktale_id: str) -> MessageResponse:
        if not self._store.delete_bookmark(user_id=principal.id, folktale_id=folktale_id):
            raise not_found("Bookmark not found")
        return MessageResponse(message="Bookmark removed")

    def _to_bookmark(self, record: BookmarkRecord) -> Bookmark:
        folktale = self._store.get_folktale(record.folktale_id)
        return Bookmark(
            id=record.id,
            folktale_id=record.folktale_id,
            created_at=record.created_at,
            folktale=(
                BookmarkedFolktale(
                    id=folktale.id,
                    title=folktale.title,
                    region=folktale.region,
                    genre=folktale.genre,
                    image_url=folktale.image_url,
                    audio_url=folktale.audio_url,
                )
                if folktale is not None
                else None
            ),
        )
