"""In-memory document store used by the API and tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
import threading
from typing import Any
from typing import Literal

from app.domain.identifiers import new_object_id

CascadeFailpointStage = Literal["after_comments", "after_bookmarks", "after_folktale"]

_CASCADE_FAILPOINT_STAGES = ("after_comments", "after_bookmarks", "after_folktale")
_FOLKTALE_MUTABLE_FIELDS = frozenset(
    {"title", "content", "region", "genre", "age_group", "image_url", "audio_url"}
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DuplicateRecordError(Exception):
    """Raised when a write would violate a uniqueness constraint."""

    def __init__(self, constraint: str) -> None:
        self.constraint = constraint
        super().__init__(f"Duplicate key for constraint {constraint}")


@dataclass(slots=True)
class UserRecord:
    id: str
    username: str
    email: str
    password_hash: str
    is_admin: bool = False
    is_verified: bool = False
    otp: str | None = None
    otp_expires_at: datetime | None = None
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(slots=True)
class RatingRecord:
    user_id: str
    rating: int
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(slots=True)
class FolktaleRecord:
    id: str
    title: str
    content: str
    region: str
    genre: str
    age_group: str
    image_url: str
    audio_url: str | None = None
    views: int = 0
    ratings: list[RatingRecord] = field(default_factory=list)
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime | None = None


@dataclass(slots=True)
class CommentRecord:
    id: str
    folktale_id: str
    user_id: str
    content: str
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(slots=True)
class BookmarkRecord:
    id: str
    user_id: str
    folktale_id: str
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(slots=True)
class CascadeDeleteResult:
    folktale_id: str
    comments_removed: int
    bookmarks_removed: int


@dataclass(slots=True)
class InMemoryStore:
    """Single logical datastore; multi-record writes run under one lock."""

    users: dict[str, UserRecord] = field(default_factory=dict)
    folktales: dict[str, FolktaleRecord] = field(default_factory=dict)
    comments: dict[str, CommentRecord] = field(default_factory=dict)
    bookmarks: dict[str, BookmarkRecord] = field(default_factory=dict)
    user_write_count: int = 0
    content_write_count: int = 0
    user_lookup_failure_message: str | None = None
    cascade_delete_failpoint_stage: CascadeFailpointStage | None = None
    cascade_delete_failpoint_message: str = "Injected cascade delete failure"
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    # Users

    def create_user(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        is_admin: bool = False,
        is_verified: bool = False,
    ) -> UserRecord:
        with self._lock:
            if self.get_user_by_email(email) is not None:
                raise DuplicateRecordError("users.email")
            if self.get_user_by_username(username) is not None:
                raise DuplicateRecordError("users.username")
            user = UserRecord(
                id=new_object_id(),
                username=username,
                email=email,
                password_hash=password_hash,
                is_admin=is_admin,
                is_verified=is_verified,
            )
            self.users[user.id] = user
            self.user_write_count += 1
            return user

    def get_user(self, user_id: str) -> UserRecord | None:
        if self.user_lookup_failure_message is not None:
            message = self.user_lookup_failure_message
            self.user_lookup_failure_message = None
            raise RuntimeError(message)
        return self.users.get(user_id)

    def get_user_by_email(self, email: str) -> UserRecord | None:
        for user in self.users.values():
            if user.email == email:
                return user
        return None

    def get_user_by_username(self, username: str) -> UserRecord | None:
        for user in self.users.values():
            if user.username == username:
                return user
        return None

    def set_user_otp(self, *, user: UserRecord, otp: str | None, expires_at: datetime | None) -> None:
        user.otp = otp
        user.otp_expires_at = expires_at
        self.user_write_count += 1

    def mark_user_verified(self, *, user: UserRecord) -> None:
        user.is_verified = True
        user.otp = None
        user.otp_expires_at = None
        self.user_write_count += 1

    def update_user_profile(
        self,
        *,
        user: UserRecord,
        username: str | None = None,
        password_hash: str | None = None,
    ) -> UserRecord:
        with self._lock:
            if username is not None and username != user.username:
                existing = self.get_user_by_username(username)
                if existing is not None and existing.id != user.id:
                    raise DuplicateRecordError("users.username")
                user.username = username
            if password_hash is not None:
                user.password_hash = password_hash
            self.user_write_count += 1
            return user

    def grant_admin(self, user_id: str) -> UserRecord | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        user.is_admin = True
        self.user_write_count += 1
        return user

    # Folktales

    def create_folktale(self, *, created_by: str | None = None, **fields: Any) -> FolktaleRecord:
        unknown = set(fields) - _FOLKTALE_MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown folktale fields: {sorted(unknown)}")
        with self._lock:
            folktale = FolktaleRecord(id=new_object_id(), created_by=created_by, **fields)
            self.folktales[folktale.id] = folktale
            self.content_write_count += 1
            return folktale

    def get_folktale(self, folktale_id: str) -> FolktaleRecord | None:
        return self.folktales.get(folktale_id)

    def update_folktale(self, folktale_id: str, *, updated_by: str | None = None, **fields: Any) -> FolktaleRecord | None:
        unknown = set(fields) - _FOLKTALE_MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown folktale fields: {sorted(unknown)}")
        with self._lock:
            folktale = self.folktales.get(folktale_id)
            if folktale is None:
                return None
            for name, value in fields.items():
                setattr(folktale, name, value)
            folktale.updated_by = updated_by
            folktale.updated_at = _utcnow()
            self.content_write_count += 1
            return folktale

    def list_folktales(
        self,
        *,
        region: str | None = None,
        genre: str | None = None,
        age_group: str | None = None,
        search: str | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> tuple[list[FolktaleRecord], int]:
        needle = search.casefold() if search else None
        matches = [
            record
            for record in self.folktales.values()
            if (region is None or record.region == region)
            and (genre is None or record.genre == genre)
            and (age_group is None or record.age_group == age_group)
            and (needle is None or needle in record.title.casefold())
        ]
        matches.sort(key=lambda record: record.created_at)
        end = None if limit is None else offset + limit
        return matches[offset:end], len(matches)

    def most_viewed_folktales(self, limit: int) -> list[FolktaleRecord]:
        records = sorted(self.folktales.values(), key=lambda record: record.views, reverse=True)
        return records[:limit]

    def increment_views(self, folktale_id: str) -> FolktaleRecord | None:
        with self._lock:
            folktale = self.folktales.get(folktale_id)
            if folktale is None:
                return None
            folktale.views += 1
            return folktale

    def add_rating(self, *, folktale_id: str, user_id: str, rating: int) -> FolktaleRecord | None:
        """Append a rating; one rating per user per folktale is enforced here."""
        with self._lock:
            folktale = self.folktales.get(folktale_id)
            if folktale is None:
                return None
            if any(entry.user_id == user_id for entry in folktale.ratings):
                raise DuplicateRecordError("folktales.ratings.user_id")
            folktale.ratings.append(RatingRecord(user_id=user_id, rating=rating))
            self.content_write_count += 1
            return folktale

    # Comments

    def create_comment(self, *, folktale_id: str, user_id: str, content: str) -> CommentRecord | None:
        """Insert a comment; returns ``None`` when the folktale does not exist."""
        with self._lock:
            if folktale_id not in self.folktales:
                return None
            if any(
                record.folktale_id == folktale_id and record.user_id == user_id
                for record in self.comments.values()
            ):
                raise DuplicateRecordError("comments.folktale_id_user_id")
            comment = CommentRecord(
                id=new_object_id(),
                folktale_id=folktale_id,
                user_id=user_id,
                content=content,
            )
            self.comments[comment.id] = comment
            self.content_write_count += 1
            return comment

    def list_comments_for_folktale(self, folktale_id: str) -> list[CommentRecord]:
        comments = [record for record in self.comments.values() if record.folktale_id == folktale_id]
        comments.sort(key=lambda record: record.created_at)
        return comments

    # Bookmarks

    def create_bookmark(self, *, user_id: str, folktale_id: str) -> BookmarkRecord | None:
        with self._lock:
            if folktale_id not in self.folktales:
                return None
            if self.get_bookmark(user_id=user_id, folktale_id=folktale_id) is not None:
                raise DuplicateRecordError("bookmarks.user_id_folktale_id")
            bookmark = BookmarkRecord(id=new_object_id(), user_id=user_id, folktale_id=folktale_id)
            self.bookmarks[bookmark.id] = bookmark
            self.content_write_count += 1
            return bookmark

    def get_bookmark(self, *, user_id: str, folktale_id: str) -> BookmarkRecord | None:
        for record in self.bookmarks.values():
            if record.user_id == user_id and record.folktale_id == folktale_id:
                return record
        return None

    def list_bookmarks_for_user(self, user_id: str) -> list[BookmarkRecord]:
        bookmarks = [record for record in self.bookmarks.values() if record.user_id == user_id]
        bookmarks.sort(key=lambda record: record.created_at)
        return bookmarks

    def delete_bookmark(self, *, user_id: str, folktale_id: str) -> bool:
        with self._lock:
            bookmark = self.get_bookmark(user_id=user_id, folktale_id=folktale_id)
            if bookmark is None:
                return False
            del self.bookmarks[bookmark.id]
            self.content_write_count += 1
            return True

    # Cascading delete

    def delete_folktale_cascade(self, folktale_id: str) -> CascadeDeleteResult | None:
        """Remove a folktale with its comments and bookmarks as one unit.

        Dependents go first and the parent last, under the store lock. Only the
        records being removed are captured, and exactly those are put back if
        any stage fails. Returns ``None`` when the folktale does not exist.
        """
        with self._lock:
            folktale = self.folktales.get(folktale_id)
            if folktale is None:
                return None

            removed_comments = {
                key: record for key, record in self.comments.items() if record.folktale_id == folktale_id
            }
            removed_bookmarks = {
                key: record for key, record in self.bookmarks.items() if record.folktale_id == folktale_id
            }
            previous_content_write_count = self.content_write_count

            try:
                for comment_id in removed_comments:
                    del self.comments[comment_id]
                self._maybe_raise_cascade_failpoint(stage="after_comments")

                for bookmark_id in removed_bookmarks:
                    del self.bookmarks[bookmark_id]
                self._maybe_raise_cascade_failpoint(stage="after_bookmarks")

                del self.folktales[folktale_id]
                self.content_write_count += 1
                self._maybe_raise_cascade_failpoint(stage="after_folktale")
            except Exception:
                self.folktales[folktale_id] = folktale
                self.comments.update(removed_comments)
                self.bookmarks.update(removed_bookmarks)
                self.content_write_count = previous_content_write_count
                raise

            return CascadeDeleteResult(
                folktale_id=folktale_id,
                comments_removed=len(removed_comments),
                bookmarks_removed=len(removed_bookmarks),
            )

    def _maybe_raise_cascade_failpoint(self, *, stage: CascadeFailpointStage) -> None:
        if stage not in _CASCADE_FAILPOINT_STAGES:
            return
        if self.cascade_delete_failpoint_stage != stage:
            return

        self.cascade_delete_failpoint_stage = None
        raise RuntimeError(self.cascade_delete_failpoint_message)
