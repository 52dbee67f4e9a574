"""Cascading folktale deletion."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from app.core.logging_safety import safe_log_identifier
from app.domain.identifiers import is_object_id
from app.repositories.memory import InMemoryStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FolktaleDeleted:
    folktale_id: str
    comments_removed: int
    bookmarks_removed: int


@dataclass(frozen=True, slots=True)
class FolktaleNotFound:
    folktale_id: str


@dataclass(frozen=True, slots=True)
class InvalidFolktaleId:
    folktale_id: str


DeleteOutcome = FolktaleDeleted | FolktaleNotFound | InvalidFolktaleId


class CascadingDeleteCoordinator:
    """Deletes a folktale and every comment and bookmark that references it.

    The whole unit runs as one store operation. Store faults propagate after
    the removed records have been put back, so a failed delete never leaves
    orphaned dependents or a half-deleted folktale behind.
    """

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def delete_folktale(self, folktale_id: str) -> DeleteOutcome:
        if not is_object_id(folktale_id):
            return InvalidFolktaleId(folktale_id)

        safe_folktale_id = safe_log_identifier(folktale_id, prefix="fid")
        try:
            result = self._store.delete_folktale_cascade(folktale_id)
        except Exception:
            logger.error("folktale.delete_rolled_back folktale_id=%s", safe_folktale_id)
            raise

        if result is None:
            logger.info("folktale.delete_noop folktale_id=%s reason=not_found", safe_folktale_id)
            return FolktaleNotFound(folktale_id)

        logger.info(
            "folktale.deleted folktale_id=%s comments_removed=%d bookmarks_removed=%d",
            safe_folktale_id,
            result.comments_removed,
            result.bookmarks_removed,
        )
        return FolktaleDeleted(
            folktale_id=result.folktale_id,
            comments_removed=result.comments_removed,
            bookmarks_removed=result.bookmarks_removed,
        )
