"""Principal resolution from verified token subjects."""

from app.repositories.memory import InMemoryStore, UserRecord
from app.schemas.auth import Principal


def to_principal(record: UserRecord) -> Principal:
    return Principal(
        id=record.id,
        username=record.username,
        email=record.email,
        is_admin=record.is_admin,
        is_verified=record.is_verified,
    )


class PrincipalResolver:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def resolve(self, subject_id: str) -> Principal | None:
        """Return the stored user for ``subject_id`` without its password hash.

        ``None`` means the user never existed or was removed after the token
        was issued. Store faults propagate to the caller.
        """
        record = self._store.get_user(subject_id)
        if record is None:
            return None
        return to_principal(record)
