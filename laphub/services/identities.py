from datetime import datetime
from typing import Any, Callable, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from laphub.database import Database, utcnow
from laphub.models.identity import IdentityEntry
from laphub.schemas.errors import IdentityConflictError

MUTABLE_FIELDS = frozenset({"session_id", "name", "email", "email_verified"})


class IdentityStore:
    def __init__(self, database: Database, clock: Callable[[], datetime] = utcnow) -> None:
        self._database = database
        self._clock = clock

    def upsert_by_email(
        self,
        email: str,
        fields: dict[str, Any],
        *,
        session: Optional[Session] = None,
    ) -> IdentityEntry:
        return self._upsert("email", email, fields, session=session)

    def upsert_by_session(
        self,
        session_id: str,
        fields: dict[str, Any],
        *,
        session: Optional[Session] = None,
    ) -> IdentityEntry:
        return self._upsert("session_id", session_id, fields, session=session)

    def get_by_session(self, session_id: str) -> Optional[IdentityEntry]:
        with self._database.session_scope() as session:
            return session.execute(
                select(IdentityEntry).where(IdentityEntry.session_id == session_id)
            ).scalar_one_or_none()

    def get_by_email(self, email: str) -> Optional[IdentityEntry]:
        with self._database.session_scope() as session:
            return session.execute(
                select(IdentityEntry).where(IdentityEntry.email == email)
            ).scalar_one_or_none()

    def _upsert(
        self,
        key: str,
        value: str,
        fields: dict[str, Any],
        *,
        session: Optional[Session],
    ) -> IdentityEntry:
        unknown = set(fields) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown identity fields: {', '.join(sorted(unknown))}")

        now = self._clock()
        values = {**fields, key: value}
        key_column = getattr(IdentityEntry, key)

        with self._database.session_scope(session) as db:
            bound_session = values.get("session_id")
            if bound_session is not None:
                # A session authenticates as one identity at a time.
                db.execute(
                    update(IdentityEntry)
                    .where(
                        IdentityEntry.session_id == bound_session,
                        or_(key_column != value, key_column.is_(None)),
                    )
                    .values(session_id=None, updated_at=now)
                )

            stmt = self._database.insert(IdentityEntry).values(
                {"email_verified": False, "created_at": now, "updated_at": now, **values}
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[key],
                set_={**values, "updated_at": now},
            )
            try:
                db.execute(stmt)
            except IntegrityError as exc:
                raise IdentityConflictError("Email already in use") from exc

            return db.execute(
                select(IdentityEntry)
                .where(key_column == value)
                .execution_options(populate_existing=True)
            ).scalar_one()
