from datetime import datetime
from typing import Any, Callable

from sqlalchemy import select

from laphub.database import Database, utcnow
from laphub.models.cart import CartEntry


class CartStore:
    def __init__(self, database: Database, clock: Callable[[], datetime] = utcnow) -> None:
        self._database = database
        self._clock = clock

    def get_items(self, identity_id: int) -> list[dict[str, Any]]:
        with self._database.session_scope() as session:
            entry = session.execute(
                select(CartEntry).where(CartEntry.identity_id == identity_id)
            ).scalar_one_or_none()
            if entry is None:
                return []
            return list(entry.items or [])

    def save_items(self, identity_id: int, items: list[dict[str, Any]]) -> list[dict[str, Any]]:
        now = self._clock()
        stmt = self._database.insert(CartEntry).values(
            identity_id=identity_id, items=items, created_at=now, updated_at=now
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["identity_id"],
            set_={"items": items, "updated_at": now},
        )
        with self._database.session_scope() as session:
            session.execute(stmt)
        return items

    def clear(self, identity_id: int) -> None:
        self.save_items(identity_id, [])

    def ensure(self, identity_id: int) -> None:
        now = self._clock()
        stmt = self._database.insert(CartEntry).values(
            identity_id=identity_id, items=[], created_at=now, updated_at=now
        )
        with self._database.session_scope() as session:
            session.execute(stmt.on_conflict_do_nothing(index_elements=["identity_id"]))
