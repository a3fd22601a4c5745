from datetime import datetime
from typing import Any, Callable, Optional

from laphub.database import Database, utcnow
from laphub.models.activity import ActivityEntry

USER_ACTION = "userAction"
BUTTON_CLICK = "buttonClick"


class ActivityLog:
    def __init__(self, database: Database, clock: Callable[[], datetime] = utcnow) -> None:
        self._database = database
        self._clock = clock

    def record(self, session_id: Optional[str], action: str, data: Any) -> int:
        with self._database.session_scope() as session:
            entry = ActivityEntry(
                session_id=session_id,
                action=action,
                data=data,
                created_at=self._clock(),
            )
            session.add(entry)
            session.flush()
            return entry.id
