from datetime import datetime, timedelta
import logging
import secrets
from typing import Callable, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from laphub.database import Database, as_utc, utcnow
from laphub.models.otp import OtpEntry
from laphub.schemas.errors import InvalidInputError
from laphub.schemas.otp import CHANNELS, OtpRecord

LOGGER = logging.getLogger(__name__)

CODE_MIN = 100000
CODE_MAX = 999999


def generate_code() -> str:
    """Return a uniformly drawn code in [100000, 999999]."""
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


def _to_record(entry: OtpEntry) -> OtpRecord:
    return OtpRecord(
        id=entry.id,
        session_id=entry.session_id,
        channel=entry.channel,
        target=entry.target,
        code=entry.code,
        expires_at=as_utc(entry.expires_at),
        created_at=as_utc(entry.created_at),
    )


class OtpStore:
    def __init__(
        self,
        database: Database,
        ttl_seconds: int,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._database = database
        self._ttl_seconds = ttl_seconds
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def issue(
        self,
        session_id: str,
        channel: str,
        target: str,
        code: str,
        ttl_seconds: Optional[int] = None,
    ) -> OtpRecord:
        if channel not in CHANNELS:
            raise InvalidInputError(f"Unsupported channel: {channel}")
        ttl = self._ttl_seconds if ttl_seconds is None else ttl_seconds
        now = self._clock()
        entry = OtpEntry(
            session_id=session_id,
            channel=channel,
            target=target,
            code=code,
            expires_at=now + timedelta(seconds=ttl),
            created_at=now,
        )
        with self._database.session_scope() as session:
            session.add(entry)
            session.flush()
            return _to_record(entry)

    def latest(
        self,
        session_id: str,
        channel: str,
        target: str,
        *,
        session: Optional[Session] = None,
    ) -> Optional[OtpRecord]:
        stmt = (
            select(OtpEntry)
            .where(
                OtpEntry.session_id == session_id,
                OtpEntry.channel == channel,
                OtpEntry.target == target,
            )
            .order_by(OtpEntry.created_at.desc(), OtpEntry.id.desc())
            .limit(1)
        )
        with self._database.session_scope(session) as db:
            entry = db.execute(stmt).scalars().first()
            if entry is None:
                return None
            return _to_record(entry)

    def consume(self, record: OtpRecord, *, session: Optional[Session] = None) -> bool:
        with self._database.session_scope(session) as db:
            result = db.execute(delete(OtpEntry).where(OtpEntry.id == record.id))
            return result.rowcount > 0

    def purge_expired(self, older_than_seconds: int = 0) -> int:
        cutoff = self._clock() - timedelta(seconds=older_than_seconds)
        with self._database.session_scope() as session:
            result = session.execute(delete(OtpEntry).where(OtpEntry.expires_at <= cutoff))
            removed = result.rowcount
        if removed:
            LOGGER.info("Purged %s expired OTP records", removed)
        return removed
