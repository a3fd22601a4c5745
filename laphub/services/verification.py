from datetime import datetime
import logging
from typing import Callable, Optional, Protocol

from laphub.database import Database, utcnow
from laphub.models.identity import IdentityEntry
from laphub.schemas.errors import (
    CodeExpiredError,
    CodeMismatchError,
    CodeNotFoundError,
    EmailSendError,
    InvalidEmailError,
    InvalidInputError,
    VerificationError,
)
from laphub.schemas.otp import EMAIL_CHANNEL, OtpRecord, is_valid_email
from laphub.services.email import build_otp_body
from laphub.services.identities import IdentityStore
from laphub.services.otp import OtpStore, generate_code

LOGGER = logging.getLogger(__name__)


class Mailer(Protocol):
    @property
    def is_configured(self) -> bool: ...

    def send(self, recipient: str, subject: str, body: str) -> None: ...


class VerificationEngine:
    """Checks a submitted email code and promotes the session to an identity.

    Only the newest record for the session and address is considered. The
    identity upsert and the record deletion share one transaction, so a
    failed check never writes anything.
    """

    def __init__(
        self,
        database: Database,
        otp_store: OtpStore,
        identity_store: IdentityStore,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._database = database
        self._otp_store = otp_store
        self._identity_store = identity_store
        self._clock = clock

    def verify(self, session_id: str, target: str, submitted_code: str) -> IdentityEntry:
        if not target or not submitted_code:
            raise InvalidInputError("Email and code required")
        if not is_valid_email(target):
            raise InvalidEmailError()

        record = self._otp_store.latest(session_id, EMAIL_CHANNEL, target)
        if record is None:
            raise CodeNotFoundError()
        if record.expires_at <= self._clock():
            raise CodeExpiredError()
        if record.code != submitted_code:
            raise CodeMismatchError()

        with self._database.session_scope() as session:
            identity = self._identity_store.upsert_by_email(
                target,
                {"session_id": session_id, "email_verified": True},
                session=session,
            )
            self._otp_store.consume(record, session=session)
        return identity


class EmailCodeService:
    def __init__(
        self,
        otp_store: OtpStore,
        engine: VerificationEngine,
        mailer: Optional[Mailer],
        subject: str,
        code_generator: Callable[[], str] = generate_code,
    ) -> None:
        self._otp_store = otp_store
        self._engine = engine
        self._mailer = mailer
        self._subject = subject
        self._code_generator = code_generator

    def request_email_code(self, session_id: str, email: str) -> OtpRecord:
        if not is_valid_email(email):
            LOGGER.info("Rejected code request for invalid email %r", email)
            raise InvalidEmailError()

        record = self._otp_store.issue(
            session_id, EMAIL_CHANNEL, email, self._code_generator()
        )
        LOGGER.info("OTP issued for %s expires_at=%s", email, record.expires_at.isoformat())
        self._deliver(record)
        return record

    def verify_email_code(self, session_id: str, email: str, code: str) -> IdentityEntry:
        try:
            identity = self._engine.verify(session_id, email, code)
        except VerificationError as exc:
            LOGGER.info("OTP verification failed for %s: %s", email, exc)
            raise
        LOGGER.info("OTP verified for %s identity_id=%s", email, identity.id)
        return identity

    def _deliver(self, record: OtpRecord) -> None:
        if self._mailer is None or not self._mailer.is_configured:
            LOGGER.info("Mail transport not configured, skipping delivery to %s", record.target)
            return
        body = build_otp_body(record.code, self._otp_store.ttl_seconds)
        try:
            self._mailer.send(record.target, self._subject, body)
        except EmailSendError as exc:
            # The code is valid once persisted; delivery is best effort.
            LOGGER.warning("OTP email delivery to %s failed: %s", record.target, exc)
            return
        except Exception:
            LOGGER.exception("Unexpected mail transport error for %s", record.target)
            return
        LOGGER.info("OTP email sent to %s", record.target)
