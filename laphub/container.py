from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from laphub.config import Settings
from laphub.database import Database, utcnow
from laphub.services.activity import ActivityLog
from laphub.services.carts import CartStore
from laphub.services.email import SmtpMailer
from laphub.services.identities import IdentityStore
from laphub.services.otp import OtpStore, generate_code
from laphub.services.verification import EmailCodeService, Mailer, VerificationEngine


@dataclass(frozen=True)
class Services:
    settings: Settings
    database: Database
    otp_store: OtpStore
    identities: IdentityStore
    carts: CartStore
    activity: ActivityLog
    verification: VerificationEngine
    email_codes: EmailCodeService


def build_services(
    settings: Settings,
    database: Optional[Database] = None,
    mailer: Optional[Mailer] = None,
    clock: Callable[[], datetime] = utcnow,
    code_generator: Callable[[], str] = generate_code,
) -> Services:
    database = database or Database(settings.database_url)
    otp_store = OtpStore(database, settings.otp_ttl_seconds, clock=clock)
    identities = IdentityStore(database, clock=clock)
    verification = VerificationEngine(database, otp_store, identities, clock=clock)
    email_codes = EmailCodeService(
        otp_store,
        verification,
        mailer if mailer is not None else SmtpMailer(settings),
        settings.otp_email_subject,
        code_generator=code_generator,
    )
    return Services(
        settings=settings,
        database=database,
        otp_store=otp_store,
        identities=identities,
        carts=CartStore(database, clock=clock),
        activity=ActivityLog(database, clock=clock),
        verification=verification,
        email_codes=email_codes,
    )
