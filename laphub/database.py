import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from laphub.schemas.errors import PersistenceError

LOGGER = logging.getLogger(__name__)

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; everything is stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _build_database_url(raw_url: str) -> str:
    if raw_url.startswith("postgresql://"):
        return raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return raw_url


def _engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    options: dict = {"connect_args": {"check_same_thread": False}}
    if url in {"sqlite://", "sqlite:///:memory:"}:
        # One shared connection, otherwise every checkout sees an empty database.
        options["poolclass"] = StaticPool
    return options


class Database:
    def __init__(self, url: str) -> None:
        if not url:
            raise RuntimeError("DATABASE_URL is not configured")
        self.url = _build_database_url(url)
        self.engine = create_engine(self.url, **_engine_options(self.url))
        self._session_factory = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )

    def init_db(self) -> None:
        from laphub.models import activity as _activity  # noqa: F401
        from laphub.models import cart as _cart  # noqa: F401
        from laphub.models import identity as _identity  # noqa: F401
        from laphub.models import otp as _otp  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()

    def insert(self, model):
        """Dialect-specific INSERT that supports ``on_conflict_do_*``."""
        dialect = self.engine.dialect.name
        if dialect == "postgresql":
            return postgresql.insert(model)
        if dialect == "sqlite":
            return sqlite.insert(model)
        raise RuntimeError(f"Upserts are not supported on {dialect}")

    @contextmanager
    def session_scope(self, session: Optional[Session] = None) -> Iterator[Session]:
        """Yield a session that commits on exit.

        Passing an already open ``session`` joins its transaction instead;
        the owner of that session commits or rolls back.
        """
        if session is not None:
            yield session
            return

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            LOGGER.exception("Database transaction failed")
            raise PersistenceError("Database operation failed") from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
