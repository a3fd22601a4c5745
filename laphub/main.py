import logging
from datetime import datetime
from typing import Callable, Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from laphub.config import Settings
from laphub.container import build_services
from laphub.database import Database, utcnow
from laphub.routers import activity, auth, cart, health
from laphub.schemas.errors import PersistenceError
from laphub.services.otp import generate_code
from laphub.services.verification import Mailer

LOGGER = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    *,
    database: Optional[Database] = None,
    mailer: Optional[Mailer] = None,
    clock: Callable[[], datetime] = utcnow,
    code_generator: Callable[[], str] = generate_code,
) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    services = build_services(
        settings,
        database=database,
        mailer=mailer,
        clock=clock,
        code_generator=code_generator,
    )

    app = FastAPI(title="LapHub Backend")
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        max_age=settings.session_max_age_seconds,
        same_site="lax",
        https_only=settings.session_https_only,
    )

    app.include_router(health.router, prefix="/api")
    app.include_router(auth.router, prefix="/api")
    app.include_router(cart.router, prefix="/api")
    app.include_router(activity.router, prefix="/api")

    @app.exception_handler(PersistenceError)
    def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
        LOGGER.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Server error"},
        )

    @app.on_event("startup")
    def startup() -> None:
        services.database.init_db()
        services.otp_store.purge_expired(settings.otp_retention_seconds)

    @app.get("/")
    def root():
        return {"status": "Backend running"}

    return app
