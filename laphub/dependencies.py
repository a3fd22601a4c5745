from fastapi import Request

from laphub.container import Services
from laphub.services.sessions import ensure_session_id


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_session_id(request: Request) -> str:
    return ensure_session_id(request.session)
