from typing import Any

from fastapi import APIRouter, Body, Depends

from laphub.container import Services
from laphub.dependencies import get_services, get_session_id
from laphub.services.activity import BUTTON_CLICK, USER_ACTION

router = APIRouter(tags=["activity"])


@router.post("/userAction")
def log_user_action(
    payload: Any = Body(default=None),
    session_id: str = Depends(get_session_id),
    services: Services = Depends(get_services),
) -> dict:
    services.activity.record(session_id, USER_ACTION, payload if payload is not None else {})
    return {"ok": True}


@router.post("/Log")
def log_button_click(
    payload: Any = Body(default=None),
    session_id: str = Depends(get_session_id),
    services: Services = Depends(get_services),
) -> dict:
    services.activity.record(session_id, BUTTON_CLICK, payload if payload is not None else {})
    return {"ok": True}
