from fastapi import APIRouter, Body, Depends, HTTPException, status

from laphub.container import Services
from laphub.dependencies import get_services, get_session_id
from laphub.models.identity import IdentityEntry
from laphub.schemas.cart import CartPayload, CartResponse, CartUpdate

router = APIRouter(prefix="/Cart", tags=["cart"])


def _require_identity(services: Services, session_id: str) -> IdentityEntry:
    identity = services.identities.get_by_session(session_id)
    if identity is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return identity


@router.get("", response_model=CartResponse, response_model_exclude_none=True)
def get_cart(
    session_id: str = Depends(get_session_id),
    services: Services = Depends(get_services),
) -> CartResponse:
    identity = _require_identity(services, session_id)
    return CartResponse(cart=services.carts.get_items(identity.id))


@router.post("", response_model=CartResponse, response_model_exclude_none=True)
def save_cart(
    payload: CartPayload = Body(...),
    session_id: str = Depends(get_session_id),
    services: Services = Depends(get_services),
) -> CartResponse:
    identity = _require_identity(services, session_id)
    items = payload.cart if isinstance(payload, CartUpdate) else payload
    saved = services.carts.save_items(
        identity.id, [item.model_dump(exclude_none=True) for item in items]
    )
    return CartResponse(ok=True, cart=saved)


@router.post("/clear", response_model=CartResponse, response_model_exclude_none=True)
def clear_cart(
    session_id: str = Depends(get_session_id),
    services: Services = Depends(get_services),
) -> CartResponse:
    identity = _require_identity(services, session_id)
    services.carts.clear(identity.id)
    return CartResponse(ok=True, message="Cart cleared after checkout")
