from fastapi import APIRouter, Depends, HTTPException, status

from laphub.container import Services
from laphub.dependencies import get_services, get_session_id
from laphub.schemas.errors import (
    IdentityConflictError,
    InvalidInputError,
    VerificationError,
)
from laphub.schemas.identity import IdentityResponse, SignupRequest, SignupResponse
from laphub.schemas.otp import (
    EmailCodeRequest,
    EmailCodeResponse,
    EmailCodeVerifyRequest,
    EmailCodeVerifyResponse,
)

router = APIRouter(tags=["auth"])


@router.post(
    "/send-email-otp", response_model=EmailCodeResponse, response_model_exclude_none=True
)
def send_email_otp(
    payload: EmailCodeRequest,
    session_id: str = Depends(get_session_id),
    services: Services = Depends(get_services),
) -> EmailCodeResponse:
    try:
        record = services.email_codes.request_email_code(session_id, payload.email)
    except InvalidInputError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return EmailCodeResponse(
        expires_in_seconds=services.settings.otp_ttl_seconds,
        otp=record.code if services.settings.otp_debug else None,
    )


@router.post("/verify-email-otp", response_model=EmailCodeVerifyResponse)
def verify_email_otp(
    payload: EmailCodeVerifyRequest,
    session_id: str = Depends(get_session_id),
    services: Services = Depends(get_services),
) -> EmailCodeVerifyResponse:
    try:
        identity = services.email_codes.verify_email_code(
            session_id, payload.email, payload.code
        )
    except (InvalidInputError, VerificationError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return EmailCodeVerifyResponse(user=IdentityResponse.model_validate(identity))


@router.post("/signup", response_model=SignupResponse)
def signup(
    payload: SignupRequest,
    session_id: str = Depends(get_session_id),
    services: Services = Depends(get_services),
) -> SignupResponse:
    try:
        identity = services.identities.upsert_by_session(
            session_id,
            {
                "name": payload.name,
                "email": payload.email,
                "email_verified": payload.email_verified,
            },
        )
    except IdentityConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    services.carts.ensure(identity.id)
    return SignupResponse(user=IdentityResponse.model_validate(identity))
