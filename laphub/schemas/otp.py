import re
from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

from laphub.schemas.identity import IdentityResponse

EMAIL_CHANNEL = "email"
SMS_CHANNEL = "sms"
CHANNELS = (EMAIL_CHANNEL, SMS_CHANNEL)

EMAIL_MAX_LENGTH = 255
EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")


def is_valid_email(value: Optional[str]) -> bool:
    if not value or len(value) > EMAIL_MAX_LENGTH:
        return False
    return EMAIL_PATTERN.fullmatch(value) is not None


class EmailCodeRequest(BaseModel):
    email: Optional[str] = None


class EmailCodeResponse(BaseModel):
    ok: bool = True
    expires_in_seconds: int
    otp: Optional[str] = None


class EmailCodeVerifyRequest(BaseModel):
    email: Optional[str] = None
    code: Optional[str] = None


class EmailCodeVerifyResponse(BaseModel):
    ok: bool = True
    user: IdentityResponse


@dataclass(frozen=True)
class OtpRecord:
    id: int
    session_id: str
    channel: Literal["email", "sms"]
    target: str
    code: str
    expires_at: datetime
    created_at: datetime
