from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
LOGIN_CODE_PATTERN = r"^\d{6}$"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoginRequest(CamelModel):
    email: str = Field(min_length=3, max_length=255, pattern=EMAIL_PATTERN)


class LoginRequestResponse(CamelModel):
    success: bool = True
    message: str
    expires_at: datetime
    message_id: Optional[str] = None
    code: Optional[str] = None


class VerifyLoginRequest(CamelModel):
    email: str = Field(min_length=3, max_length=255, pattern=EMAIL_PATTERN)
    code: str = Field(min_length=6, max_length=6, pattern=LOGIN_CODE_PATTERN)


class AccountResponse(CamelModel):
    account_id: int
    email: str


class VerifyLoginResponse(CamelModel):
    success: bool = True
    message: str
    token: str
    expires_at: datetime
    account: AccountResponse


class TokenStatusResponse(CamelModel):
    success: bool = True
    message: str
    account: AccountResponse


class LogoutResponse(CamelModel):
    success: bool = True
    message: str
