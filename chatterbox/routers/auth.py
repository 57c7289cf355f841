import logging

from fastapi import APIRouter, Depends

from chatterbox.config import settings
from chatterbox.dependencies import (
    auth_rate_limit,
    get_current_claims,
    get_email_service,
    get_login_service,
)
from chatterbox.errors import EmailNotConfigured
from chatterbox.schemas.auth import (
    AccountResponse,
    LoginRequest,
    LoginRequestResponse,
    LogoutResponse,
    TokenStatusResponse,
    VerifyLoginRequest,
    VerifyLoginResponse,
)
from chatterbox.services.email import EmailService
from chatterbox.services.login import LoginService
from chatterbox.services.tokens import TokenClaims

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/request-login",
    response_model=LoginRequestResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(auth_rate_limit)],
)
def request_login(
    payload: LoginRequest,
    login_service: LoginService = Depends(get_login_service),
    email_service: EmailService = Depends(get_email_service),
) -> LoginRequestResponse:
    if not email_service.is_configured():
        raise EmailNotConfigured()
    issued = login_service.request_login(payload.email)
    receipt = email_service.send_login_code(issued.email, issued.code)
    return LoginRequestResponse(
        message="Login code sent to your email",
        expires_at=issued.expires_at,
        message_id=receipt.message_id,
        code=issued.code if settings.login_code_debug else None,
    )


@router.post(
    "/verify-login",
    response_model=VerifyLoginResponse,
    dependencies=[Depends(auth_rate_limit)],
)
def verify_login(
    payload: VerifyLoginRequest,
    login_service: LoginService = Depends(get_login_service),
) -> VerifyLoginResponse:
    result = login_service.verify_login(payload.email, payload.code)
    return VerifyLoginResponse(
        message="Login successful",
        token=result.token,
        expires_at=result.expires_at,
        account=AccountResponse(
            account_id=result.account.account_id, email=result.account.email
        ),
    )


@router.get("/verify", response_model=TokenStatusResponse)
def verify_token(claims: TokenClaims = Depends(get_current_claims)) -> TokenStatusResponse:
    return TokenStatusResponse(
        message="Token is valid",
        account=AccountResponse(account_id=claims.account_id, email=claims.email),
    )


@router.post("/logout", response_model=LogoutResponse)
def logout(claims: TokenClaims = Depends(get_current_claims)) -> LogoutResponse:
    # Tokens are not revocable; the client drops its copy.
    LOGGER.info("Logout requested for account %s", claims.account_id)
    return LogoutResponse(
        message="Logged out successfully. Please delete the token from your device."
    )
