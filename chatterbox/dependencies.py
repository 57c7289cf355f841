"""FastAPI dependency providers.

The login flow is assembled here from explicit parts so tests can swap any
of them through ``app.dependency_overrides``.
"""
from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, Header, Request

from chatterbox.config import settings
from chatterbox.database import get_session_factory
from chatterbox.errors import AuthenticationRequired, RateLimited
from chatterbox.rate_limit import RateLimiter
from chatterbox.services.accounts import AccountStore
from chatterbox.services.attempts import LoginAttemptStore
from chatterbox.services.email import EmailService
from chatterbox.services.login import LoginService
from chatterbox.services.prompts import PromptService
from chatterbox.services.tokens import SessionIssuer, TokenClaims

_rate_limiter = RateLimiter()


@lru_cache(maxsize=1)
def get_login_service() -> LoginService:
    session_factory = get_session_factory()
    attempts = LoginAttemptStore(
        session_factory,
        code_ttl=timedelta(minutes=settings.login_code_ttl_minutes),
        rate_limit_window=timedelta(seconds=settings.login_rate_limit_seconds),
        lockout_window=timedelta(minutes=settings.lockout_window_minutes),
        lockout_threshold=settings.lockout_threshold,
    )
    issuer = SessionIssuer(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        issuer=settings.jwt_issuer,
        ttl=timedelta(days=settings.session_ttl_days),
    )
    return LoginService(
        attempts,
        AccountStore(session_factory),
        issuer,
        code_ttl=timedelta(minutes=settings.login_code_ttl_minutes),
        retry_after_seconds=settings.login_rate_limit_seconds,
    )


@lru_cache(maxsize=1)
def get_email_service() -> EmailService:
    return EmailService(
        settings.resend_api_key,
        settings.email_from,
        subject=settings.login_email_subject,
        code_ttl_minutes=settings.login_code_ttl_minutes,
    )


@lru_cache(maxsize=1)
def get_prompt_service() -> PromptService:
    return PromptService(get_session_factory())


def get_rate_limiter() -> RateLimiter:
    return _rate_limiter


def _enforce_rate_limit(
    request: Request,
    limiter: RateLimiter,
    scope: str,
    max_requests: int,
    window_seconds: int,
    message: str,
) -> None:
    client = request.client.host if request.client else "unknown"
    retry_after = limiter.hit(f"{scope}:{client}", max_requests, window_seconds)
    if retry_after is not None:
        raise RateLimited(message, retry_after=retry_after)


def auth_rate_limit(
    request: Request, limiter: RateLimiter = Depends(get_rate_limiter)
) -> None:
    _enforce_rate_limit(
        request,
        limiter,
        "auth",
        settings.auth_rate_limit_max,
        settings.auth_rate_limit_window_seconds,
        "Too many authentication attempts, please try again later.",
    )


def prompts_rate_limit(
    request: Request, limiter: RateLimiter = Depends(get_rate_limiter)
) -> None:
    _enforce_rate_limit(
        request,
        limiter,
        "prompts",
        settings.prompts_rate_limit_max,
        settings.prompts_rate_limit_window_seconds,
        "Too many prompt requests, please slow down.",
    )


def api_rate_limit(
    request: Request, limiter: RateLimiter = Depends(get_rate_limiter)
) -> None:
    _enforce_rate_limit(
        request,
        limiter,
        "api",
        settings.api_rate_limit_max,
        settings.api_rate_limit_window_seconds,
        "Too many API requests, please try again later.",
    )


def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    if not authorization:
        raise AuthenticationRequired()
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationRequired()
    return token.strip()


def get_current_claims(
    token: str = Depends(get_bearer_token),
    login_service: LoginService = Depends(get_login_service),
) -> TokenClaims:
    return login_service.verify_token(token)
