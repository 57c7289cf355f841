"""Passwordless login flow: request a code, verify it, verify the session."""

from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
from typing import Callable

from chatterbox.errors import InvalidOrExpiredCode, RateLimited, TokenValidationFailed
from chatterbox.services.accounts import AccountStore
from chatterbox.services.attempts import LoginAttemptStore
from chatterbox.services.codes import generate_login_code
from chatterbox.services.tokens import SessionIssuer, TokenClaims
from chatterbox.utils import normalize_email, utcnow

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginCodeIssued:
    email: str
    code: str
    expires_at: datetime


@dataclass(frozen=True)
class AccountSummary:
    account_id: int
    email: str


@dataclass(frozen=True)
class LoginResult:
    token: str
    expires_at: datetime
    account: AccountSummary


class LoginService:
    def __init__(
        self,
        attempts: LoginAttemptStore,
        accounts: AccountStore,
        issuer: SessionIssuer,
        *,
        code_generator: Callable[[], str] = generate_login_code,
        code_ttl: timedelta = timedelta(minutes=10),
        retry_after_seconds: int = 60,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._attempts = attempts
        self._accounts = accounts
        self._issuer = issuer
        self._code_generator = code_generator
        self._code_ttl = code_ttl
        self._retry_after_seconds = retry_after_seconds
        self._clock = clock

    def request_login(self, email: str) -> LoginCodeIssued:
        """Issue a new login code for ``email``.

        The caller delivers the code. Lockout is checked before the per-email
        throttle so a locked address always answers with the lockout.
        """
        normalized = normalize_email(email)
        self._attempts.count_recent_failed_attempts(normalized)
        if self._attempts.count_recent_attempts(normalized) > 0:
            LOGGER.info("Login code request throttled for %s", normalized)
            raise RateLimited(retry_after=self._retry_after_seconds)

        code = self._code_generator()
        self._attempts.record_attempt(normalized, code)
        expires_at = self._clock() + self._code_ttl
        LOGGER.info("Login code issued for %s", normalized)
        return LoginCodeIssued(email=normalized, code=code, expires_at=expires_at)

    def verify_login(self, email: str, code: str) -> LoginResult:
        # Refuse before consuming the code if no token can be issued for it.
        if not self._issuer.is_configured():
            LOGGER.error("Login verification refused: JWT secret is not configured")
            raise TokenValidationFailed("JWT secret is not configured")
        normalized = normalize_email(email)
        attempt = self._attempts.verify_and_consume(normalized, code)
        if attempt is None:
            LOGGER.info("Invalid or expired login code for %s", normalized)
            raise InvalidOrExpiredCode()

        account = self._accounts.find_or_create(normalized)
        self._accounts.touch_last_login(account.account_id)
        issued = self._issuer.issue(account.account_id, account.email)
        LOGGER.info("Login completed for account %s", account.account_id)
        return LoginResult(
            token=issued.token,
            expires_at=issued.expires_at,
            account=AccountSummary(account_id=account.account_id, email=account.email),
        )

    def verify_token(self, token: str) -> TokenClaims:
        return self._issuer.verify(token)
