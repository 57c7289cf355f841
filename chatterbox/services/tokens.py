from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
from typing import Callable

import jwt

from chatterbox.errors import TokenExpired, TokenInvalid, TokenValidationFailed
from chatterbox.utils import utcnow

LOGGER = logging.getLogger(__name__)

SESSION_TOKEN_ISSUER = "chatterbox-app"


@dataclass(frozen=True)
class IssuedToken:
    token: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class TokenClaims:
    account_id: int
    email: str
    issued_at: int


class SessionIssuer:
    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        issuer: str = SESSION_TOKEN_ISSUER,
        ttl: timedelta = timedelta(days=30),
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._issuer = issuer
        self._ttl = ttl
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def is_configured(self) -> bool:
        return bool(self._secret)

    def issue(self, account_id: int, email: str) -> IssuedToken:
        if not self._secret:
            raise TokenValidationFailed("JWT secret is not configured")
        # JWT carries whole seconds; keep the reported expiry consistent with it.
        issued_at = self._clock().replace(microsecond=0)
        expires_at = issued_at + self._ttl
        payload = {
            "sub": str(account_id),
            "accountId": account_id,
            "email": email,
            "iss": self._issuer,
            "iat": int(issued_at.timestamp()),
            "nbf": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return IssuedToken(token=token, issued_at=issued_at, expires_at=expires_at)

    def verify(self, token: str) -> TokenClaims:
        if not self._secret:
            raise TokenValidationFailed("JWT secret is not configured")
        if not token:
            raise TokenInvalid("Token is missing")
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                options={"require": ["exp", "iat", "iss"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired() from exc
        except jwt.ImmatureSignatureError as exc:
            LOGGER.warning("Rejected token issued in the future")
            raise TokenValidationFailed() from exc
        except jwt.InvalidTokenError as exc:
            raise TokenInvalid() from exc
        return _claims_from_payload(payload)


def _claims_from_payload(payload: dict) -> TokenClaims:
    account_id = payload.get("accountId")
    email = payload.get("email")
    issued_at = payload.get("iat")
    if isinstance(account_id, bool) or not isinstance(account_id, int):
        raise TokenInvalid("Token account id is missing")
    if not isinstance(email, str) or not email:
        raise TokenInvalid("Token email is missing")
    if not isinstance(issued_at, int):
        raise TokenInvalid("Token issue time is invalid")
    return TokenClaims(account_id=account_id, email=email, issued_at=issued_at)
