from dataclasses import dataclass
from datetime import datetime, timedelta
import hmac
import logging
from typing import Callable

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from chatterbox.database import session_scope
from chatterbox.errors import AccountLocked, StorageError
from chatterbox.models.login_attempt import LoginAttemptEntry
from chatterbox.utils import normalize_email, utcnow

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginAttempt:
    attempt_id: int
    email: str
    code: str
    created_at: datetime
    is_used: bool


class LoginAttemptStore:
    def __init__(
        self,
        session_factory: sessionmaker,
        *,
        code_ttl: timedelta = timedelta(minutes=10),
        rate_limit_window: timedelta = timedelta(minutes=1),
        lockout_window: timedelta = timedelta(hours=1),
        lockout_threshold: int = 10,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._code_ttl = code_ttl
        self._rate_limit_window = rate_limit_window
        self._lockout_window = lockout_window
        self._lockout_threshold = lockout_threshold
        self._clock = clock

    def record_attempt(self, email: str, code: str) -> int:
        entry = LoginAttemptEntry(
            email=normalize_email(email),
            code=code,
            created_at=self._clock(),
            is_used=False,
        )
        try:
            with session_scope(self._session_factory) as session:
                session.add(entry)
                session.flush()
                return entry.attempt_id
        except SQLAlchemyError as exc:
            raise StorageError("storing login attempt") from exc

    def count_recent_attempts(
        self, email: str, within: timedelta | None = None
    ) -> int:
        window = within if within is not None else self._rate_limit_window
        return self._count_since(
            email, window, unused_only=False, operation="checking rate limit"
        )

    def count_recent_failed_attempts(
        self, email: str, within: timedelta | None = None
    ) -> int:
        window = within if within is not None else self._lockout_window
        count = self._count_since(
            email, window, unused_only=True, operation="checking lockout"
        )
        if count >= self._lockout_threshold:
            LOGGER.warning(
                "Login locked for %s: %d unused codes in the last %s",
                normalize_email(email),
                count,
                window,
            )
            raise AccountLocked()
        return count

    def verify_and_consume(self, email: str, code: str) -> LoginAttempt | None:
        """Consume the newest unexpired, unused attempt whose code matches.

        Every candidate is compared with ``hmac.compare_digest`` and the scan
        does not stop at the first match, so response time does not reveal
        which stored code came closest. The candidate rows are locked for the
        length of the transaction and the final update is conditional on the
        row still being unused, so two concurrent callers cannot both consume
        the same code.
        """
        normalized = normalize_email(email)
        supplied = code.strip().encode("utf-8")
        cutoff = self._clock() - self._code_ttl
        try:
            with session_scope(self._session_factory) as session:
                candidates = (
                    session.execute(
                        select(LoginAttemptEntry)
                        .where(
                            LoginAttemptEntry.email == normalized,
                            LoginAttemptEntry.is_used.is_(False),
                            LoginAttemptEntry.created_at > cutoff,
                        )
                        .order_by(
                            LoginAttemptEntry.created_at.desc(),
                            LoginAttemptEntry.attempt_id.desc(),
                        )
                        .with_for_update()
                    )
                    .scalars()
                    .all()
                )

                matched = None
                for entry in candidates:
                    is_match = hmac.compare_digest(entry.code.encode("utf-8"), supplied)
                    if is_match and matched is None:
                        matched = entry
                if matched is None:
                    return None

                result = session.execute(
                    update(LoginAttemptEntry)
                    .where(
                        LoginAttemptEntry.attempt_id == matched.attempt_id,
                        LoginAttemptEntry.is_used.is_(False),
                    )
                    .values(is_used=True)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    return None
                return LoginAttempt(
                    attempt_id=matched.attempt_id,
                    email=matched.email,
                    code=matched.code,
                    created_at=matched.created_at,
                    is_used=True,
                )
        except SQLAlchemyError as exc:
            raise StorageError("verifying login code") from exc

    def _count_since(
        self, email: str, window: timedelta, *, unused_only: bool, operation: str
    ) -> int:
        conditions = [
            LoginAttemptEntry.email == normalize_email(email),
            LoginAttemptEntry.created_at > self._clock() - window,
        ]
        if unused_only:
            conditions.append(LoginAttemptEntry.is_used.is_(False))
        try:
            with session_scope(self._session_factory) as session:
                return session.execute(
                    select(func.count()).select_from(LoginAttemptEntry).where(*conditions)
                ).scalar_one()
        except SQLAlchemyError as exc:
            raise StorageError(operation) from exc
