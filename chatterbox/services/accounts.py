from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Callable

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from chatterbox.database import session_scope
from chatterbox.errors import StorageError
from chatterbox.models.account import AccountEntry
from chatterbox.utils import normalize_email, utcnow

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Account:
    account_id: int
    email: str
    created_at: datetime
    last_login_at: datetime | None
    is_active: bool


class AccountStore:
    def __init__(
        self,
        session_factory: sessionmaker,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    def find_by_email(self, email: str) -> Account | None:
        try:
            with session_scope(self._session_factory) as session:
                entry = session.execute(
                    select(AccountEntry).where(
                        AccountEntry.email == normalize_email(email)
                    )
                ).scalar_one_or_none()
                if entry is None:
                    return None
                return self._to_account(entry)
        except SQLAlchemyError as exc:
            raise StorageError("finding account") from exc

    def create(self, email: str) -> int:
        normalized = normalize_email(email)
        now = self._clock()
        try:
            with session_scope(self._session_factory) as session:
                entry = AccountEntry(
                    email=normalized,
                    created_at=now,
                    last_login_at=now,
                    is_active=True,
                )
                session.add(entry)
                session.flush()
                return entry.account_id
        except IntegrityError:
            # Another request created the account between our lookup and insert.
            LOGGER.info("Account for %s already exists, reading it back", normalized)
        except SQLAlchemyError as exc:
            raise StorageError("creating account") from exc

        existing = self.find_by_email(normalized)
        if existing is None:
            raise StorageError("creating account")
        return existing.account_id

    def find_or_create(self, email: str) -> Account:
        account = self.find_by_email(email)
        if account is not None:
            return account
        account_id = self.create(email)
        account = self.find_by_email(email)
        if account is None or account.account_id != account_id:
            raise StorageError("creating account")
        return account

    def touch_last_login(self, account_id: int) -> None:
        try:
            with session_scope(self._session_factory) as session:
                session.execute(
                    update(AccountEntry)
                    .where(AccountEntry.account_id == account_id)
                    .values(last_login_at=self._clock())
                )
        except SQLAlchemyError:
            LOGGER.warning(
                "Failed to update last login for account %s", account_id, exc_info=True
            )

    def _to_account(self, entry: AccountEntry) -> Account:
        return Account(
            account_id=entry.account_id,
            email=entry.email,
            created_at=entry.created_at,
            last_login_at=entry.last_login_at,
            is_active=bool(entry.is_active),
        )
