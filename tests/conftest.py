"""Shared fixtures: a throwaway SQLite database and a controllable clock."""

from datetime import datetime, timedelta, timezone

import pytest

from chatterbox.database import (
    create_db_engine,
    init_db,
    make_session_factory,
    session_scope,
)
from chatterbox.models.prompt import PromptEntry, TranslationEntry
from chatterbox.services.accounts import AccountStore
from chatterbox.services.attempts import LoginAttemptStore
from chatterbox.services.login import LoginService
from chatterbox.services.prompts import PromptService
from chatterbox.services.tokens import SessionIssuer

JWT_SECRET = "test-secret-0123456789abcdef0123456789abcdef"


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime.now(timezone.utc).replace(microsecond=0))


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'chatterbox.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def broken_session_factory(tmp_path):
    """Session factory over a database with no tables, so every query fails."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def attempt_store(session_factory, clock):
    return LoginAttemptStore(session_factory, clock=clock)


@pytest.fixture
def account_store(session_factory, clock):
    return AccountStore(session_factory, clock=clock)


@pytest.fixture
def issuer():
    # Real clock: PyJWT checks exp/nbf against wall time.
    return SessionIssuer(JWT_SECRET)


@pytest.fixture
def login_service(attempt_store, account_store, issuer, clock):
    return LoginService(attempt_store, account_store, issuer, clock=clock)


def add_prompt_set(session_factory, set_id, texts_by_language):
    """Store one set; list index is the position, position 0 being the main prompt."""
    positions = max(len(texts) for texts in texts_by_language.values())
    with session_scope(session_factory) as session:
        for position in range(positions):
            prompt = PromptEntry(
                type="main" if position == 0 else "followup",
                prompt_set_id=set_id,
                position=position,
            )
            session.add(prompt)
            session.flush()
            for language, texts in texts_by_language.items():
                if position < len(texts) and texts[position] is not None:
                    session.add(
                        TranslationEntry(
                            prompt_id=prompt.prompt_id,
                            language_code=language,
                            text=texts[position],
                        )
                    )


@pytest.fixture
def prompt_service(session_factory):
    return PromptService(session_factory)
