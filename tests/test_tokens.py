from datetime import datetime, timedelta, timezone

import jwt
import pytest

from chatterbox.errors import TokenExpired, TokenInvalid, TokenValidationFailed
from chatterbox.services.tokens import SessionIssuer

from conftest import JWT_SECRET


def _now():
    return datetime.now(timezone.utc)


class TestSessionIssuer:
    def test_issue_and_verify(self, issuer):
        issued = issuer.issue(7, "a@x.com")
        claims = issuer.verify(issued.token)
        assert claims.account_id == 7
        assert claims.email == "a@x.com"
        assert claims.issued_at == int(issued.issued_at.timestamp())

    def test_expiry_is_thirty_days(self, issuer):
        issued = issuer.issue(7, "a@x.com")
        assert issued.expires_at - issued.issued_at == timedelta(days=30)
        payload = jwt.decode(issued.token, options={"verify_signature": False})
        assert payload["exp"] - payload["iat"] == 30 * 24 * 3600
        assert payload["iss"] == "chatterbox-app"

    def test_secret_is_not_embedded(self, issuer):
        issued = issuer.issue(7, "a@x.com")
        payload = jwt.decode(issued.token, options={"verify_signature": False})
        assert JWT_SECRET not in str(payload)

    def test_expired_token(self, issuer):
        old = SessionIssuer(JWT_SECRET, clock=lambda: _now() - timedelta(days=31))
        token = old.issue(7, "a@x.com").token
        with pytest.raises(TokenExpired):
            issuer.verify(token)

    def test_token_signed_with_other_secret(self, issuer):
        other = SessionIssuer("another-secret-0123456789abcdef0123456789")
        token = other.issue(7, "a@x.com").token
        with pytest.raises(TokenInvalid):
            issuer.verify(token)

    @pytest.mark.parametrize("token", ["not-a-token", "a.b.c", ""])
    def test_malformed_token(self, issuer, token):
        with pytest.raises(TokenInvalid):
            issuer.verify(token)

    def test_wrong_issuer(self, issuer):
        foreign = SessionIssuer(JWT_SECRET, issuer="someone-else")
        with pytest.raises(TokenInvalid):
            issuer.verify(foreign.issue(7, "a@x.com").token)

    def test_missing_account_claim(self, issuer):
        now = int(_now().timestamp())
        token = jwt.encode(
            {"email": "a@x.com", "iss": "chatterbox-app", "iat": now, "exp": now + 60},
            JWT_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(TokenInvalid):
            issuer.verify(token)

    def test_token_from_the_future(self, issuer):
        future = SessionIssuer(JWT_SECRET, clock=lambda: _now() + timedelta(days=1))
        with pytest.raises(TokenValidationFailed):
            issuer.verify(future.issue(7, "a@x.com").token)

    def test_missing_secret(self):
        unconfigured = SessionIssuer("")
        assert unconfigured.is_configured() is False
        with pytest.raises(TokenValidationFailed):
            unconfigured.issue(7, "a@x.com")
        with pytest.raises(TokenValidationFailed):
            unconfigured.verify("anything")
