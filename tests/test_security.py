from datetime import datetime, timedelta, timezone

import jwt
import pytest

from core.errors import InvalidArgument, Unauthorized
from core.security import TokenIssuer, hash_password, verify_password


def test_password_hash_is_salted_and_verifiable():
    first = hash_password("secret12", rounds=4)
    second = hash_password("secret12", rounds=4)

    assert first != second
    assert "secret12" not in first
    assert verify_password("secret12", first)
    assert verify_password("secret12", second)
    assert not verify_password("secret13", first)


def test_password_over_bcrypt_limit_is_rejected():
    with pytest.raises(InvalidArgument):
        hash_password("x" * 73, rounds=4)
    assert not verify_password("x" * 73, hash_password("x" * 72, rounds=4))


def test_verify_password_with_garbage_hash():
    assert not verify_password("secret12", "not-a-bcrypt-hash")


def test_issue_and_verify_round_trip():
    issuer = TokenIssuer("k")
    identity = issuer.verify(issuer.issue(7, "alice"))
    assert identity.user_id == 7
    assert identity.username == "alice"


def test_token_claims_shape():
    issuer = TokenIssuer("k")
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    token = issuer.issue(7, "alice", now=now)

    claims = jwt.decode(token, "k", algorithms=["HS256"], options={"verify_exp": False})
    assert claims["user_id"] == 7
    assert claims["username"] == "alice"
    assert claims["exp"] - claims["iat"] == 24 * 3600


def test_token_accepted_one_hour_after_issue():
    issuer = TokenIssuer("k")
    issued = datetime.now(timezone.utc) - timedelta(hours=1)
    assert issuer.verify(issuer.issue(1, "alice", now=issued)).user_id == 1


def test_token_rejected_twenty_five_hours_after_issue():
    issuer = TokenIssuer("k")
    issued = datetime.now(timezone.utc) - timedelta(hours=25)
    with pytest.raises(Unauthorized):
        issuer.verify(issuer.issue(1, "alice", now=issued))


def test_token_signed_with_other_secret_is_rejected():
    token = TokenIssuer("other").issue(1, "alice")
    with pytest.raises(Unauthorized):
        TokenIssuer("k").verify(token)


@pytest.mark.parametrize("token", ["", "abc", "a.b.c"])
def test_malformed_token_is_rejected(token):
    with pytest.raises(Unauthorized):
        TokenIssuer("k").verify(token)


def test_token_without_identity_claims_is_rejected():
    now = datetime.now(timezone.utc)
    token = jwt.encode({"iat": now, "exp": now + timedelta(hours=1)}, "k", algorithm="HS256")
    with pytest.raises(Unauthorized):
        TokenIssuer("k").verify(token)


def test_token_without_expiry_is_rejected():
    token = jwt.encode({"user_id": 1, "username": "alice"}, "k", algorithm="HS256")
    with pytest.raises(Unauthorized):
        TokenIssuer("k").verify(token)
