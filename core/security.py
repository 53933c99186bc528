"""
Password hashing and bearer token issuance.

Passwords are hashed with bcrypt; the cost factor comes from ``BCRYPT_ROUNDS``.
Tokens are HS256 JWTs carrying ``user_id``, ``username``, ``iat`` and ``exp``.
They are stateless: there is no revocation list, so a token stays valid for its
whole lifetime no matter what happens to the account afterwards.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache

import bcrypt
import jwt
from fastapi import Request

from core.errors import InvalidArgument, Unauthorized

ALGORITHM = "HS256"
# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


def hash_password(raw_password: str, rounds: int = 12) -> str:
    encoded = raw_password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise InvalidArgument(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(raw_password: str, password_hash: str) -> bool:
    encoded = raw_password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


@lru_cache
def dummy_password_hash(rounds: int) -> str:
    """Hash compared against when the username is unknown, so both login failures cost the same."""
    return hash_password("not-a-real-password", rounds=rounds)


@dataclass(frozen=True)
class AuthIdentity:
    user_id: int
    username: str


class TokenIssuer:
    def __init__(self, secret: str, ttl: timedelta = timedelta(hours=24)):
        self._secret = secret
        self.ttl = ttl

    def issue(self, user_id: int, username: str, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "user_id": user_id,
            "username": username,
            "iat": issued_at,
            "exp": issued_at + self.ttl,
        }
        return jwt.encode(claims, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> AuthIdentity:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise Unauthorized("Token expired")
        except jwt.InvalidTokenError:
            raise Unauthorized("Invalid token")

        user_id = payload.get("user_id")
        username = payload.get("username")
        if not isinstance(user_id, int) or isinstance(user_id, bool) or not isinstance(username, str):
            raise Unauthorized("Invalid token claims")
        return AuthIdentity(user_id=user_id, username=username)


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer
