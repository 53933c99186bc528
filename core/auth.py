from typing import Optional

from fastapi import Depends, Header

from core.errors import Unauthorized
from core.security import AuthIdentity, TokenIssuer, get_token_issuer


def _extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def get_current_user(
    authorization: Optional[str] = Header(None),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthIdentity:
    if not authorization:
        raise Unauthorized("Missing authorization header")

    token = _extract_bearer_token(authorization)
    if not token:
        raise Unauthorized("Invalid authorization header format")

    return issuer.verify(token)
