"""
Stateless session tokens.

Tokens are HS256 JSON Web Tokens: base64url(header).base64url(payload)
signed with HMAC-SHA256 over the first two segments. Nothing is stored
server-side, so a token stays valid until its exp claim passes. There is
no revocation list.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from jose import jwt

from ..utils.clock import as_utc, utc_now
from .models import AuthenticatedUser

ALGORITHM = "HS256"
TOKEN_ISSUER = "IoT_Hub_API"
TOKEN_AUDIENCE = "user"
TOKEN_TTL_HOURS = 24


def issue_token(
    email: str,
    secret: str,
    now: Optional[datetime] = None,
    ttl_hours: int = TOKEN_TTL_HOURS,
    issuer: str = TOKEN_ISSUER,
    audience: str = TOKEN_AUDIENCE,
) -> str:
    """
    Sign a session token for email.

    iat and exp are whole seconds, so an instant here means one second:
    two tokens issued within the same second for the same email are equal.
    """
    issued_at = as_utc(now) if now is not None else utc_now()
    iat = int(issued_at.timestamp())
    claims: Dict[str, Any] = {
        "sub": email,
        "email": email,
        "iss": issuer,
        "aud": audience,
        "iat": iat,
        "exp": iat + int(timedelta(hours=ttl_hours).total_seconds()),
    }
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def verify_token(
    token: str,
    secret: str,
    now: Optional[datetime] = None,
    issuer: str = TOKEN_ISSUER,
    audience: str = TOKEN_AUDIENCE,
) -> Optional[AuthenticatedUser]:
    """
    Return the identity in a token, or None.

    Structure, signature (constant-time HMAC compare inside jose), issuer,
    audience and expiry are all checked; every failure gives the same
    None so callers cannot tell which check failed.
    """
    if not token or not isinstance(token, str) or token.count(".") != 2:
        return None
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            audience=audience,
            issuer=issuer,
            # exp is checked below against the injectable clock
            options={"verify_exp": False},
        )
        current = as_utc(now) if now is not None else utc_now()
        exp = claims.get("exp")
        if not isinstance(exp, (int, float)) or current.timestamp() > exp:
            return None
        email = claims.get("email") or claims.get("sub")
        if not email:
            return None
        return AuthenticatedUser(email=email)
    except Exception:
        return None
