"""
Anon credentials: HS256 JWTs signed with DOUBT_SOLVER_JWT_SECRET.
No login flow. A token only attributes records to a user via its "sub" claim;
requests without a valid token are served anonymously.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from doubt_solver.config import ServerSettings

ALGORITHM = "HS256"
ANON_KEY_EXPIRE_DAYS = 365 * 10


def create_anon_key(subject: str | None = None, secret: str | None = None) -> str:
    secret = secret or ServerSettings.from_env().jwt_secret
    expire = datetime.now(timezone.utc) + timedelta(days=ANON_KEY_EXPIRE_DAYS)
    to_encode: dict[str, Any] = {"role": "anon", "exp": expire}
    if subject:
        to_encode["sub"] = subject
    return jwt.encode(to_encode, secret, algorithm=ALGORITHM)


def decode_token(token: str, secret: str | None = None) -> dict[str, Any] | None:
    secret = secret or ServerSettings.from_env().jwt_secret
    try:
        return jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError:
        return None
