# Fichier: tuvung/core/security.py

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt

from tuvung.core.config import settings

# Supabase signs access tokens with the project JWT secret.
ALGORITHM = "HS256"

logger = logging.getLogger(__name__)


def create_access_token(
    subject: str,
    email: Optional[str] = None,
    expires_delta: timedelta = None,
    role: str = "authenticated",
) -> str:
    """Mint a token shaped like a Supabase access token (local dev and tests)."""
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode: Dict[str, Any] = {
        "exp": expire,
        "sub": str(subject),
        "aud": settings.SUPABASE_JWT_AUDIENCE,
        "role": role,
    }
    if email:
        to_encode["email"] = email
    return jwt.encode(to_encode, settings.SUPABASE_JWT_SECRET, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and verify a Supabase access token.

    Raises ``jose.ExpiredSignatureError`` / ``jose.JWTError`` on failure; the
    dependency layer maps them to HTTP errors.
    """
    return jwt.decode(
        token,
        settings.SUPABASE_JWT_SECRET,
        algorithms=[ALGORITHM],
        audience=settings.SUPABASE_JWT_AUDIENCE,
    )
