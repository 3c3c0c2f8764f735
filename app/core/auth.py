"""
Authentication Utility - JWT handling.

Provides:
- JWT token creation/verification
- Extraction of the session user id from a bearer token

Only the identity fact matters here: the token's `sub` claim is the session
user id, which app.core.identity resolves to a role-bearing Actor.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import get_settings
from app.core.identity import IdentitySession

settings = get_settings()

# Bearer token extractor; a missing header is reported as NotAuthenticated
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def session_from_credentials(credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[IdentitySession]:
    """Bearer credentials -> IdentitySession, or None when absent or invalid."""
    if credentials is None:
        return None
    payload = decode_token(credentials.credentials)
    if not payload:
        return None
    return IdentitySession(session_user_id=payload.get("sub"))
