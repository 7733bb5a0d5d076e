"""JWT token generation and validation

Session tokens are stateless HS256 JWTs binding a user id and role to a
fixed 24 hour validity window. There is no refresh and no revocation list:
a token stays valid until it expires even if the user is disabled.

JWT Token Claims Structure:
===========================

- sub (Subject): User ID as UUID string
- role: "admin" | "user", copied from the user record at login
- iat (Issued At): Unix timestamp when token was created
- exp (Expiration): Unix timestamp, iat + 24h

Example Token Payload:
{
  "sub": "550e8400-e29b-41d4-a716-446655440000",
  "role": "user",
  "iat": 1704368400,
  "exp": 1704454800
}
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional
from uuid import UUID
import jwt

from ..config import get_settings

TOKEN_TTL = timedelta(hours=24)
ALGORITHM = "HS256"


def create_access_token(
    user_id: UUID,
    role: str,
    issued_at: Optional[datetime] = None,
) -> str:
    """Create a JWT access token for an authenticated user.

    Args:
        user_id: User's UUID
        role: User's role ("admin" or "user")
        issued_at: Issuance time, defaults to now (UTC)

    Returns:
        str: Signed JWT token
    """
    now = issued_at or datetime.now(timezone.utc)
    expiration = now + TOKEN_TTL

    payload = {
        'sub': str(user_id),  # Subject: user ID
        'role': role,
        'iat': int(now.timestamp()),  # Issued at
        'exp': int(expiration.timestamp())  # Expiration
    }

    return jwt.encode(payload, get_settings().JWT_SECRET, algorithm=ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT token.

    Args:
        token: JWT token string

    Returns:
        dict: Decoded token payload with claims

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or tampered
    """
    return jwt.decode(
        token,
        get_settings().JWT_SECRET,
        algorithms=[ALGORITHM],
        options={"require": ["sub", "exp"]},
    )
