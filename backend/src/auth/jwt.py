"""JWT token generation and validation

Bearer tokens are issued by the identity provider; DocVault only validates
them. create_access_token exists for tooling (seed scripts) and tests.

JWT Token Claims Structure:
===========================

- sub (Subject): User ID as UUID string
  Example: "550e8400-e29b-41d4-a716-446655440000"

- iat (Issued At): Unix timestamp when token was created

- exp (Expiration): Unix timestamp when token expires
  (iat + JWT_EXPIRY_MINUTES)

- email: User's email address (informational only)

Security Properties:
- Algorithm: HS256 (HMAC-SHA256 symmetric signing)
- Secret: JWT_SECRET setting (minimum 256 bits in production)
- Stateless validation; the user row is loaded afterwards to check status
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional
from uuid import UUID
import jwt

from config import get_settings


def _get_jwt_secret() -> str:
    """Get JWT_SECRET from settings.

    Raises:
        ValueError: If JWT_SECRET is empty
    """
    secret = get_settings().JWT_SECRET
    if not secret:
        raise ValueError("JWT_SECRET is not set")
    return secret


def create_access_token(
    user_id: UUID,
    email: Optional[str] = None,
    expires_in: Optional[timedelta] = None,
) -> str:
    """Create a signed JWT access token for a user.

    Args:
        user_id: User's UUID
        email: User's email address
        expires_in: Token lifetime (default: JWT_EXPIRY_MINUTES)

    Returns:
        str: Signed JWT token
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expiration = now + (expires_in if expires_in is not None else timedelta(minutes=settings.JWT_EXPIRY_MINUTES))

    payload = {
        'sub': str(user_id),  # Subject: user ID
        'iat': int(now.timestamp()),  # Issued at
        'exp': int(expiration.timestamp())  # Expiration
    }
    if email:
        payload['email'] = email

    return jwt.encode(payload, _get_jwt_secret(), algorithm=settings.JWT_ALGORITHM)


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
    secret = _get_jwt_secret()

    try:
        return jwt.decode(token, secret, algorithms=[get_settings().JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise jwt.ExpiredSignatureError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise jwt.InvalidTokenError(f"Invalid token: {str(e)}")
