"""FastAPI dependencies for authentication.

Usage:
    @router.get("/documents")
    def list_documents(user: CurrentUser):
        ...
"""

import logging
from typing import Annotated, Optional
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from database import get_db
from models.user import User
from domain.documents.errors import AccessDenied, AuthenticationRequired
from .jwt import decode_token

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is reported through AuthenticationRequired
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Extract and validate the bearer token, returning the authenticated user.

    This dependency:
    1. Extracts Bearer token from Authorization header
    2. Validates token signature and expiration
    3. Loads user from database
    4. Checks user is ACTIVE (not DISABLED)

    Raises:
        AuthenticationRequired: Token missing, invalid, expired, or user unknown
        AccessDenied: User account is disabled
    """
    if credentials is None:
        raise AuthenticationRequired("Authentication required", ["Missing bearer token"])

    try:
        payload = decode_token(credentials.credentials)

        user_id_str = payload.get("sub")
        if not user_id_str:
            raise AuthenticationRequired("Authentication required", ["Invalid token: missing user ID claim"])

        user_id = UUID(user_id_str)

    except jwt.ExpiredSignatureError:
        raise AuthenticationRequired("Authentication required", ["Token has expired"])
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise AuthenticationRequired("Authentication required", ["Invalid token"])
    except ValueError:
        raise AuthenticationRequired("Authentication required", ["Invalid token claims"])

    user = db.get(User, user_id)
    if not user:
        raise AuthenticationRequired("Authentication required", ["User not found"])

    if user.status != "ACTIVE":
        raise AccessDenied("Access denied", ["User account is disabled"])

    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
