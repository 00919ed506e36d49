import logging

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from auth.utils.auth_utils import create_access_token, decode_access_token, verify_password
from core.database import get_db
from core.exceptions import AuthorizationError, ForbiddenError
from user.models import User
from user.service import get_user, get_user_by_email

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def authenticate(db: Session, token: str) -> User:
    """Resolve a bearer token to the caller's user row (id + role)."""
    try:
        payload = decode_access_token(token)
        user_id = int(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise AuthorizationError("You are not logged-in.")

    user = get_user(db, user_id)
    if user is None:
        raise AuthorizationError("You are not logged-in.")
    # role is read from the row, not the token, so a demotion applies at once
    return user


def login(db: Session, email: str, password: str) -> str:
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt for %s", email)
        raise AuthorizationError("Incorrect email or password.")
    return create_access_token(user.id, user.role.value)


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    try:
        return authenticate(db, token)
    except AuthorizationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_active:
        raise ForbiddenError("Inactive user")
    return current_user
