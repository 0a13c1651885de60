# finance_tracker/security.py

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.hash import bcrypt
from sqlalchemy.orm import Session

from .config import Config
from .database import get_db
from .errors import UnauthorizedError
from .models import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return bcrypt.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.verify(password, hashed)


def create_access_token(user_id: uuid.UUID, expires_in: Optional[timedelta] = None) -> str:
    if expires_in is None:
        expires_in = timedelta(hours=Config.ACCESS_TOKEN_EXPIRE_HOURS)
    now = datetime.now(timezone.utc)
    payload = {"sub": str(user_id), "iat": now, "exp": now + expires_in}
    return jwt.encode(payload, Config.SECRET_KEY, algorithm=Config.TOKEN_ALGORITHM)


def verify_access_token(token: str) -> uuid.UUID:
    """Resolve a bearer token to the user id it was issued for."""
    try:
        payload = jwt.decode(token, Config.SECRET_KEY, algorithms=[Config.TOKEN_ALGORITHM])
        return uuid.UUID(payload["sub"])
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token expired")
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise UnauthorizedError("Invalid token")


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.password):
        logger.info("Failed login attempt for %s", email)
        return None
    return user


# Dependency to get the authenticated user's id from the Authorization header
def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> uuid.UUID:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError("Access token required")

    user_id = verify_access_token(credentials.credentials)
    exists = db.query(User.id).filter(User.id == user_id).first()
    if not exists:
        raise UnauthorizedError("Invalid token")
    return user_id
