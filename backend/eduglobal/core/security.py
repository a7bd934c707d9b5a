"""
Authentication collaborator: resolves the caller before any handler runs.

Tokens are HS256 JWTs issued by the auth service with the user id in "sub".
create_access_token exists for scripts and tests; login itself lives elsewhere.
"""
from datetime import timedelta

import jwt
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from eduglobal.config import settings
from eduglobal.core.clock import utc_now
from eduglobal.core.errors import Forbidden, Unauthorized
from eduglobal.db.session import get_db
from eduglobal.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(user_id: int, expires_in: timedelta = timedelta(days=7)) -> str:
    now = utc_now()
    payload = {"sub": str(user_id), "iat": int(now.timestamp()), "exp": int((now + expires_in).timestamp())}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise Unauthorized("Invalid token")


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None or not credentials.credentials:
        raise Unauthorized()
    payload = decode_token(credentials.credentials)
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise Unauthorized("Invalid token payload")
    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        raise Unauthorized("User not found")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != "admin":
        raise Forbidden("Access denied. Admin only.")
    return user
