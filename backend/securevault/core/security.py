import hashlib
import secrets
from datetime import datetime, timedelta
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from securevault.db.models.auth_session import AuthSession
from securevault.db.models.user import User
from securevault.db.session import get_db

_hasher = PasswordHasher()
_bearer = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    try:
        return _hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def _token_digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def purge_expired_sessions(db: Session, now: Optional[datetime] = None) -> int:
    """Delete expired session rows. Caller commits."""
    now = now or datetime.utcnow()
    return (
        db.query(AuthSession)
        .filter(AuthSession.expires_at < now)
        .delete(synchronize_session=False)
    )


def open_session(db: Session, user: User, ttl_sec: int) -> str:
    """Create a session row for user and return the raw bearer token."""
    token = secrets.token_urlsafe(32)
    now = datetime.utcnow()
    purge_expired_sessions(db, now)
    db.add(
        AuthSession(
            user_id=user.id,
            token_hash=_token_digest(token),
            created_at=now,
            expires_at=now + timedelta(seconds=ttl_sec),
        )
    )
    db.commit()
    return token


def close_session(db: Session, token: str) -> None:
    db.query(AuthSession).filter(AuthSession.token_hash == _token_digest(token)).delete()
    db.commit()


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> str:
    if credentials is None or not credentials.credentials:
        raise _unauthorized()
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
) -> User:
    sess = (
        db.query(AuthSession)
        .filter(AuthSession.token_hash == _token_digest(token))
        .first()
    )
    if not sess or sess.expires_at < datetime.utcnow():
        raise _unauthorized()

    user = db.query(User).filter(User.id == sess.user_id).first()
    if not user or not user.is_active:
        raise _unauthorized()
    return user


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def client_user_agent(request: Request) -> Optional[str]:
    return request.headers.get("user-agent")
