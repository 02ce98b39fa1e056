from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from securevault.api.deps import audit_request, get_audit_recorder
from securevault.core.audit import AuditAction, AuditRecorder
from securevault.core.security import (
    close_session,
    get_bearer_token,
    get_current_user,
    hash_password,
    open_session,
    verify_password,
)
from securevault.db.models.user import User
from securevault.db.session import get_db
from securevault.schemas.auth import LoginRequest, RegisterRequest, SessionResponse, UserView

router = APIRouter()


def _uniform_invalid_credentials() -> HTTPException:
    return HTTPException(status_code=400, detail="Invalid credentials")


def _session_ttl(request: Request) -> int:
    return request.app.state.settings.SESSION_TTL_SEC


# ======================================================
# Register
# ======================================================
@router.post("/register", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def register_user(
    payload: RegisterRequest,
    request: Request,
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    email = payload.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        name=payload.name.strip(),
        email=email,
        password_hash=hash_password(payload.password),
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    token = open_session(db, user, _session_ttl(request))

    audit_request(
        audit, request, user.id,
        AuditAction.USER_REGISTERED, f"New user registered: {user.name}",
    )
    return SessionResponse(token=token, user=UserView.model_validate(user))


# ======================================================
# Login
# ======================================================
@router.post("/login", response_model=SessionResponse)
def login(
    payload: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    user = db.query(User).filter(User.email == payload.email.lower()).first()
    if not user or not user.is_active:
        raise _uniform_invalid_credentials()
    if not verify_password(user.password_hash, payload.password):
        raise _uniform_invalid_credentials()

    token = open_session(db, user, _session_ttl(request))

    audit_request(audit, request, user.id, AuditAction.USER_LOGIN, "User logged in")
    return SessionResponse(token=token, user=UserView.model_validate(user))


# ======================================================
# Logout
# ======================================================
@router.post("/logout")
def logout(
    request: Request,
    token: str = Depends(get_bearer_token),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    audit_request(audit, request, user.id, AuditAction.USER_LOGOUT, "User logged out")
    close_session(db, token)
    return {"message": "Logged out"}
