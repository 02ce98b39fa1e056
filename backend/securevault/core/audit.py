import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from securevault.core.errors import PersistenceError
from securevault.db.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


class AuditAction(str, Enum):
    USER_LOGIN = "user_login"
    USER_LOGOUT = "user_logout"
    USER_REGISTERED = "user_registered"
    VIEWED_VAULT = "viewed_vault"
    CREATED_VAULT_ITEM = "created_vault_item"
    UPDATED_VAULT_ITEM = "updated_vault_item"
    DELETED_VAULT_ITEM = "deleted_vault_item"


@dataclass(frozen=True)
class AuditOutcome:
    """Result of a best-effort audit write. Callers may inspect or drop it."""

    recorded: bool
    log_id: Optional[int] = None
    error: Optional[str] = None


class AuditRecorder:
    """
    Append-only audit trail.

    Each write runs in its own session so it neither joins nor rolls back
    the transaction of the action it describes. record() never raises;
    a failed write comes back as AuditOutcome(recorded=False).
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def record(
        self,
        actor: Optional[int],
        action: str,
        description: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AuditOutcome:
        tag = action.value if isinstance(action, AuditAction) else action
        db = None
        try:
            db = self._session_factory()
            log = AuditLog(
                user_id=actor,
                action=tag,
                description=description,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            db.add(log)
            db.commit()
            return AuditOutcome(recorded=True, log_id=log.id)
        except Exception as exc:
            logger.exception("Audit log error on %s for user %s", tag, actor)
            if db is not None:
                try:
                    db.rollback()
                except SQLAlchemyError:
                    logger.warning("Audit rollback failed", exc_info=True)
            return AuditOutcome(recorded=False, error=str(exc))
        finally:
            if db is not None:
                db.close()

    def list(self, actor: int) -> List[AuditLog]:
        db = self._session_factory()
        try:
            return (
                db.query(AuditLog)
                .filter(AuditLog.user_id == actor)
                .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
                .all()
            )
        except SQLAlchemyError as exc:
            logger.error("Audit log listing failed for user %s: %s", actor, exc)
            raise PersistenceError("Failed to retrieve audit logs") from exc
        finally:
            db.close()
