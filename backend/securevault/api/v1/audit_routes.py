from typing import List

from fastapi import APIRouter, Depends

from securevault.api.deps import get_audit_recorder
from securevault.core.audit import AuditRecorder
from securevault.core.security import get_current_user
from securevault.db.models.user import User
from securevault.schemas.audit import AuditLogView

router = APIRouter(tags=["Audit"])


@router.get("/audit-logs", response_model=List[AuditLogView])
def list_audit_logs(
    user: User = Depends(get_current_user),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    return [AuditLogView.model_validate(log) for log in audit.list(user.id)]
