from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from securevault.core.audit import AuditOutcome, AuditRecorder
from securevault.core.crypto_utils import FieldCipher
from securevault.core.security import client_ip, client_user_agent
from securevault.db.session import get_db
from securevault.services.vault_store import VaultStore


def get_cipher(request: Request) -> FieldCipher:
    return request.app.state.cipher


def get_audit_recorder(request: Request) -> AuditRecorder:
    return request.app.state.audit


def get_vault_store(
    db: Session = Depends(get_db),
    cipher: FieldCipher = Depends(get_cipher),
) -> VaultStore:
    return VaultStore(db, cipher)


def audit_request(
    recorder: AuditRecorder,
    request: Request,
    actor: Optional[int],
    action: str,
    description: str,
) -> AuditOutcome:
    return recorder.record(
        actor,
        action,
        description,
        ip_address=client_ip(request),
        user_agent=client_user_agent(request),
    )
