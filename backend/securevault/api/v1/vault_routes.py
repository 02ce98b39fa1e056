from typing import List

from fastapi import APIRouter, Depends, Request, status

from securevault.api.deps import audit_request, get_audit_recorder, get_vault_store
from securevault.core.audit import AuditAction, AuditRecorder
from securevault.core.security import get_current_user
from securevault.db.models.user import User
from securevault.schemas.vault import VaultItemDeleted, VaultItemRequest, VaultItemView
from securevault.services.vault_store import VaultStore

router = APIRouter(prefix="/vault", tags=["Vault"])


@router.get("", response_model=List[VaultItemView])
def list_vault(
    request: Request,
    user: User = Depends(get_current_user),
    store: VaultStore = Depends(get_vault_store),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    items = store.list(user.id)
    audit_request(audit, request, user.id, AuditAction.VIEWED_VAULT, "Viewed vault items")
    return items


@router.post("", response_model=VaultItemView, status_code=status.HTTP_201_CREATED)
def create_vault_item(
    payload: VaultItemRequest,
    request: Request,
    user: User = Depends(get_current_user),
    store: VaultStore = Depends(get_vault_store),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    item = store.create(user.id, **payload.model_dump())
    audit_request(
        audit, request, user.id,
        AuditAction.CREATED_VAULT_ITEM, f"Created vault item: {item.title}",
    )
    return item


@router.put("/{item_id}", response_model=VaultItemView)
def update_vault_item(
    item_id: int,
    payload: VaultItemRequest,
    request: Request,
    user: User = Depends(get_current_user),
    store: VaultStore = Depends(get_vault_store),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    item = store.update(user.id, item_id, **payload.model_dump())
    audit_request(
        audit, request, user.id,
        AuditAction.UPDATED_VAULT_ITEM, f"Updated vault item: {item.title}",
    )
    return item


@router.delete("/{item_id}")
def delete_vault_item(
    item_id: int,
    request: Request,
    user: User = Depends(get_current_user),
    store: VaultStore = Depends(get_vault_store),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    deleted: VaultItemDeleted = store.delete(user.id, item_id)
    audit_request(
        audit, request, user.id,
        AuditAction.DELETED_VAULT_ITEM, f"Deleted vault item: {deleted.title}",
    )
    return {"message": deleted.message}
