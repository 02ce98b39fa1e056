from securevault.db.models.user import User
from securevault.db.models.auth_session import AuthSession
from securevault.db.models.vault_item import VaultItem
from securevault.db.models.audit_log import AuditLog

__all__ = ["User", "AuthSession", "VaultItem", "AuditLog"]
