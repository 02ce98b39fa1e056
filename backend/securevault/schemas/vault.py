from datetime import datetime
from typing import Optional

from pydantic import BaseModel


# Field rules are enforced by VaultStore so they also hold outside HTTP
class VaultItemRequest(BaseModel):
    title: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    url: Optional[str] = None
    notes: Optional[str] = None


class VaultItemView(BaseModel):
    """A vault item with its secret fields in plaintext."""

    id: int
    title: str
    username: Optional[str] = None
    password: Optional[str] = None
    url: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class VaultItemDeleted(BaseModel):
    id: int
    title: str
    message: str = "Vault item deleted successfully"
