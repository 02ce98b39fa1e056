from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.mysql import MEDIUMTEXT
from sqlalchemy.orm import relationship

from securevault.db.base import Base

# TEXT caps at 64 KB on MySQL; base64 ciphertext of long notes needs more
SecretText = Text().with_variant(MEDIUMTEXT(), "mysql")


class VaultItem(Base):
    __tablename__ = "vault_items"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title = Column(String(255), nullable=False)
    url = Column(String(255), nullable=True)

    # AES-GCM encrypted (Base64), NULL when absent
    username = Column(SecretText, nullable=True)
    password = Column(SecretText, nullable=True)
    notes = Column(SecretText, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="vault_items")
