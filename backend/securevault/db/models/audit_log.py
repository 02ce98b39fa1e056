from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from securevault.db.base import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)

    # no FK: rows must outlive the user they describe
    user_id = Column(Integer, nullable=True, index=True)

    action = Column(String(50), nullable=False)
    description = Column(Text)
    ip_address = Column(String(45))
    user_agent = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
