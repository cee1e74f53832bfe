from sqlalchemy import Column, String, ForeignKey

from app.database import Base


class AccessLog(Base):
    __tablename__ = "access_logs"

    id = Column(String, primary_key=True)
    client_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    action = Column(String, nullable=False)
    details = Column(String, nullable=True)
    ip_address = Column(String, nullable=True)
    created_at = Column(String, nullable=False)
