from sqlalchemy import Column, String, ForeignKey

from app.database import Base


class Photoshoot(Base):
    __tablename__ = "photoshoots"

    id = Column(String, primary_key=True)
    client_id = Column(String, ForeignKey("users.id"), nullable=False)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    google_drive_url = Column(String, nullable=True)
    shoot_date = Column(String, nullable=True)
    status = Column(String, nullable=False, default="pending")
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)
