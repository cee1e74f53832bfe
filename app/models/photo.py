from sqlalchemy import Column, String, Integer
from sqlalchemy import ForeignKey

from app.database import Base


class Photo(Base):
    __tablename__ = "photos"

    id = Column(String, primary_key=True)
    photoshoot_id = Column(String, ForeignKey("photoshoots.id"), nullable=False, index=True)
    filename = Column(String, nullable=False)
    original_url = Column(String, nullable=False)
    thumbnail_url = Column(String, nullable=True)
    watermarked_url = Column(String, nullable=True)
    file_order = Column(Integer, nullable=False)
    created_at = Column(String, nullable=False)
