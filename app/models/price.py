from sqlalchemy import Column, String, Integer, Boolean

from app.database import Base


class PriceSetting(Base):
    __tablename__ = "price_settings"

    id = Column(String, primary_key=True)
    item_type = Column(String, nullable=False, unique=True)
    price = Column(Integer, nullable=False)  # cents
    description = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    updated_at = Column(String, nullable=False)
