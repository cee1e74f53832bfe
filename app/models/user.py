from sqlalchemy import Column, String, Integer

from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    open_id = Column(String, nullable=True, unique=True)
    name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    role = Column(String, nullable=False, default="client")
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    zip_code = Column(String, nullable=True)
    linking_code = Column(String, nullable=True, unique=True)
    consumed_linking_code = Column(String, nullable=True)
    linked_at = Column(String, nullable=True)
    is_linked = Column(Integer, nullable=False, default=0)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)
    last_signed_in = Column(String, nullable=True)
