from sqlalchemy import Column, String, Integer, ForeignKey

from app.database import Base


class Order(Base):
    __tablename__ = "orders"

    id = Column(String, primary_key=True)
    client_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    photoshoot_id = Column(String, ForeignKey("photoshoots.id"), nullable=False)
    order_number = Column(String, nullable=False, unique=True)
    total_amount = Column(Integer, nullable=False)  # cents
    payment_method = Column(String, nullable=False)
    payment_id = Column(String, nullable=True, unique=True)
    installments = Column(Integer, nullable=False, default=1)
    delivery_method = Column(String, nullable=False)
    delivery_address = Column(String, nullable=True)
    status = Column(String, nullable=False, default="awaiting_payment")
    payment_confirmed_at = Column(String, nullable=True)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(String, primary_key=True)
    order_id = Column(String, ForeignKey("orders.id"), nullable=False, index=True)
    # no FK: photos are replaced on every sync, order history must survive it
    photo_id = Column(String, nullable=False)
    format = Column(String, nullable=False)
    print_size = Column(String, nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Integer, nullable=False)  # cents, locked at creation
    created_at = Column(String, nullable=False)
