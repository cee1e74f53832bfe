from typing import Literal

from pydantic import BaseModel, Field

from app.services.orders import OrderStatus

PhotoFormat = Literal["digital", "digital_printed"]
PrintSize = Literal["10x15", "15x21", "20x25", "20x30"]
PaymentMethod = Literal["pix", "credit", "debit"]
DeliveryMethod = Literal["pickup", "delivery"]


class OrderItemCreate(BaseModel):
    photo_id: str
    format: PhotoFormat
    print_size: PrintSize | None = None
    quantity: int = Field(default=1, ge=1)


class OrderCreate(BaseModel):
    photoshoot_id: str
    items: list[OrderItemCreate]
    payment_method: PaymentMethod
    installments: int = Field(default=1, ge=1, le=12)
    delivery_method: DeliveryMethod
    delivery_address: str | None = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    force: bool = False


class OrderItemResponse(BaseModel):
    id: str
    photo_id: str
    format: str
    print_size: str | None = None
    quantity: int
    unit_price: int

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    id: str
    client_id: str
    photoshoot_id: str
    order_number: str
    total_amount: int
    payment_method: str
    payment_id: str | None = None
    installments: int
    delivery_method: str
    delivery_address: str | None = None
    status: str
    payment_confirmed_at: str | None = None
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}
