from typing import Any

from pydantic import BaseModel, Field, field_validator


class PixPaymentRequest(BaseModel):
    order_id: str


class CardPaymentRequest(BaseModel):
    order_id: str
    token: str
    payment_method_id: str
    installments: int | None = Field(default=None, ge=1, le=12)


class WebhookNotification(BaseModel):
    topic: str
    id: str

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value
