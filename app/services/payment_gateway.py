"""Mercado Pago checkout API adapter.

Docs: https://www.mercadopago.com.br/developers/en/docs/checkout-api
Amounts cross this boundary in cents and are sent to the gateway in reais.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
from pydantic import BaseModel, ValidationError, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.order import Order
from app.services.orders import OrderStatus, apply_gateway_status, map_gateway_status_to_order_status
from app.utils.exceptions import GatewayUnavailableError, OrderNotPayableError, PaymentInProgressError

logger = logging.getLogger(__name__)


class _TransactionData(BaseModel):
    qr_code: str | None = None
    qr_code_base64: str | None = None
    ticket_url: str | None = None


class _PointOfInteraction(BaseModel):
    transaction_data: _TransactionData | None = None


class GatewayPayment(BaseModel):
    """The subset of a Mercado Pago payment resource this app reads."""

    id: str
    status: str
    status_detail: str | None = None
    transaction_amount: float | None = None
    point_of_interaction: _PointOfInteraction | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


@dataclass(frozen=True)
class PixPayment:
    id: str
    status: str
    qr_code: str
    qr_code_base64: str
    ticket_url: str


@dataclass(frozen=True)
class CardPayment:
    id: str
    status: str
    status_detail: str


@dataclass(frozen=True)
class PaymentStatus:
    id: str
    status: str
    status_detail: str
    transaction_amount: int  # cents


@dataclass(frozen=True)
class WebhookResult:
    payment_id: str
    gateway_status: str
    order_status: OrderStatus


class PaymentGateway(Protocol):
    async def create_pix_payment(
        self, amount: int, description: str, email: str,
        first_name: str | None = None, last_name: str | None = None,
    ) -> PixPayment: ...

    async def create_card_payment(
        self, amount: int, description: str, installments: int, email: str, token: str,
        payment_method_id: str, first_name: str | None = None, last_name: str | None = None,
    ) -> CardPayment: ...

    async def get_payment_status(self, payment_id: str) -> PaymentStatus: ...


def cents_to_reais(amount: int) -> float:
    return round(amount / 100, 2)


def reais_to_cents(amount: float) -> int:
    return int(round(amount * 100))


def _payer(email: str, first_name: str | None, last_name: str | None) -> dict:
    payer = {"email": email}
    if first_name:
        payer["first_name"] = first_name
    if last_name:
        payer["last_name"] = last_name
    return payer


@dataclass
class MercadoPagoGateway:
    access_token: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 15.0

    @classmethod
    def create(cls) -> "MercadoPagoGateway":
        return cls(
            access_token=settings.mercado_pago_access_token,
            base_url=settings.mercado_pago_api_url,
            http_client=httpx.AsyncClient(),
            timeout=settings.http_timeout_seconds,
        )

    async def _request(self, method: str, path: str, json: dict | None = None) -> GatewayPayment:
        if not self.access_token:
            logger.error("MERCADO_PAGO_ACCESS_TOKEN not configured")
            raise GatewayUnavailableError("Pagamentos não configurados")

        headers = {"Authorization": f"Bearer {self.access_token}"}
        if method == "POST":
            headers["X-Idempotency-Key"] = str(uuid.uuid4())

        try:
            response = await self.http_client.request(
                method, f"{self.base_url}{path}", json=json, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
            return GatewayPayment.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            logger.error("Mercado Pago %s %s -> %s: %s", method, path, e.response.status_code, e.response.text[:500])
            raise GatewayUnavailableError() from e
        except httpx.HTTPError as e:
            logger.error("Mercado Pago %s %s failed: %s", method, path, e)
            raise GatewayUnavailableError() from e
        except (ValueError, ValidationError) as e:
            logger.error("Unexpected Mercado Pago payload for %s %s: %s", method, path, e)
            raise GatewayUnavailableError() from e

    async def create_pix_payment(
        self, amount: int, description: str, email: str,
        first_name: str | None = None, last_name: str | None = None,
    ) -> PixPayment:
        payment = await self._request("POST", "/v1/payments", json={
            "transaction_amount": cents_to_reais(amount),
            "description": description,
            "payment_method_id": "pix",
            "payer": _payer(email, first_name, last_name),
        })
        data = (payment.point_of_interaction and payment.point_of_interaction.transaction_data) or _TransactionData()
        return PixPayment(
            id=payment.id,
            status=payment.status,
            qr_code=data.qr_code or "",
            qr_code_base64=data.qr_code_base64 or "",
            ticket_url=data.ticket_url or "",
        )

    async def create_card_payment(
        self, amount: int, description: str, installments: int, email: str, token: str,
        payment_method_id: str, first_name: str | None = None, last_name: str | None = None,
    ) -> CardPayment:
        payment = await self._request("POST", "/v1/payments", json={
            "transaction_amount": cents_to_reais(amount),
            "description": description,
            "installments": installments,
            "payment_method_id": payment_method_id,
            "token": token,
            "payer": _payer(email, first_name, last_name),
        })
        return CardPayment(id=payment.id, status=payment.status, status_detail=payment.status_detail or "")

    async def get_payment_status(self, payment_id: str) -> PaymentStatus:
        payment = await self._request("GET", f"/v1/payments/{payment_id}")
        return PaymentStatus(
            id=payment.id,
            status=payment.status,
            status_detail=payment.status_detail or "",
            transaction_amount=reais_to_cents(payment.transaction_amount or 0),
        )

    async def close(self) -> None:
        await self.http_client.aclose()


async def handle_webhook(gateway: PaymentGateway, topic: str, payment_id: str) -> WebhookResult | None:
    """Re-read the payment from the gateway; the notification body is not trusted."""
    if topic != "payment":
        return None
    payment = await gateway.get_payment_status(payment_id)
    return WebhookResult(
        payment_id=payment.id,
        gateway_status=payment.status,
        order_status=map_gateway_status_to_order_status(payment.status),
    )


async def ensure_order_payable(db: AsyncSession, order: Order, gateway: PaymentGateway) -> None:
    """Raise unless a new payment may be attached to ``order``.

    An order keeps a single ``payment_id`` and webhooks find the order through
    it, so a previous payment is settled at the gateway before it is replaced.
    A payment the customer can still complete blocks a new one.
    """
    if order.payment_id and order.status == OrderStatus.AWAITING_PAYMENT.value:
        previous = await gateway.get_payment_status(order.payment_id)
        await apply_gateway_status(db, order, previous.status)
        if map_gateway_status_to_order_status(previous.status) is OrderStatus.AWAITING_PAYMENT:
            logger.info("Order %s already has pending payment %s", order.id, order.payment_id)
            raise PaymentInProgressError()

    if order.status != OrderStatus.AWAITING_PAYMENT.value:
        raise OrderNotPayableError()
