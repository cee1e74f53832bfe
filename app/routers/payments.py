import dataclasses
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app import repository
from app.config import settings
from app.database import get_db
from app.dependencies import ensure_owner_or_admin, get_payment_gateway, require_user
from app.models.order import Order
from app.models.user import User
from app.schemas.payment import CardPaymentRequest, PixPaymentRequest, WebhookNotification
from app.services.orders import apply_gateway_status, map_gateway_status_to_order_status
from app.services.payment_gateway import PaymentGateway, ensure_order_payable, handle_webhook
from app.utils.exceptions import NotFoundError
from app.utils.response import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


async def _get_owned_order(db: AsyncSession, order_id: str, user: User) -> Order:
    order = await db.get(Order, order_id)
    if order is None:
        raise NotFoundError("Pedido não encontrado")
    ensure_owner_or_admin(user, order.client_id)
    return order


def _split_name(name: str | None) -> tuple[str | None, str | None]:
    parts = (name or "").split()
    if not parts:
        return None, None
    return parts[0], " ".join(parts[1:]) or None


def _description(order: Order) -> str:
    return f"Pedido #{order.order_number} - {settings.studio_name}"


@router.post("/pix")
async def create_pix(
    payload: PixPaymentRequest,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    order = await _get_owned_order(db, payload.order_id, user)
    await ensure_order_payable(db, order, gateway)
    first_name, last_name = _split_name(user.name)
    payment = await gateway.create_pix_payment(
        amount=order.total_amount,
        description=_description(order),
        email=user.email or "",
        first_name=first_name,
        last_name=last_name,
    )
    order.payment_id = payment.id
    await db.commit()
    return success_response(data=dataclasses.asdict(payment))


@router.post("/card")
async def create_card(
    payload: CardPaymentRequest,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    order = await _get_owned_order(db, payload.order_id, user)
    await ensure_order_payable(db, order, gateway)
    first_name, last_name = _split_name(user.name)
    payment = await gateway.create_card_payment(
        amount=order.total_amount,
        description=_description(order),
        installments=payload.installments or order.installments,
        email=user.email or "",
        token=payload.token,
        payment_method_id=payload.payment_method_id,
        first_name=first_name,
        last_name=last_name,
    )
    order.payment_id = payment.id
    await db.commit()
    await apply_gateway_status(db, order, payment.status)
    return success_response(data={**dataclasses.asdict(payment), "order_status": order.status})


@router.get("/{payment_id}/status")
async def check_status(
    payment_id: str,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    order = await repository.get_order_by_payment_id(db, payment_id)
    if order is None:
        raise NotFoundError("Pagamento não encontrado")
    ensure_owner_or_admin(user, order.client_id)
    status = await gateway.get_payment_status(payment_id)
    return success_response(data={
        **dataclasses.asdict(status),
        "order_status": map_gateway_status_to_order_status(status.status).value,
    })


@router.post("/webhook")
async def payment_webhook(
    payload: WebhookNotification,
    db: AsyncSession = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    result = await handle_webhook(gateway, payload.topic, payload.id)
    if result is None:
        return success_response(message="Notificação ignorada")

    order = await repository.get_order_by_payment_id(db, result.payment_id)
    if order is None:
        logger.warning("Webhook for unknown payment %s", result.payment_id)
        return success_response(message="Pagamento sem pedido associado")

    changed = await apply_gateway_status(db, order, result.gateway_status)
    return success_response(data={"order_id": order.id, "status": order.status, "changed": changed})
