"""Order creation, status workflow and payment status mapping."""
import enum
import logging
import secrets
import time
import uuid
from dataclasses import dataclass
from typing import Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.order import Order, OrderItem
from app.models.photo import Photo
from app.models.photoshoot import Photoshoot
from app.models.user import User
from app.services.pricing import PriceTable, load_price_table, order_total
from app.utils.clock import utc_now_iso
from app.utils.exceptions import (
    EmptyCartError,
    ForbiddenError,
    IllegalStatusTransitionError,
    InvalidPhotoSelectionError,
    MissingDeliveryAddressError,
    MissingPrintSizeError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


class OrderStatus(str, enum.Enum):
    AWAITING_PAYMENT = "awaiting_payment"
    PAYMENT_APPROVED = "payment_approved"
    IN_EDITING = "in_editing"
    EDITING_DONE = "editing_done"
    IN_PRINTING = "in_printing"
    PRINTING_DONE = "printing_done"
    READY_FOR_PICKUP = "ready_for_pickup"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


S = OrderStatus

TERMINAL_STATUSES = frozenset({S.DELIVERED, S.CANCELLED})

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    S.AWAITING_PAYMENT: frozenset({S.PAYMENT_APPROVED, S.CANCELLED}),
    S.PAYMENT_APPROVED: frozenset({S.IN_EDITING, S.CANCELLED}),
    S.IN_EDITING: frozenset({S.EDITING_DONE, S.CANCELLED}),
    S.EDITING_DONE: frozenset({S.IN_PRINTING, S.CANCELLED}),
    S.IN_PRINTING: frozenset({S.PRINTING_DONE, S.CANCELLED}),
    S.PRINTING_DONE: frozenset({S.READY_FOR_PICKUP, S.OUT_FOR_DELIVERY, S.CANCELLED}),
    S.READY_FOR_PICKUP: frozenset({S.DELIVERED, S.CANCELLED}),
    S.OUT_FOR_DELIVERY: frozenset({S.DELIVERED, S.CANCELLED}),
    S.DELIVERED: frozenset(),
    S.CANCELLED: frozenset(),
}

GATEWAY_STATUS_MAP: dict[str, OrderStatus] = {
    "pending": S.AWAITING_PAYMENT,
    "approved": S.PAYMENT_APPROVED,
    "authorized": S.PAYMENT_APPROVED,
    "in_process": S.AWAITING_PAYMENT,
    "in_mediation": S.AWAITING_PAYMENT,
    "rejected": S.CANCELLED,
    "cancelled": S.CANCELLED,
    "refunded": S.CANCELLED,
    "charged_back": S.CANCELLED,
}


class CartLine(Protocol):
    photo_id: str
    format: str
    print_size: str | None
    quantity: int


@dataclass(frozen=True)
class CreatedOrder:
    order: Order
    items: list[OrderItem]


def can_transition(current: OrderStatus | str, new: OrderStatus | str) -> bool:
    return OrderStatus(new) in ALLOWED_TRANSITIONS[OrderStatus(current)]


def map_gateway_status_to_order_status(gateway_status: str) -> OrderStatus:
    """Unknown gateway statuses never advance an order."""
    return GATEWAY_STATUS_MAP.get(gateway_status, S.AWAITING_PAYMENT)


def generate_order_number(client_id: str) -> str:
    return f"ORD-{int(time.time() * 1000)}-{client_id[:8]}-{secrets.token_hex(3).upper()}"


def apply_status(order: Order, new_status: OrderStatus | str, force: bool = False) -> bool:
    """Move the order to ``new_status``; return False when it already is there.

    ``force`` is the admin override that skips the transition table.
    """
    new_status = OrderStatus(new_status)
    if order.status == new_status.value:
        return False
    if not force and not can_transition(order.status, new_status):
        raise IllegalStatusTransitionError(
            f"Não é possível mudar o pedido de {order.status} para {new_status.value}"
        )
    now = utc_now_iso()
    order.status = new_status.value
    if new_status is S.PAYMENT_APPROVED:
        order.payment_confirmed_at = now
    order.updated_at = now
    return True


async def create_order(
    db: AsyncSession,
    client: User,
    photoshoot_id: str,
    items: Sequence[CartLine],
    payment_method: str,
    installments: int = 1,
    delivery_method: str = "pickup",
    delivery_address: str | None = None,
    price_table: PriceTable | None = None,
) -> CreatedOrder:
    if not items:
        raise EmptyCartError()
    if delivery_method == "delivery" and not (delivery_address or "").strip():
        raise MissingDeliveryAddressError()
    if any(item.format == "digital_printed" and not item.print_size for item in items):
        raise MissingPrintSizeError()

    photoshoot = await db.get(Photoshoot, photoshoot_id)
    if photoshoot is None:
        raise NotFoundError("Ensaio não encontrado")
    if client.role != "admin" and photoshoot.client_id != client.id:
        raise ForbiddenError()

    photo_ids = {item.photo_id for item in items}
    result = await db.execute(
        select(Photo.id).where(Photo.photoshoot_id == photoshoot_id, Photo.id.in_(photo_ids))
    )
    if set(result.scalars().all()) != photo_ids:
        raise InvalidPhotoSelectionError()

    if price_table is None:
        price_table = await load_price_table(db)

    now = utc_now_iso()
    order = Order(
        id=str(uuid.uuid4()),
        client_id=client.id,
        photoshoot_id=photoshoot_id,
        order_number=generate_order_number(client.id),
        payment_method=payment_method,
        installments=installments,
        delivery_method=delivery_method,
        delivery_address=delivery_address if delivery_method == "delivery" else None,
        status=S.AWAITING_PAYMENT.value,
        created_at=now,
        updated_at=now,
    )
    order_items = [
        OrderItem(
            id=str(uuid.uuid4()),
            order_id=order.id,
            photo_id=item.photo_id,
            format=item.format,
            print_size=item.print_size if item.format == "digital_printed" else None,
            quantity=item.quantity,
            unit_price=price_table.unit_price(item.format, item.print_size),
            created_at=now,
        )
        for item in items
    ]
    order.total_amount = order_total((oi.unit_price, oi.quantity) for oi in order_items)

    db.add(order)
    db.add_all(order_items)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Created order %s for client %s: %d items, total %d",
        order.order_number, client.id, len(order_items), order.total_amount,
    )
    return CreatedOrder(order=order, items=order_items)


async def update_order_status(
    db: AsyncSession, order_id: str, new_status: OrderStatus | str, force: bool = False
) -> Order:
    order = await db.get(Order, order_id)
    if order is None:
        raise NotFoundError("Pedido não encontrado")

    previous = order.status
    if apply_status(order, new_status, force=force):
        await db.commit()
        await db.refresh(order)
        logger.info("Order %s: %s -> %s%s", order.id, previous, order.status, " (forced)" if force else "")
    return order


async def apply_gateway_status(db: AsyncSession, order: Order, gateway_status: str) -> bool:
    """Apply a payment notification; transitions not allowed from here are ignored."""
    target = map_gateway_status_to_order_status(gateway_status)
    if order.status == target.value:
        return False
    if not can_transition(order.status, target):
        logger.warning(
            "Ignoring gateway status %s for order %s in status %s",
            gateway_status, order.id, order.status,
        )
        return False
    apply_status(order, target)
    await db.commit()
    await db.refresh(order)
    logger.info("Order %s moved to %s by payment gateway", order.id, order.status)
    return True
