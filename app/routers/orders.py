from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app import repository
from app.database import get_db
from app.dependencies import ensure_owner_or_admin, require_admin, require_user
from app.models.order import Order, OrderItem
from app.models.user import User
from app.schemas.order import OrderCreate, OrderItemResponse, OrderResponse, OrderStatusUpdate
from app.services import orders as order_service
from app.utils.exceptions import NotFoundError
from app.utils.response import success_response

router = APIRouter(prefix="/orders", tags=["orders"])


def _dump(order: Order, items: list[OrderItem] | None = None) -> dict:
    data = OrderResponse.model_validate(order).model_dump()
    if items is not None:
        data["items"] = [OrderItemResponse.model_validate(i).model_dump() for i in items]
    return data


@router.get("", dependencies=[Depends(require_admin)])
async def list_orders(db: AsyncSession = Depends(get_db)):
    return success_response(data=[_dump(o) for o in await repository.list_orders(db)])


@router.get("/client/{client_id}")
async def list_client_orders(client_id: str, user: User = Depends(require_user), db: AsyncSession = Depends(get_db)):
    ensure_owner_or_admin(user, client_id)
    return success_response(data=[_dump(o) for o in await repository.list_orders_by_client(db, client_id)])


@router.get("/{order_id}")
async def get_order(order_id: str, user: User = Depends(require_user), db: AsyncSession = Depends(get_db)):
    order = await db.get(Order, order_id)
    if order is None:
        raise NotFoundError("Pedido não encontrado")
    ensure_owner_or_admin(user, order.client_id)
    items = await repository.list_order_items(db, order_id)
    return success_response(data=_dump(order, items))


@router.post("", status_code=201)
async def create_order(payload: OrderCreate, user: User = Depends(require_user), db: AsyncSession = Depends(get_db)):
    created = await order_service.create_order(
        db,
        user,
        payload.photoshoot_id,
        payload.items,
        payment_method=payload.payment_method,
        installments=payload.installments,
        delivery_method=payload.delivery_method,
        delivery_address=payload.delivery_address,
    )
    return success_response(data={
        "order_number": created.order.order_number,
        "order": _dump(created.order, created.items),
    })


@router.patch("/{order_id}/status", dependencies=[Depends(require_admin)])
async def update_status(order_id: str, payload: OrderStatusUpdate, db: AsyncSession = Depends(get_db)):
    order = await order_service.update_order_status(db, order_id, payload.status, force=payload.force)
    return success_response(data=_dump(order))
