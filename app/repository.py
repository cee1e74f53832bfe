"""Query helpers shared by routers and services.

List readers degrade to an empty result when the database cannot be reached;
single-row lookups and writes let the error propagate.
"""
import functools
import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.access_log import AccessLog
from app.models.order import Order, OrderItem
from app.models.photo import Photo
from app.models.photoshoot import Photoshoot
from app.models.portfolio import PortfolioItem
from app.models.price import PriceSetting
from app.models.user import User
from app.utils.clock import utc_now_iso

logger = logging.getLogger(__name__)


def _empty_on_db_error(fn):
    @functools.wraps(fn)
    async def wrapper(*args, **kwargs):
        try:
            return await fn(*args, **kwargs)
        except SQLAlchemyError:
            logger.warning("Database unavailable in %s, returning empty result", fn.__name__, exc_info=True)
            return []

    return wrapper


# ============ USERS ============

async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    return await db.get(User, user_id)


async def find_client_by_email_and_code(db: AsyncSession, email: str, code: str) -> User | None:
    result = await db.execute(
        select(User).where(
            User.role == "client",
            func.lower(User.email) == email.strip().lower(),
            User.linking_code == code.strip().upper(),
        )
    )
    return result.scalars().first()


async def find_admin_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(
        select(User).where(User.role == "admin", func.lower(User.email) == email.strip().lower())
    )
    return result.scalars().first()


async def find_user_by_linking_code(db: AsyncSession, code: str) -> User | None:
    result = await db.execute(select(User).where(User.linking_code == code))
    return result.scalars().first()


async def find_user_by_consumed_code(db: AsyncSession, code: str) -> User | None:
    result = await db.execute(select(User).where(User.consumed_linking_code == code))
    return result.scalars().first()


async def linking_code_in_use(db: AsyncSession, code: str) -> bool:
    result = await db.execute(select(User.id).where(User.linking_code == code).limit(1))
    return result.first() is not None


async def admin_exists(db: AsyncSession) -> bool:
    result = await db.execute(select(User.id).where(User.role == "admin").limit(1))
    return result.first() is not None


@_empty_on_db_error
async def list_clients(db: AsyncSession) -> list[User]:
    result = await db.execute(
        select(User).where(User.role == "client").order_by(User.created_at.desc())
    )
    return list(result.scalars().all())


# ============ PHOTOSHOOTS / PHOTOS ============

@_empty_on_db_error
async def list_photoshoots(db: AsyncSession) -> list[Photoshoot]:
    result = await db.execute(select(Photoshoot).order_by(Photoshoot.created_at.desc()))
    return list(result.scalars().all())


@_empty_on_db_error
async def list_photoshoots_by_client(db: AsyncSession, client_id: str) -> list[Photoshoot]:
    result = await db.execute(
        select(Photoshoot)
        .where(Photoshoot.client_id == client_id)
        .order_by(Photoshoot.created_at.desc())
    )
    return list(result.scalars().all())


@_empty_on_db_error
async def list_photos_by_photoshoot(db: AsyncSession, photoshoot_id: str) -> list[Photo]:
    result = await db.execute(
        select(Photo)
        .where(Photo.photoshoot_id == photoshoot_id)
        .order_by(Photo.file_order, Photo.filename)
    )
    return list(result.scalars().all())


# ============ ORDERS ============

@_empty_on_db_error
async def list_orders(db: AsyncSession) -> list[Order]:
    result = await db.execute(select(Order).order_by(Order.created_at.desc()))
    return list(result.scalars().all())


@_empty_on_db_error
async def list_orders_by_client(db: AsyncSession, client_id: str) -> list[Order]:
    result = await db.execute(
        select(Order).where(Order.client_id == client_id).order_by(Order.created_at.desc())
    )
    return list(result.scalars().all())


@_empty_on_db_error
async def list_order_items(db: AsyncSession, order_id: str) -> list[OrderItem]:
    result = await db.execute(
        select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.created_at)
    )
    return list(result.scalars().all())


async def get_order_by_payment_id(db: AsyncSession, payment_id: str) -> Order | None:
    result = await db.execute(select(Order).where(Order.payment_id == payment_id))
    return result.scalars().first()


# ============ PORTFOLIO ============

@_empty_on_db_error
async def list_active_portfolio_items(db: AsyncSession) -> list[PortfolioItem]:
    result = await db.execute(
        select(PortfolioItem)
        .where(PortfolioItem.is_active.is_(True))
        .order_by(PortfolioItem.display_order)
    )
    return list(result.scalars().all())


@_empty_on_db_error
async def list_portfolio_items(db: AsyncSession) -> list[PortfolioItem]:
    result = await db.execute(select(PortfolioItem).order_by(PortfolioItem.display_order))
    return list(result.scalars().all())


# ============ PRICES ============

@_empty_on_db_error
async def list_active_price_settings(db: AsyncSession) -> list[PriceSetting]:
    result = await db.execute(
        select(PriceSetting).where(PriceSetting.is_active.is_(True)).order_by(PriceSetting.item_type)
    )
    return list(result.scalars().all())


async def upsert_price_setting(
    db: AsyncSession, item_type: str, price: int, description: str | None = None
) -> PriceSetting:
    result = await db.execute(select(PriceSetting).where(PriceSetting.item_type == item_type))
    setting = result.scalars().first()
    if setting is None:
        setting = PriceSetting(id=str(uuid.uuid4()), item_type=item_type, is_active=True)
        db.add(setting)
    setting.price = price
    if description is not None:
        setting.description = description
    setting.updated_at = utc_now_iso()
    await db.commit()
    await db.refresh(setting)
    return setting


# ============ ACCESS LOGS ============

def add_access_log(
    db: AsyncSession,
    client_id: str,
    action: str,
    details: str | None = None,
    ip_address: str | None = None,
) -> AccessLog:
    """Stage an access log row; the caller owns the commit."""
    log = AccessLog(
        id=str(uuid.uuid4()),
        client_id=client_id,
        action=action,
        details=details,
        ip_address=ip_address,
        created_at=utc_now_iso(),
    )
    db.add(log)
    return log


@_empty_on_db_error
async def list_access_logs_by_client(db: AsyncSession, client_id: str) -> list[AccessLog]:
    result = await db.execute(
        select(AccessLog)
        .where(AccessLog.client_id == client_id)
        .order_by(AccessLog.created_at.desc())
    )
    return list(result.scalars().all())
