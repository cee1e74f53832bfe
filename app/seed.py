import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.price import PriceSetting
from app.services.auth_service import ensure_admin_exists
from app.services.pricing import DEFAULT_PRICES, PRICE_DESCRIPTIONS
from app.utils.clock import utc_now_iso


async def seed_prices(session: AsyncSession) -> None:
    result = await session.execute(select(PriceSetting).limit(1))
    if result.scalars().first() is not None:
        return

    now = utc_now_iso()
    for item_type, price in DEFAULT_PRICES.items():
        session.add(PriceSetting(
            id=str(uuid.uuid4()),
            item_type=item_type,
            price=price,
            description=PRICE_DESCRIPTIONS.get(item_type),
            is_active=True,
            updated_at=now,
        ))
    await session.commit()


async def seed_data(session: AsyncSession) -> None:
    await ensure_admin_exists(session)
    await seed_prices(session)
