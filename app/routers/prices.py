from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app import repository
from app.database import get_db
from app.dependencies import require_admin
from app.schemas.price import PriceSettingResponse, PriceSettingUpsert
from app.utils.response import success_response

router = APIRouter(prefix="/prices", tags=["prices"])


@router.get("")
async def list_prices(db: AsyncSession = Depends(get_db)):
    settings_rows = await repository.list_active_price_settings(db)
    return success_response(data=[PriceSettingResponse.model_validate(s).model_dump() for s in settings_rows])


@router.put("", dependencies=[Depends(require_admin)])
async def upsert_price(payload: PriceSettingUpsert, db: AsyncSession = Depends(get_db)):
    setting = await repository.upsert_price_setting(db, payload.item_type, payload.price, payload.description)
    return success_response(data=PriceSettingResponse.model_validate(setting).model_dump())
