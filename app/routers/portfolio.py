import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app import repository
from app.database import get_db
from app.dependencies import require_admin
from app.models.portfolio import PortfolioItem
from app.schemas.portfolio import PortfolioItemCreate, PortfolioItemResponse, PortfolioItemUpdate
from app.utils.clock import utc_now_iso
from app.utils.exceptions import NotFoundError
from app.utils.response import success_response

router = APIRouter(prefix="/portfolio", tags=["portfolio"])


def _dump(items: list[PortfolioItem]) -> list[dict]:
    return [PortfolioItemResponse.model_validate(i).model_dump() for i in items]


async def _get_item_or_404(db: AsyncSession, item_id: str) -> PortfolioItem:
    item = await db.get(PortfolioItem, item_id)
    if item is None:
        raise NotFoundError("Item do portfólio não encontrado")
    return item


@router.get("")
async def list_active(db: AsyncSession = Depends(get_db)):
    return success_response(data=_dump(await repository.list_active_portfolio_items(db)))


@router.get("/all", dependencies=[Depends(require_admin)])
async def list_all(db: AsyncSession = Depends(get_db)):
    return success_response(data=_dump(await repository.list_portfolio_items(db)))


@router.post("", status_code=201, dependencies=[Depends(require_admin)])
async def create_item(payload: PortfolioItemCreate, db: AsyncSession = Depends(get_db)):
    now = utc_now_iso()
    item = PortfolioItem(id=str(uuid.uuid4()), is_active=True, created_at=now, updated_at=now, **payload.model_dump())
    db.add(item)
    await db.commit()
    await db.refresh(item)
    return success_response(data=PortfolioItemResponse.model_validate(item).model_dump())


@router.patch("/{item_id}", dependencies=[Depends(require_admin)])
async def update_item(item_id: str, payload: PortfolioItemUpdate, db: AsyncSession = Depends(get_db)):
    item = await _get_item_or_404(db, item_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(item, key, value)
    item.updated_at = utc_now_iso()
    await db.commit()
    await db.refresh(item)
    return success_response(data=PortfolioItemResponse.model_validate(item).model_dump())


@router.delete("/{item_id}", dependencies=[Depends(require_admin)])
async def delete_item(item_id: str, db: AsyncSession = Depends(get_db)):
    item = await _get_item_or_404(db, item_id)
    await db.delete(item)
    await db.commit()
    return success_response(data={"id": item_id})
