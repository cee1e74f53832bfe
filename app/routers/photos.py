from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app import repository
from app.database import get_db
from app.dependencies import ensure_owner_or_admin, require_user
from app.models.user import User
from app.routers.photoshoots import get_photoshoot_or_404
from app.schemas.photoshoot import PhotoResponse
from app.utils.response import success_response

router = APIRouter(prefix="/photoshoots", tags=["photos"])


@router.get("/{photoshoot_id}/photos")
async def list_photos(photoshoot_id: str, user: User = Depends(require_user), db: AsyncSession = Depends(get_db)):
    photoshoot = await get_photoshoot_or_404(db, photoshoot_id)
    ensure_owner_or_admin(user, photoshoot.client_id)
    photos = await repository.list_photos_by_photoshoot(db, photoshoot_id)
    return success_response(data=[PhotoResponse.model_validate(p).model_dump() for p in photos])
