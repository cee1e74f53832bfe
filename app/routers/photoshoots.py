import logging
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app import repository
from app.database import get_db
from app.dependencies import ensure_owner_or_admin, get_drive_client, require_admin, require_user
from app.models.photoshoot import Photoshoot
from app.models.user import User
from app.schemas.photoshoot import PhotoshootCreate, PhotoshootResponse, PhotoshootUpdate, PhotoSyncRequest
from app.services.drive_client import DriveClient
from app.services.photo_sync import sync_photos
from app.utils.clock import utc_now_iso
from app.utils.exceptions import NotFoundError
from app.utils.response import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/photoshoots", tags=["photoshoots"])


def _dump(photoshoot: Photoshoot) -> dict:
    return PhotoshootResponse.model_validate(photoshoot).model_dump()


async def get_photoshoot_or_404(db: AsyncSession, photoshoot_id: str) -> Photoshoot:
    photoshoot = await db.get(Photoshoot, photoshoot_id)
    if photoshoot is None:
        raise NotFoundError("Ensaio não encontrado")
    return photoshoot


@router.get("", dependencies=[Depends(require_admin)])
async def list_photoshoots(db: AsyncSession = Depends(get_db)):
    return success_response(data=[_dump(p) for p in await repository.list_photoshoots(db)])


@router.get("/client/{client_id}")
async def list_client_photoshoots(
    client_id: str, user: User = Depends(require_user), db: AsyncSession = Depends(get_db)
):
    ensure_owner_or_admin(user, client_id)
    photoshoots = await repository.list_photoshoots_by_client(db, client_id)
    return success_response(data=[_dump(p) for p in photoshoots])


@router.get("/{photoshoot_id}")
async def get_photoshoot(
    photoshoot_id: str, user: User = Depends(require_user), db: AsyncSession = Depends(get_db)
):
    photoshoot = await get_photoshoot_or_404(db, photoshoot_id)
    ensure_owner_or_admin(user, photoshoot.client_id)
    return success_response(data=_dump(photoshoot))


@router.post("", status_code=201, dependencies=[Depends(require_admin)])
async def create_photoshoot(payload: PhotoshootCreate, db: AsyncSession = Depends(get_db)):
    if await repository.get_user_by_id(db, payload.client_id) is None:
        raise NotFoundError("Cliente não encontrado")

    now = utc_now_iso()
    photoshoot = Photoshoot(
        id=str(uuid.uuid4()),
        status="pending",
        created_at=now,
        updated_at=now,
        **payload.model_dump(),
    )
    db.add(photoshoot)
    await db.commit()
    await db.refresh(photoshoot)
    return success_response(data=_dump(photoshoot))


@router.patch("/{photoshoot_id}", dependencies=[Depends(require_admin)])
async def update_photoshoot(photoshoot_id: str, payload: PhotoshootUpdate, db: AsyncSession = Depends(get_db)):
    photoshoot = await get_photoshoot_or_404(db, photoshoot_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(photoshoot, key, value)
    photoshoot.updated_at = utc_now_iso()
    await db.commit()
    await db.refresh(photoshoot)
    return success_response(data=_dump(photoshoot))


@router.post("/{photoshoot_id}/sync", dependencies=[Depends(require_admin)])
async def sync_photoshoot_photos(
    photoshoot_id: str,
    payload: PhotoSyncRequest,
    db: AsyncSession = Depends(get_db),
    drive: DriveClient = Depends(get_drive_client),
):
    result = await sync_photos(db, photoshoot_id, payload.google_drive_url, drive)

    photoshoot = await get_photoshoot_or_404(db, photoshoot_id)
    photoshoot.status = "available"
    photoshoot.google_drive_url = payload.google_drive_url
    photoshoot.updated_at = utc_now_iso()
    await db.commit()
    logger.info("Photoshoot %s available with %d photos", photoshoot_id, result.count)

    return success_response(
        data={"count": result.count, "photoshoot": _dump(photoshoot)},
        message=f"{result.count} fotos importadas",
    )
