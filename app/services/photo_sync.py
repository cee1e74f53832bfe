"""Mirror a Google Drive folder into a photoshoot's photo records."""
import logging
import re
import uuid
from dataclasses import dataclass

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.photo import Photo
from app.models.photoshoot import Photoshoot
from app.services.drive_client import DriveClient
from app.utils.clock import utc_now_iso
from app.utils.exceptions import (
    InvalidFolderUrlError,
    NoImagesFoundError,
    NotFoundError,
    SyncFailedError,
)

logger = logging.getLogger(__name__)

FOLDER_ID_RE = re.compile(r"/folders/([a-zA-Z0-9_-]+)")
DIGITS_RE = re.compile(r"\d+")

THUMBNAIL_WIDTH = 400
PREVIEW_WIDTH = 800


@dataclass(frozen=True)
class SyncResult:
    count: int


def extract_drive_folder_id(url: str) -> str | None:
    """Folder id from URLs like https://drive.google.com/drive/folders/<id>?usp=sharing."""
    match = FOLDER_ID_RE.search(url)
    return match.group(1) if match else None


def extract_file_order(filename: str) -> int:
    """Sort key from the last number in the name: "IMG_0042.jpg" -> 42.

    Names without digits fall back to the sum of their character codes,
    which is stable but carries no meaningful ordering.
    """
    numbers = DIGITS_RE.findall(filename)
    if numbers:
        return int(numbers[-1])
    return sum(ord(ch) for ch in filename)


def thumbnail_url(file_id: str, width: int = THUMBNAIL_WIDTH) -> str:
    return f"https://drive.google.com/thumbnail?id={file_id}&sz=w{width}"


def view_url(file_id: str) -> str:
    return f"https://drive.google.com/file/d/{file_id}/view"


def direct_download_url(file_id: str) -> str:
    return f"https://drive.google.com/uc?export=download&id={file_id}"


async def sync_photos(
    db: AsyncSession,
    photoshoot_id: str,
    drive_folder_url: str,
    drive: DriveClient,
) -> SyncResult:
    """Replace every photo of the photoshoot with the folder's current images.

    Delete and inserts are committed together; on failure the previous set
    is kept. Updating the photoshoot status is left to the caller.
    """
    folder_id = extract_drive_folder_id(drive_folder_url)
    if not folder_id:
        raise InvalidFolderUrlError()

    photoshoot = await db.get(Photoshoot, photoshoot_id)
    if photoshoot is None:
        raise NotFoundError("Ensaio não encontrado")

    files = await drive.list_image_files(folder_id)
    if not files:
        raise NoImagesFoundError()

    logger.info("Syncing %d photos into photoshoot %s", len(files), photoshoot_id)
    now = utc_now_iso()
    try:
        await db.execute(delete(Photo).where(Photo.photoshoot_id == photoshoot_id))
        for f in files:
            db.add(Photo(
                id=str(uuid.uuid4()),
                photoshoot_id=photoshoot_id,
                filename=f.name,
                original_url=view_url(f.id),
                thumbnail_url=thumbnail_url(f.id, THUMBNAIL_WIDTH),
                watermarked_url=thumbnail_url(f.id, PREVIEW_WIDTH),
                file_order=extract_file_order(f.name),
                created_at=now,
            ))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Photo sync failed for photoshoot %s", photoshoot_id)
        raise SyncFailedError() from e

    return SyncResult(count=len(files))
