"""Google Drive v3 file listing for public photo folders."""
import logging
from dataclasses import dataclass
from typing import Protocol

import httpx
from pydantic import BaseModel, ValidationError

from app.config import settings
from app.utils.exceptions import SyncUnavailableError

logger = logging.getLogger(__name__)

IMAGE_QUERY = (
    "'{folder_id}' in parents and trashed = false and "
    "(mimeType contains 'image/' or mimeType='image/jpeg' "
    "or mimeType='image/png' or mimeType='image/jpg')"
)
LIST_FIELDS = "nextPageToken,files(id,name,mimeType,webViewLink,webContentLink,thumbnailLink,size)"


class DriveFile(BaseModel):
    id: str
    name: str
    mimeType: str = ""
    webViewLink: str | None = None
    webContentLink: str | None = None
    thumbnailLink: str | None = None
    size: str | None = None


class DriveFileList(BaseModel):
    files: list[DriveFile] = []
    nextPageToken: str | None = None


class DriveClient(Protocol):
    async def list_image_files(self, folder_id: str) -> list[DriveFile]:
        """Return every image in the folder ordered by name."""


@dataclass
class HttpxDriveClient:
    """API-key client; only works for folders shared publicly."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 15.0

    @classmethod
    def create(cls) -> "HttpxDriveClient":
        return cls(
            api_key=settings.google_drive_api_key,
            base_url=settings.google_drive_api_url,
            http_client=httpx.AsyncClient(),
            timeout=settings.http_timeout_seconds,
        )

    async def list_image_files(self, folder_id: str) -> list[DriveFile]:
        if not self.api_key:
            logger.warning("Google Drive API key not configured, listing nothing")
            return []

        files: list[DriveFile] = []
        page_token: str | None = None
        while True:
            params = {
                "q": IMAGE_QUERY.format(folder_id=folder_id),
                "key": self.api_key,
                "fields": LIST_FIELDS,
                "orderBy": "name",
                "pageSize": 1000,
            }
            if page_token:
                params["pageToken"] = page_token

            try:
                response = await self.http_client.get(
                    f"{self.base_url}/files", params=params, timeout=self.timeout
                )
                response.raise_for_status()
                page = DriveFileList.model_validate(response.json())
            except httpx.HTTPError as e:
                logger.error("Drive listing failed for folder %s: %s", folder_id, e)
                raise SyncUnavailableError() from e
            except (ValueError, ValidationError) as e:
                logger.error("Unexpected Drive payload for folder %s: %s", folder_id, e)
                raise SyncUnavailableError() from e

            files.extend(page.files)
            page_token = page.nextPageToken
            if not page_token:
                return files

    async def close(self) -> None:
        await self.http_client.aclose()
