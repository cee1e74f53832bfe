from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.models.user import User
from app.services import auth_service
from app.services.drive_client import DriveClient, HttpxDriveClient
from app.services.payment_gateway import MercadoPagoGateway, PaymentGateway
from app.utils.exceptions import ForbiddenError, UnauthenticatedError

_drive_client: HttpxDriveClient | None = None
_payment_gateway: MercadoPagoGateway | None = None


def session_id_from(request: Request) -> str | None:
    return request.cookies.get(settings.session_cookie_name)


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User | None:
    """Anonymous requests resolve to None; routes decide whether that is allowed."""
    return await auth_service.resolve_session(db, session_id_from(request))


async def require_user(user: User | None = Depends(get_current_user)) -> User:
    if user is None:
        raise UnauthenticatedError()
    return user


async def require_admin(user: User = Depends(require_user)) -> User:
    if user.role != "admin":
        raise ForbiddenError("Acesso restrito ao administrador")
    return user


def ensure_owner_or_admin(user: User, owner_id: str) -> None:
    if user.role != "admin" and user.id != owner_id:
        raise ForbiddenError()


def get_drive_client() -> DriveClient:
    global _drive_client
    if _drive_client is None:
        _drive_client = HttpxDriveClient.create()
    return _drive_client


def get_payment_gateway() -> PaymentGateway:
    global _payment_gateway
    if _payment_gateway is None:
        _payment_gateway = MercadoPagoGateway.create()
    return _payment_gateway


async def close_http_clients() -> None:
    global _drive_client, _payment_gateway
    if _drive_client is not None:
        await _drive_client.close()
        _drive_client = None
    if _payment_gateway is not None:
        await _payment_gateway.close()
        _payment_gateway = None
