from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.dependencies import get_current_user, require_user, session_id_from
from app.models.user import User
from app.schemas.auth import AdminLoginRequest, LinkAccountRequest, LoginRequest, UserResponse
from app.services import auth_service
from app.utils.response import success_response

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        max_age=settings.session_max_age_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
        path="/",
    )


def _user_data(user: User | None) -> dict | None:
    return UserResponse.model_validate(user).model_dump() if user is not None else None


@router.post("/login")
async def login(payload: LoginRequest, request: Request, response: Response, db: AsyncSession = Depends(get_db)):
    ip_address = request.client.host if request.client else None
    result = await auth_service.login(db, payload.email, payload.code, ip_address=ip_address)
    _set_session_cookie(response, result.session_id)
    return success_response(data={"user": _user_data(result.user)})


@router.post("/admin-login")
async def admin_login(payload: AdminLoginRequest, response: Response, db: AsyncSession = Depends(get_db)):
    result = await auth_service.login_as_admin(db, payload.email, payload.secret)
    _set_session_cookie(response, result.session_id)
    return success_response(data={"user": _user_data(result.user)})


@router.post("/logout")
async def logout(request: Request, response: Response):
    session_id = session_id_from(request)
    if session_id:
        auth_service.logout(session_id)
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )
    return success_response(message="Sessão encerrada")


@router.get("/me")
async def me(user: User | None = Depends(get_current_user)):
    return success_response(data=_user_data(user))


@router.post("/link-account")
async def link_account(
    payload: LinkAccountRequest,
    request: Request,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    client = await auth_service.link_account(
        db, user, payload.linking_code, session_id=session_id_from(request)
    )
    return success_response(data=_user_data(client), message="Conta vinculada com sucesso")
