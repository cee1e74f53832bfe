import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app import repository
from app.database import get_db
from app.dependencies import require_admin
from app.models.user import User
from app.schemas.client import AccessLogResponse, ClientCreate, ClientResponse
from app.services.auth_service import new_unique_linking_code
from app.utils.clock import utc_now_iso
from app.utils.exceptions import NotFoundError
from app.utils.response import success_response

router = APIRouter(prefix="/clients", tags=["clients"], dependencies=[Depends(require_admin)])


async def _get_client_or_404(db: AsyncSession, client_id: str) -> User:
    client = await repository.get_user_by_id(db, client_id)
    if client is None:
        raise NotFoundError("Cliente não encontrado")
    return client


@router.get("")
async def list_clients(db: AsyncSession = Depends(get_db)):
    clients = await repository.list_clients(db)
    return success_response(data=[ClientResponse.model_validate(c).model_dump() for c in clients])


@router.get("/{client_id}")
async def get_client(client_id: str, db: AsyncSession = Depends(get_db)):
    client = await _get_client_or_404(db, client_id)
    return success_response(data=ClientResponse.model_validate(client).model_dump())


@router.post("", status_code=201)
async def create_client(payload: ClientCreate, db: AsyncSession = Depends(get_db)):
    now = utc_now_iso()
    client = User(
        id=str(uuid.uuid4()),
        open_id=f"temp_{uuid.uuid4().hex}",
        role="client",
        linking_code=await new_unique_linking_code(db),
        is_linked=0,
        created_at=now,
        updated_at=now,
        **payload.model_dump(),
    )
    db.add(client)
    await db.commit()
    await db.refresh(client)
    return success_response(data=ClientResponse.model_validate(client).model_dump())


@router.post("/{client_id}/linking-code")
async def regenerate_linking_code(client_id: str, db: AsyncSession = Depends(get_db)):
    client = await _get_client_or_404(db, client_id)
    # a fresh code starts a new linking round
    client.linking_code = await new_unique_linking_code(db)
    client.is_linked = 0
    client.linked_at = None
    client.updated_at = utc_now_iso()
    await db.commit()
    return success_response(data={"linking_code": client.linking_code})


@router.get("/{client_id}/access-logs")
async def list_access_logs(client_id: str, db: AsyncSession = Depends(get_db)):
    await _get_client_or_404(db, client_id)
    logs = await repository.list_access_logs_by_client(db, client_id)
    return success_response(data=[AccessLogResponse.model_validate(log).model_dump() for log in logs])
