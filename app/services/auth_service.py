"""Email + linking-code authentication backed by server-side sessions."""
import logging
import secrets
import string
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app import repository
from app.config import settings
from app.models.user import User
from app.services.session_store import SessionRecord, SessionStore, new_session_id, session_store
from app.utils.clock import utc_now, utc_now_iso
from app.utils.exceptions import (
    AdminNotFoundError,
    CodeAlreadyUsedError,
    CodeNotFoundError,
    EmailMismatchError,
    ForbiddenError,
    InvalidCredentialsError,
)

logger = logging.getLogger(__name__)

LINKING_CODE_ALPHABET = string.ascii_uppercase + string.digits
LINKING_CODE_LENGTH = 6
ADMIN_NAME = "Administrador"


@dataclass(frozen=True)
class LoginResult:
    session_id: str
    user: User


def generate_linking_code() -> str:
    return "".join(secrets.choice(LINKING_CODE_ALPHABET) for _ in range(LINKING_CODE_LENGTH))


async def new_unique_linking_code(db: AsyncSession) -> str:
    while True:
        code = generate_linking_code()
        if not await repository.linking_code_in_use(db, code):
            return code


def _open_session(user: User, store: SessionStore) -> str:
    session_id = new_session_id()
    store.put(session_id, SessionRecord(user_id=user.id, created_at=utc_now()))
    return session_id


async def login(
    db: AsyncSession,
    email: str,
    linking_code: str,
    ip_address: str | None = None,
    store: SessionStore = session_store,
) -> LoginResult:
    """Log a client in with email + linking code (both case-insensitive).

    The code is not consumed here; only `link_account` clears it.
    """
    client = await repository.find_client_by_email_and_code(db, email, linking_code)
    if client is None:
        logger.info("Rejected login for %s", email)
        raise InvalidCredentialsError()

    now = utc_now_iso()
    if not client.is_linked:
        client.is_linked = 1
        client.linked_at = now
    client.last_signed_in = now
    client.updated_at = now
    repository.add_access_log(db, client.id, "login", ip_address=ip_address)
    await db.commit()
    await db.refresh(client)

    session_id = _open_session(client, store)
    logger.info("Client %s logged in", client.id)
    return LoginResult(session_id=session_id, user=client)


async def login_as_admin(
    db: AsyncSession,
    email: str,
    secret: str | None = None,
    store: SessionStore = session_store,
) -> LoginResult:
    """Privileged login by email.

    Only the deployment settings protect this path: it can be switched off
    and, when ``admin_login_secret`` is set, requires that secret too.
    """
    if not settings.admin_login_enabled:
        raise ForbiddenError("Login administrativo desabilitado")
    if settings.admin_login_secret and not secrets.compare_digest(
        (secret or "").encode(), settings.admin_login_secret.encode()
    ):
        raise InvalidCredentialsError()

    admin = await repository.find_admin_by_email(db, email)
    if admin is None:
        raise AdminNotFoundError()

    admin.last_signed_in = utc_now_iso()
    await db.commit()
    await db.refresh(admin)

    session_id = _open_session(admin, store)
    logger.info("Admin %s logged in", admin.id)
    return LoginResult(session_id=session_id, user=admin)


async def link_account(
    db: AsyncSession,
    session_user: User,
    linking_code: str,
    session_id: str | None = None,
    store: SessionStore = session_store,
) -> User:
    """Consume a linking code and move the caller's identity onto the client record."""
    client = await repository.find_user_by_linking_code(db, linking_code)
    if client is None:
        if await repository.find_user_by_consumed_code(db, linking_code) is not None:
            raise CodeAlreadyUsedError()
        raise CodeNotFoundError()

    if client.is_linked:
        raise CodeAlreadyUsedError()

    if client.email and session_user.email and client.email.lower() != session_user.email.lower():
        raise EmailMismatchError()

    if client.id != session_user.id and session_user.open_id:
        open_id = session_user.open_id
        session_user.open_id = None
        # open_id is unique: release it before the client takes it over
        await db.flush()
        client.open_id = open_id

    now = utc_now_iso()
    client.is_linked = 1
    client.linked_at = now
    client.consumed_linking_code = client.linking_code
    client.linking_code = None
    client.updated_at = now
    await db.commit()
    await db.refresh(client)

    if session_id is not None and client.id != session_user.id:
        current = store.get(session_id)
        if current is not None:
            store.put(session_id, SessionRecord(user_id=client.id, created_at=current.created_at))

    logger.info("Linked account %s", client.id)
    return client


def logout(session_id: str, store: SessionStore = session_store) -> None:
    store.delete(session_id)


async def resolve_session(
    db: AsyncSession, session_id: str | None, store: SessionStore = session_store
) -> User | None:
    """Return the user behind a session cookie, or None when anonymous."""
    if not session_id:
        return None
    record = store.get(session_id)
    if record is None:
        return None
    return await repository.get_user_by_id(db, record.user_id)


async def ensure_admin_exists(db: AsyncSession) -> User | None:
    """Create the bootstrap admin when no admin exists; return it if created."""
    if await repository.admin_exists(db):
        return None

    logger.info("No admin found, creating default admin %s", settings.admin_email)
    now = utc_now_iso()
    admin = User(
        id=str(uuid.uuid4()),
        open_id=f"admin_{uuid.uuid4().hex}",
        name=ADMIN_NAME,
        email=settings.admin_email,
        role="admin",
        is_linked=1,
        linked_at=now,
        created_at=now,
        updated_at=now,
    )
    db.add(admin)
    await db.commit()
    return admin
