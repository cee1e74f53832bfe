import os

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from app.config import settings

_ASYNC_DRIVERS = {
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}


def normalize_database_url(url: str) -> str:
    """Swap bare scheme names (as hosting providers hand them out) for the async drivers."""
    scheme, sep, rest = url.partition("://")
    if not sep:
        return url
    return f"{_ASYNC_DRIVERS.get(scheme, scheme)}://{rest}"


def sqlite_path(url: str) -> str | None:
    """File backing a SQLite URL, or None for other backends and in-memory databases."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return None
    if not parsed.database or parsed.database == ":memory:":
        return None
    return parsed.database


_database_url = normalize_database_url(settings.database_url)
_is_sqlite = make_url(_database_url).get_backend_name() == "sqlite"

_engine_kwargs: dict = {"echo": False}
if _is_sqlite:
    # aiosqlite connections are bound to the loop that opened them
    _engine_kwargs.update(poolclass=NullPool)
else:
    _engine_kwargs.update(pool_size=5, max_overflow=10, pool_pre_ping=True)

engine = create_async_engine(_database_url, **_engine_kwargs)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

if _is_sqlite:
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class Base(DeclarativeBase):
    pass


def ensure_database_dir() -> None:
    path = sqlite_path(_database_url)
    if path:
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)


async def create_tables(bind: AsyncEngine | None = None):
    import app.models  # noqa: F401  registers every table on Base.metadata

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    await engine.dispose()


async def get_db():
    async with async_session() as session:
        yield session
