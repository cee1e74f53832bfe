import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import async_session, create_tables, dispose_engine, ensure_database_dir
from app.dependencies import close_http_clients
from app.seed import seed_data
from app.routers.auth import router as auth_router
from app.routers.clients import router as clients_router
from app.routers.orders import router as orders_router
from app.routers.payments import router as payments_router
from app.routers.photos import router as photos_router
from app.routers.photoshoots import router as photoshoots_router
from app.routers.portfolio import router as portfolio_router
from app.routers.prices import router as prices_router
from app.utils.exceptions import register_exception_handlers


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ensure_database_dir()
    await create_tables()
    async with async_session() as session:
        await seed_data(session)
    yield
    await close_http_clients()
    await dispose_engine()


app = FastAPI(
    title="Studio Portal API",
    description="Backend API do studio fotográfico: portal do cliente, pedidos e sincronização de fotos",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router, prefix="/api/v1")
app.include_router(portfolio_router, prefix="/api/v1")
app.include_router(clients_router, prefix="/api/v1")
app.include_router(photoshoots_router, prefix="/api/v1")
app.include_router(photos_router, prefix="/api/v1")
app.include_router(orders_router, prefix="/api/v1")
app.include_router(payments_router, prefix="/api/v1")
app.include_router(prices_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    return {"status": "success", "data": {"service": "studio-portal-api", "version": "0.1.0"}, "message": None}
