import asyncio
import os
import tempfile
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

# must be set before app.config is imported
_TEST_DB = os.path.join(tempfile.gettempdir(), f"studio_portal_test_{os.getpid()}.sqlite3")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB}"

ADMIN_EMAIL = "admin@studiomilca.com"


@pytest.fixture(autouse=True, scope="session")
def setup_test_db():
    from app.config import settings
    settings.admin_email = ADMIN_EMAIL
    settings.admin_login_enabled = True
    settings.admin_login_secret = ""
    settings.google_drive_api_key = ""
    settings.mercado_pago_access_token = ""

    if os.path.exists(_TEST_DB):
        os.remove(_TEST_DB)

    from app.database import create_tables, async_session
    from app.seed import seed_data

    async def _setup():
        await create_tables()
        async with async_session() as session:
            await seed_data(session)

    asyncio.run(_setup())
    yield
    if os.path.exists(_TEST_DB):
        os.remove(_TEST_DB)


@pytest_asyncio.fixture
async def db_session():
    """Isolated in-memory database for service-level tests."""
    from app.database import create_tables

    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    await create_tables(engine)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session
    await engine.dispose()


def _http_client() -> AsyncClient:
    from app.main import app
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture
def unique_email():
    def _make(prefix: str = "cliente") -> str:
        return f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"
    return _make


@pytest_asyncio.fixture
async def anon_client():
    async with _http_client() as client:
        yield client


@pytest_asyncio.fixture
async def admin_client():
    async with _http_client() as client:
        response = await client.post("/api/v1/auth/admin-login", json={"email": ADMIN_EMAIL})
        assert response.status_code == 200
        yield client


@pytest_asyncio.fixture
async def new_client(admin_client, unique_email):
    """Factory registering a client through the admin API."""
    async def _create(name: str = "Maria Silva", email: str | None = None) -> dict:
        response = await admin_client.post(
            "/api/v1/clients",
            json={"name": name, "email": email or unique_email()},
        )
        assert response.status_code == 201
        return response.json()["data"]
    return _create


@pytest_asyncio.fixture
async def client_session(new_client):
    """A registered client and an HTTP client logged in as them."""
    record = await new_client()
    async with _http_client() as client:
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": record["email"], "code": record["linking_code"]},
        )
        assert response.status_code == 200
        yield client, record


class FakeDriveClient:
    def __init__(self):
        self.files = []
        self.error: Exception | None = None
        self.calls: list[str] = []

    async def list_image_files(self, folder_id: str):
        self.calls.append(folder_id)
        if self.error is not None:
            raise self.error
        return list(self.files)


@pytest.fixture
def fake_drive():
    from app.main import app
    from app.dependencies import get_drive_client

    drive = FakeDriveClient()
    app.dependency_overrides[get_drive_client] = lambda: drive
    yield drive
    app.dependency_overrides.pop(get_drive_client, None)


class FakeGateway:
    def __init__(self):
        self.statuses: dict[str, str] = {}
        self.created: list[dict] = []
        self.status_requests: list[str] = []
        self.error: Exception | None = None
        # payment ids stay unique across tests sharing the session database
        self._next_id = uuid.uuid4().int % 10**12

    def _new_id(self) -> str:
        self._next_id += 1
        return str(self._next_id)

    async def create_pix_payment(self, amount, description, email, first_name=None, last_name=None):
        from app.services.payment_gateway import PixPayment
        if self.error is not None:
            raise self.error
        payment_id = self._new_id()
        self.statuses[payment_id] = "pending"
        self.created.append({"kind": "pix", "amount": amount, "description": description, "email": email})
        return PixPayment(id=payment_id, status="pending", qr_code="000201", qr_code_base64="aGVsbG8=", ticket_url="https://mp.test/t")

    async def create_card_payment(self, amount, description, installments, email, token,
                                  payment_method_id, first_name=None, last_name=None):
        from app.services.payment_gateway import CardPayment
        if self.error is not None:
            raise self.error
        payment_id = self._new_id()
        self.statuses[payment_id] = "approved"
        self.created.append({"kind": "card", "amount": amount, "installments": installments, "token": token})
        return CardPayment(id=payment_id, status="approved", status_detail="accredited")

    async def get_payment_status(self, payment_id):
        from app.services.payment_gateway import PaymentStatus
        if self.error is not None:
            raise self.error
        self.status_requests.append(payment_id)
        return PaymentStatus(
            id=payment_id,
            status=self.statuses.get(payment_id, "pending"),
            status_detail="",
            transaction_amount=0,
        )


@pytest.fixture
def fake_gateway():
    from app.main import app
    from app.dependencies import get_payment_gateway

    gateway = FakeGateway()
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    yield gateway
    app.dependency_overrides.pop(get_payment_gateway, None)


@pytest_asyncio.fixture
async def synced_photoshoot(admin_client, client_session, fake_drive):
    """A photoshoot owned by the logged-in client, synced with three photos."""
    from app.services.drive_client import DriveFile

    client, record = client_session
    response = await admin_client.post(
        "/api/v1/photoshoots",
        json={"client_id": record["id"], "title": "Ensaio gestante"},
    )
    assert response.status_code == 201
    photoshoot = response.json()["data"]

    fake_drive.files = [
        DriveFile(id="f1", name="IMG_0001.jpg", mimeType="image/jpeg"),
        DriveFile(id="f2", name="IMG_0002.jpg", mimeType="image/jpeg"),
        DriveFile(id="f3", name="IMG_0003.jpg", mimeType="image/jpeg"),
    ]
    response = await admin_client.post(
        f"/api/v1/photoshoots/{photoshoot['id']}/sync",
        json={"google_drive_url": "https://drive.google.com/drive/folders/abc123?usp=sharing"},
    )
    assert response.status_code == 200

    response = await client.get(f"/api/v1/photoshoots/{photoshoot['id']}/photos")
    photos = response.json()["data"]
    return {"client": client, "record": record, "photoshoot": photoshoot, "photos": photos}
