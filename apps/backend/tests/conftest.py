"""Test configuration and fixtures for the HTTP service."""

import os

# Configure the service before casebridge_api is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret")
os.environ.setdefault("FILE_TOKEN_SECRET", "test-file-secret")

import json
import time
from uuid import uuid4

import jwt
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from casebridge.models import Base, Case, CaseStatus, User, UserRole
from casebridge.services import FileTokenSigner, PaymentIntent, PaymentService, WebhookEvent
from casebridge.utils import InvalidSignature
from casebridge_api.api.deps import get_file_token_signer, get_payment_service, get_storage
from casebridge_api.database import get_db
from casebridge_api.main import app
from casebridge_api.services.storage import StorageService

JWT_SECRET = os.environ["JWT_SECRET_KEY"]
FILE_SECRET = os.environ["FILE_TOKEN_SECRET"]
WEBHOOK_SIGNATURE = "valid-signature"


class FakeStripe:
    """Payment processor double keeping intents in memory."""

    def __init__(self):
        self.intents = {}
        self.by_key = {}
        self.fail_next_create = None

    async def create_intent(self, amount_minor, metadata, idempotency_key):
        if self.fail_next_create is not None:
            error, self.fail_next_create = self.fail_next_create, None
            raise error
        if idempotency_key in self.by_key:
            return self.intents[self.by_key[idempotency_key]]
        intent_id = f"pi_{len(self.intents) + 1}"
        self.intents[intent_id] = PaymentIntent(intent_id, f"{intent_id}_secret", "requires_payment_method")
        self.by_key[idempotency_key] = intent_id
        return self.intents[intent_id]

    async def retrieve_intent(self, intent_id):
        return self.intents[intent_id]

    def succeed(self, intent_id):
        self.intents[intent_id] = self.intents[intent_id]._replace(status="succeeded")

    def parse_event(self, payload, signature):
        if signature != WEBHOOK_SIGNATURE:
            raise InvalidSignature("Webhook signature verification failed")
        event = json.loads(payload)
        return WebhookEvent(type=event["type"], object_id=event["data"]["object"].get("id"))


@pytest.fixture
async def session_factory(tmp_path):
    """Session factory over a fresh SQLite file per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'casebridge.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def seed(session_factory):
    """Persist rows in a short-lived session."""
    async def add(*rows):
        async with session_factory() as session:
            session.add_all(rows)
            await session.commit()
        return rows[0] if len(rows) == 1 else rows
    return add


@pytest.fixture
def fetch(session_factory):
    """Read one row in a short-lived session."""
    async def get(model, record_id):
        async with session_factory() as session:
            return await session.get(model, record_id)
    return get


@pytest.fixture
def storage(tmp_path):
    return StorageService(
        str(tmp_path / "uploads"),
        max_size=1024 * 1024,
        allowed_mime_types={"application/pdf", "image/png", "image/jpeg", "image/jpg"},
    )


@pytest.fixture
def stripe_fake():
    return FakeStripe()


@pytest.fixture
def signer():
    return FileTokenSigner(FILE_SECRET)


@pytest.fixture
async def api_client(session_factory, storage, stripe_fake, signer):
    """HTTP client talking to the app in-process."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    payments = PaymentService(stripe_fake)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_payment_service] = lambda: payments
    app.dependency_overrides[get_file_token_signer] = lambda: signer

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client

    app.dependency_overrides.clear()


def bearer(user: User, **claims) -> dict:
    payload = {"sub": user.id, "exp": int(time.time()) + 3600, **claims}
    return {"Authorization": f"Bearer {jwt.encode(payload, JWT_SECRET, algorithm='HS256')}"}


def new_user(role: UserRole, name: str) -> User:
    return User(
        id=str(uuid4()),
        email=f"{name.lower().replace(' ', '.')}@example.com",
        password="hashed",
        name=name,
        role=role,
    )


@pytest.fixture
def auth():
    return bearer


@pytest.fixture
async def client_user(seed):
    return await seed(new_user(UserRole.CLIENT, "Jane Client"))


@pytest.fixture
async def other_client(seed):
    return await seed(new_user(UserRole.CLIENT, "Other Client"))


@pytest.fixture
async def lawyer(seed):
    return await seed(new_user(UserRole.LAWYER, "Larry Lawyer"))


@pytest.fixture
async def second_lawyer(seed):
    return await seed(new_user(UserRole.LAWYER, "Lena Lawyer"))


@pytest.fixture
async def open_case(seed, client_user):
    return await seed(Case(
        id=str(uuid4()),
        title="Contract Dispute Resolution",
        category="Contract Law",
        description="Need help resolving a contract dispute",
        status=CaseStatus.OPEN,
        client_id=client_user.id,
    ))


@pytest.fixture
def submit(api_client, auth):
    """Submit a quote through the API and return its JSON."""
    async def post(case, lawyer, amount="1500.00", days=30, note=None):
        response = await api_client.post(
            f"/quotes/cases/{case.id}",
            json={"amount": amount, "expected_days": days, "note": note},
            headers=auth(lawyer),
        )
        assert response.status_code == 201, response.text
        return response.json()
    return post
