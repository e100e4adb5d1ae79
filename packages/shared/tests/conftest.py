"""Test configuration and fixtures."""

import os

# Set up test database URL before importing casebridge
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import asyncio
import json
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from casebridge.models import Base, Case, CaseStatus, Quote, QuoteStatus, User, UserRole
from casebridge.services.stripe_processor import PaymentIntent, WebhookEvent
from casebridge.utils import InvalidSignature


@pytest.fixture
async def db_session():
    """Provide a database session backed by a fresh in-memory SQLite database."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


async def make_user(session, role: UserRole, name: str) -> User:
    user = User(
        id=str(uuid4()),
        email=f"{name.lower().replace(' ', '.')}@example.com",
        password="hashed",
        name=name,
        role=role,
    )
    session.add(user)
    await session.commit()
    return user


async def make_quote(session, case: Case, lawyer: User, amount="1500.00", days=30, status=QuoteStatus.PROPOSED) -> Quote:
    quote = Quote(
        id=str(uuid4()),
        case_id=case.id,
        lawyer_id=lawyer.id,
        amount=Decimal(amount),
        expected_days=days,
        status=status,
    )
    session.add(quote)
    await session.commit()
    return quote


async def reload(session, model, record_id):
    """Fetch a row again, discarding whatever the session holds for it."""
    stmt = select(model).where(model.id == record_id).execution_options(populate_existing=True)
    return (await session.execute(stmt)).scalar_one_or_none()


@pytest.fixture
async def client_user(db_session):
    return await make_user(db_session, UserRole.CLIENT, "Jane Client")


@pytest.fixture
async def other_client(db_session):
    return await make_user(db_session, UserRole.CLIENT, "Other Client")


@pytest.fixture
async def lawyer(db_session):
    return await make_user(db_session, UserRole.LAWYER, "Larry Lawyer")


@pytest.fixture
async def second_lawyer(db_session):
    return await make_user(db_session, UserRole.LAWYER, "Lena Lawyer")


@pytest.fixture
async def open_case(db_session, client_user):
    case = Case(
        id=str(uuid4()),
        title="Contract Dispute Resolution",
        category="Contract Law",
        description="Need help resolving a contract dispute",
        status=CaseStatus.OPEN,
        client_id=client_user.id,
    )
    db_session.add(case)
    await db_session.commit()
    return case


class FakeProcessor:
    """In-memory stand-in for Stripe."""

    def __init__(self):
        self.intents = {}
        self.metadata = {}
        self.create_calls = 0
        self.fail_next_create = None
        self.idempotency_keys = []
        self.by_key = {}
        self.delay = 0

    async def create_intent(self, amount_minor, metadata, idempotency_key):
        if self.fail_next_create is not None:
            error, self.fail_next_create = self.fail_next_create, None
            raise error
        self.idempotency_keys.append(idempotency_key)
        # Like Stripe, a repeated key replays the first response
        if idempotency_key in self.by_key:
            return self.intents[self.by_key[idempotency_key]]
        self.create_calls += 1
        intent_id = f"pi_{self.create_calls}"
        self.by_key[idempotency_key] = intent_id
        self.intents[intent_id] = PaymentIntent(
            id=intent_id,
            client_secret=f"{intent_id}_secret",
            status="requires_payment_method",
        )
        self.metadata[intent_id] = dict(metadata, amount=amount_minor)
        await asyncio.sleep(self.delay)
        return self.intents[intent_id]

    async def retrieve_intent(self, intent_id):
        return self.intents[intent_id]

    def set_status(self, intent_id, status):
        self.intents[intent_id] = self.intents[intent_id]._replace(status=status)

    def parse_event(self, payload, signature):
        if signature != "valid-signature":
            raise InvalidSignature("Webhook signature verification failed")
        event = json.loads(payload)
        return WebhookEvent(type=event["type"], object_id=event["data"]["object"].get("id"))


@pytest.fixture
def processor():
    return FakeProcessor()


@pytest.fixture
def quote_factory(db_session):
    async def factory(case, lawyer, amount="1500.00", days=30, status=QuoteStatus.PROPOSED):
        return await make_quote(db_session, case, lawyer, amount=amount, days=days, status=status)
    return factory


@pytest.fixture
def refetch(db_session):
    async def fetch(model, record_id):
        return await reload(db_session, model, record_id)
    return fetch
