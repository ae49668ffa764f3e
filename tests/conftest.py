import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["MAIL_USERNAME"] = ""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import menta.models  # noqa: F401
from menta.core.email_utils import get_email_manager
from menta.core.security import create_access_token, get_password_hash
from menta.db.database import get_async_session
from menta.main import app
from menta.models.base import Base
from menta.models.user import User


class FakeMailer:
    """Stands in for EmailManager and records every code it is handed."""

    def __init__(self):
        self.sent = []
        self.fail = False

    async def send_otp_email(self, email, otp_code):
        if self.fail:
            return False
        self.sent.append((email, otp_code))
        return True

    def last_code(self, email):
        codes = [code for sent_to, code in self.sent if sent_to == email]
        return codes[-1] if codes else None


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest_asyncio.fixture
async def client(session_maker, mailer):
    async def override_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    app.dependency_overrides[get_email_manager] = lambda: mailer

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def doctor(session_maker):
    async with session_maker() as session:
        user = User(
            name="Dr. John Doe",
            email="john@example.com",
            hashed_password=get_password_hash("docpass123"),
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


@pytest.fixture
def auth_headers(doctor):
    token = create_access_token(data={"sub": str(doctor.id), "email": doctor.email})
    return {"Authorization": f"Bearer {token}"}
