"""Shared test fixtures.

The app runs against an in-memory SQLite database built from the ORM
metadata; Redis is left unconfigured so rate limiting passes through.
"""

from __future__ import annotations

import os
import tempfile
import uuid
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


def _generate_test_keys() -> None:
    """Write an RSA key pair to a temp dir and point the settings at it."""
    tmpdir = tempfile.mkdtemp(prefix="certprep_test_keys_")
    private_path = os.path.join(tmpdir, "jwt_private.pem")
    public_path = os.path.join(tmpdir, "jwt_public.pem")

    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    with open(private_path, "wb") as f:
        f.write(
            key.private_bytes(
                serialization.Encoding.PEM,
                serialization.PrivateFormat.PKCS8,
                serialization.NoEncryption(),
            )
        )
    with open(public_path, "wb") as f:
        f.write(
            key.public_key().public_bytes(
                serialization.Encoding.PEM,
                serialization.PublicFormat.SubjectPublicKeyInfo,
            )
        )

    os.environ["CERTPREP_JWT_PRIVATE_KEY_PATH"] = private_path
    os.environ["CERTPREP_JWT_PUBLIC_KEY_PATH"] = public_path


# Must run before certprep.main is imported: it builds the app at import time.
_generate_test_keys()
os.environ.setdefault("CERTPREP_ENVIRONMENT", "test")
os.environ.setdefault("CERTPREP_LOG_FORMAT", "console")
os.environ.setdefault("CERTPREP_ACTIVITY_TIMEZONE", "UTC")

from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from certprep.auth.jwt import create_access_token, reset_keys  # noqa: E402
from certprep.auth.password import hash_password  # noqa: E402
from certprep.config import get_settings  # noqa: E402
from certprep.database import Database  # noqa: E402
from certprep.db.base import Base  # noqa: E402
from certprep.db.models import Answer, Certification, KnowledgeArea, Question, User  # noqa: E402
from certprep.main import create_app  # noqa: E402

get_settings.cache_clear()
reset_keys()

TEST_PASSWORD = "SecureP@ss1"


@pytest_asyncio.fixture
async def app():
    """Fresh application with its own in-memory database."""
    application = create_app()
    database = Database(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    application.state.db = database
    application.state.redis = None
    yield application
    await database.dispose()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client talking to the app in-process."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db_session(app) -> AsyncGenerator[AsyncSession, None]:
    """Direct database session for seeding and assertions. Commit what you write."""
    async with app.state.db.session() as session:
        yield session


async def create_user(
    db: AsyncSession,
    email: str = "learner@example.com",
    role: str = "user",
    password: str = TEST_PASSWORD,
) -> User:
    user = User(id=uuid.uuid4(), email=email, password_hash=hash_password(password), role=role, first_name="Test")
    db.add(user)
    await db.commit()
    return user


def bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email, user.role)}"}


@pytest_asyncio.fixture
async def user(db_session: AsyncSession) -> User:
    return await create_user(db_session)


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> User:
    return await create_user(db_session, email="admin@example.com", role="admin")


@pytest.fixture
def auth_headers(user: User) -> dict[str, str]:
    return bearer(user)


@pytest.fixture
def admin_headers(admin: User) -> dict[str, str]:
    return bearer(admin)


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient, auth_headers: dict[str, str]) -> AsyncClient:
    """Client authenticated as a regular learner."""
    client.headers.update(auth_headers)
    return client


@dataclass
class SeededBank:
    certification_id: uuid.UUID
    area_ids: list[uuid.UUID]
    # question id -> (correct answer id, a wrong answer id)
    answer_key: dict[uuid.UUID, tuple[uuid.UUID, uuid.UUID]] = field(default_factory=dict)
    # question id -> knowledge area id
    area_of: dict[uuid.UUID, uuid.UUID] = field(default_factory=dict)


async def seed_bank(
    db: AsyncSession,
    areas: tuple[str, ...] = ("Project Integration Management", "Project Scope Management", "Project Risk Management"),
    per_area: int = 4,
) -> SeededBank:
    """A certification with ``len(areas)`` areas of ``per_area`` questions, four options each."""
    cert = Certification(id=uuid.uuid4(), name="PMP", type="pmp", description="Project Management Professional")
    db.add(cert)
    bank = SeededBank(certification_id=cert.id, area_ids=[])
    for order, name in enumerate(areas, start=1):
        area = KnowledgeArea(id=uuid.uuid4(), certification_id=cert.id, name=name, display_order=order)
        db.add(area)
        bank.area_ids.append(area.id)
        for n in range(per_area):
            question = Question(
                id=uuid.uuid4(),
                certification_id=cert.id,
                knowledge_area_id=area.id,
                question_text=f"{name} question {n + 1}",
                explanation="Because the guide says so.",
                difficulty="medium" if n % 2 == 0 else "hard",
                domain="2. Process",
            )
            db.add(question)
            answers = [
                Answer(id=uuid.uuid4(), question_id=question.id, answer_text=f"Option {i}", is_correct=i == 0,
                       display_order=i)
                for i in range(4)
            ]
            db.add_all(answers)
            bank.answer_key[question.id] = (answers[0].id, answers[1].id)
            bank.area_of[question.id] = area.id
    await db.commit()
    return bank


@pytest_asyncio.fixture
async def bank(db_session: AsyncSession) -> SeededBank:
    return await seed_bank(db_session)


@pytest.fixture
def mock_email_service(monkeypatch):
    """Mock the email service to prevent actual email sending."""
    mock_service = MagicMock()
    mock_service.send_template = AsyncMock(return_value=True)
    mock_service.send_email = AsyncMock(return_value=True)

    monkeypatch.setattr("certprep.auth.router.get_email_service", lambda *a, **kw: mock_service)
    return mock_service


@pytest.fixture
def override_settings(monkeypatch):
    """Set CERTPREP_* variables for one test and rebuild the cached settings."""

    def _apply(**values: str) -> None:
        for key, value in values.items():
            monkeypatch.setenv(f"CERTPREP_{key.upper()}", value)
        get_settings.cache_clear()

    yield _apply
    get_settings.cache_clear()


@pytest.fixture
def test_password() -> str:
    return TEST_PASSWORD


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory for extra users: ``await make_user("other@example.com")``."""

    async def _make(email: str, role: str = "user") -> User:
        return await create_user(db_session, email=email, role=role)

    return _make


@pytest.fixture
def headers_for():
    """Bearer headers for any user."""
    return bearer


@pytest.fixture
def make_bank(db_session: AsyncSession):
    """Factory for additional seeded certifications with a custom area layout."""

    async def _make(**kwargs) -> SeededBank:
        return await seed_bank(db_session, **kwargs)

    return _make
