import datetime as dt
import os
import re
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise


TEST_DB_URL = "sqlite://:memory:"
TEST_SECRET = "test-signing-secret"
os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ["JWT_SECRET"] = TEST_SECRET

from app.config import Settings  # noqa: E402
from app.core import db as db_module  # noqa: E402
from app.core.security import TokenService, hash_password  # noqa: E402
from app.main import app  # noqa: E402
from app.models.user import User  # noqa: E402
from app.services.accounts import AccountManager  # noqa: E402
from app.services.credential_store import CredentialStore  # noqa: E402
from app.services.mailer import Mailer  # noqa: E402

db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL

VERIFY_TOKEN_RE = re.compile(r"verify-email\?token=([A-Za-z0-9_.\-]+)")


class RecordingMailer(Mailer):
    """Keeps sent messages in memory; set ``fail`` to make every send raise."""

    def __init__(self):
        self.sent: list[dict] = []
        self.fail = False

    async def send(self, to: str, subject: str, html: str) -> None:
        if self.fail:
            raise ConnectionError("smtp unavailable")
        self.sent.append({"to": to, "subject": subject, "html": html})

    def last_verification_token(self) -> str:
        for message in reversed(self.sent):
            match = VERIFY_TOKEN_RE.search(message["html"])
            if match:
                return match.group(1)
        raise AssertionError("no verification mail was sent")


class FakeClock:
    """Controllable ``utc_now`` replacement, starting at the real current time."""

    def __init__(self):
        self.now = dt.datetime.now(dt.timezone.utc)

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += dt.timedelta(**kwargs)


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def test_settings():
    return Settings(jwt_secret=TEST_SECRET, frontend_url="http://frontend.test")


@pytest_asyncio.fixture
async def db():
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def accounts(db, mailer, clock, test_settings):
    """AccountManager wired to the test database, a recording mailer and a fake clock."""
    return AccountManager(
        store=CredentialStore(),
        tokens=TokenService(TEST_SECRET, clock=clock),
        mailer=mailer,
        settings=test_settings,
        clock=clock,
    )


@pytest_asyncio.fixture
async def client(accounts):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    Startup hooks are not run; the services are installed on app.state here.
    """
    app.state.accounts = accounts
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest_asyncio.fixture
async def create_user(accounts, clock):
    """
    Factory fixture to create users directly through the store.
    Users are verified unless ``verified=False``.
    """

    async def _create_user(password: str = "UserPass123", verified: bool = True, **profile) -> tuple[User, str]:
        user = await accounts.store.create_member(
            name="Test User",
            email=f"user_{uuid.uuid4().hex[:6]}@example.com",
            password_hash=hash_password(password),
            profile_fields=profile,
            verified_at=clock() if verified else None,
        )
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def auth_header_factory(client):
    """
    Helper fixture to obtain Authorization headers via the login endpoint.
    """

    async def _get_headers(email: str, password: str) -> dict[str, str]:
        resp = await client.post(
            "/auth/loginuser",
            json={"email": email, "password": password},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["data"]["token"]
        return {"Authorization": f"Bearer {token}"}

    return _get_headers
