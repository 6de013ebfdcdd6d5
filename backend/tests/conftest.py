from __future__ import annotations
import io
import os

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("ENVIRONMENT", "test")

import httpx
import pytest
import pytest_asyncio
from PIL import Image
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from ecolearn.main import app
from ecolearn.db import Base, get_session
from ecolearn.errors import UpstreamFailure
from ecolearn.models.challenge import Challenge
from ecolearn.models.profile import StudentProfile
from ecolearn.security import make_admin_token
from ecolearn.services.admins import create_admin_user
from ecolearn.services.chat import ChatService, get_chat_service
from ecolearn.services.kv import MemoryStore
from ecolearn.services.rate_limit import ChatRateLimiter
from ecolearn.services.storage import get_image_store

CHAT_LIMIT = 3


class FakeImageStore:
    def __init__(self):
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.fail = False

    def put(self, key: str, data: bytes, content_type: str) -> str:
        if self.fail:
            raise UpstreamFailure("Failed to upload photo")
        self.objects[key] = (data, content_type)
        return f"https://img.test/{key}"


class FakeChatModel:
    def __init__(self):
        self.prompts: list[str] = []
        self.reply = "Great question! Composting turns food scraps into soil. 🌱"
        self.error: Exception | None = None

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


def png_bytes(color=(34, 139, 34), size=(32, 32)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def jpeg_bytes(color=(0, 100, 200), size=(32, 32)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="JPEG")
    return buf.getvalue()


def gif_bytes(color=(200, 30, 30), size=(24, 16)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="GIF")
    return buf.getvalue()


async def make_challenge(session, **overrides) -> Challenge:
    fields = dict(
        title="Plant a Tree",
        description="Plant a sapling and photograph it",
        points=50,
        category="Biodiversity",
        week=1,
        is_active=True,
    )
    fields.update(overrides)
    ch = Challenge(**fields)
    session.add(ch)
    await session.commit()
    await session.refresh(ch)
    return ch


async def make_profile(session, user_id: str, **overrides) -> StudentProfile:
    fields = dict(
        user_id=user_id,
        full_name="Asha Rao",
        email=f"{user_id}@example.com",
        school_name="Green Valley High",
        grade="8",
    )
    fields.update(overrides)
    p = StudentProfile(**fields)
    session.add(p)
    await session.commit()
    await session.refresh(p)
    return p


@pytest_asyncio.fixture
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ecolearn-test.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
def image_store():
    return FakeImageStore()


@pytest.fixture
def chat_model():
    return FakeChatModel()


@pytest.fixture
def kv():
    return MemoryStore()


@pytest_asyncio.fixture
async def admin(session):
    return await create_admin_user(session, username="moderator", password="supersecret", full_name="Mod Erator")


@pytest.fixture
def admin_headers(admin):
    return {"Authorization": f"Bearer {make_admin_token(admin.id)}"}


@pytest_asyncio.fixture
async def client(session_factory, image_store, chat_model, kv):
    async def _session():
        async with session_factory() as s:
            yield s

    limiter = ChatRateLimiter(kv, limit=CHAT_LIMIT)
    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_image_store] = lambda: image_store
    app.dependency_overrides[get_chat_service] = lambda: ChatService(kv, chat_model, limiter)
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
