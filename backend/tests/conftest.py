"""Test fixtures: in-memory SQLite, local sandbox, fake WebDAV upstream, test client."""

from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cloudmgr.database import get_db
from cloudmgr.main import create_app
from cloudmgr.models.base import Base
from cloudmgr.services import get_file_service, get_webdav_proxy
from cloudmgr.services.file_service import FileService
from cloudmgr.services.webdav_proxy import WebDAVProxy

UPSTREAM_URL = "https://dav.jianguoyun.com/dav/"
USER_AGENT = "WebDAVFS/1.0.0 (0.0.0) CloudMgr/1.0.0"


class FakeUpstream:
    """httpx.MockTransport handler that records requests."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.headers: list[tuple[str, str]] = []
        self.content = b""
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, headers=self.headers, content=self.content)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest_asyncio.fixture
async def db_session():
    """Provide an async in-memory SQLite session for tests."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def local_root(tmp_path) -> Path:
    root = tmp_path / "local"
    root.mkdir()
    return root


@pytest.fixture
def file_service(local_root) -> FileService:
    return FileService(local_root)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def proxy(upstream) -> WebDAVProxy:
    return WebDAVProxy(
        upstream_url=UPSTREAM_URL,
        user_agent=USER_AGENT,
        transport=httpx.MockTransport(upstream),
    )


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, file_service: FileService, proxy: WebDAVProxy):
    """Async test client with DB, storage and proxy dependencies overridden."""
    app = create_app()

    async def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_file_service] = lambda: file_service
    app.dependency_overrides[get_webdav_proxy] = lambda: proxy

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
