import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Configure test environment before the app is imported
os.environ.setdefault('DATABASE_URL', 'sqlite+aiosqlite://')
os.environ.setdefault('STORE_BACKEND', 'memory')
os.environ.setdefault('METRICS_ENABLED', '0')

# Ensure the project root is on sys.path when pytest changes CWD to this tests dir
HERE = Path(__file__).resolve()
PKG_ROOT = HERE.parents[2]
if str(PKG_ROOT) not in sys.path:
    sys.path.insert(0, str(PKG_ROOT))

from posts_service.main import app  # noqa: E402
from posts_service.deps import get_store  # noqa: E402
from posts_service.store import MemoryPostStore  # noqa: E402
from posts_service.crud import SqlPostStore  # noqa: E402
from posts_service.models import make_engine, make_sessionmaker  # noqa: E402
from posts_service.core import db_startup, shutdown_connections  # noqa: E402


@asynccontextmanager
async def sqlite_store():
    """SqlPostStore on a private in-memory sqlite database."""
    engine = make_engine('sqlite+aiosqlite://')
    await db_startup(engine)
    try:
        yield SqlPostStore(make_sessionmaker(engine))
    finally:
        await shutdown_connections(engine)


@pytest_asyncio.fixture(params=['memory', 'sql'])
async def store(request):
    if request.param == 'memory':
        yield MemoryPostStore()
    else:
        async with sqlite_store() as s:
            yield s


@pytest_asyncio.fixture
async def client_factory():
    """Build clients whose requests are served by a given store."""
    clients = []

    def make(s):
        app.dependency_overrides[get_store] = lambda: s
        ac = AsyncClient(transport=ASGITransport(app=app), base_url='http://test')
        clients.append(ac)
        return ac

    yield make
    for ac in clients:
        await ac.aclose()
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(store, client_factory):
    return client_factory(store)
