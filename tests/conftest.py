"""
Inkpress Backend - Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── upload_dir: Temporary directory for file operations
    ├── sample_image_bytes: Fake image content for upload tests
    ├── make_user / make_post: ORM objects that never touch a database
    ├── database: Creates tables on the SQLite test database, drops them after
    └── test_client: HTTPX AsyncClient wired to the app (requires `database`)
"""

import os
import tempfile
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Must run before the first `inkpress` import: settings and the engine are
# built at import time
_test_root = tempfile.mkdtemp(prefix="inkpress_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_test_root}/test.db"
os.environ["SECRET_KEY"] = "test-secret-key-with-at-least-32-bytes!!"
os.environ["UPLOAD_DIR"] = os.path.join(_test_root, "uploads")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_post(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = post
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def upload_dir(tmp_path):
    """A fresh upload directory for each test."""
    directory = tmp_path / "uploads"
    directory.mkdir()
    return str(directory)


@pytest.fixture
def sample_image_bytes():
    """Minimal PNG signature plus a few bytes; content is never decoded."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.fixture
def make_user():
    """Builds transient User rows."""
    from inkpress.models import User

    def _make(username: str = "alice", password_hash: str = "$2b$04$notarealhash"):
        now = datetime.now(timezone.utc)
        return User(
            id=uuid4(),
            username=username,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )

    return _make


@pytest.fixture
def make_post():
    """Builds transient Post rows owned by a given User."""
    from inkpress.models import Post

    def _make(author, title: str = "Hello", summary: str = "s", content: str = "c",
              cover: str = "uploads/abc.png"):
        now = datetime.now(timezone.utc)
        return Post(
            id=uuid4(),
            title=title,
            summary=summary,
            content=content,
            cover=cover,
            author_id=author.id,
            author=author,
            created_at=now,
            updated_at=now,
        )

    return _make


@pytest_asyncio.fixture
async def database():
    """Fresh schema on the SQLite test database for one test."""
    from inkpress.database import create_tables, dispose_engine, drop_tables

    await create_tables()
    yield
    await drop_tables()
    # Pooled aiosqlite connections belong to this test's event loop
    await dispose_engine()


@pytest_asyncio.fixture
async def test_client(database):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    Cookies set by the app (the `token` session cookie) persist on the client
    between requests, like a browser.
    """
    from inkpress.main import create_app

    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
