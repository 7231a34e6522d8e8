"""
Pytest configuration and fixtures for Fieldkit tests
"""

import os
import sys
import tempfile
from collections.abc import AsyncGenerator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH120

# Point settings at throwaway locations BEFORE importing the app
_TEST_DIR = tempfile.mkdtemp(prefix="fieldkit-test-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{os.path.join(_TEST_DIR, 'fieldkit.db')}")  # noqa: PTH118
os.environ.setdefault("FIELDTYPES_CONFIG_FILE", os.path.join(_TEST_DIR, "fieldtypes_config.json"))  # noqa: PTH118
os.environ.setdefault("LOG_JSON", "false")

from fieldkit.database import Base  # noqa: E402
from fieldkit.fieldtypes.builtin import BUILTIN_FIELDTYPES  # noqa: E402
from fieldkit.fieldtypes.registry import FieldtypeRegistry  # noqa: E402
from fieldkit.models.entry import Entry, EntryStatus  # noqa: E402
from fieldkit.store.store import FieldStore  # noqa: E402


@pytest.fixture
def registry() -> FieldtypeRegistry:
    """An empty registry, isolated from the global singleton."""
    return FieldtypeRegistry()


@pytest.fixture
def builtin_registry() -> FieldtypeRegistry:
    """A registry holding every built-in fieldtype."""
    reg = FieldtypeRegistry()
    for fieldtype_cls in BUILTIN_FIELDTYPES:
        fieldtype_cls.register(reg)
    return reg


@pytest.fixture
def store() -> FieldStore:
    return FieldStore()


@pytest.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """
    A session factory bound to a fresh SQLite database seeded with entries.

    File-backed so that concurrent sessions see the same data.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'entries.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        session.add_all(
            [
                Entry(id=1, title="About", slug="about", collection="pages", status=EntryStatus.PUBLISHED),
                Entry(id=2, title="Contact", slug="contact", collection="pages", status=EntryStatus.DRAFT),
                Entry(id=3, title="Hello World", slug="hello-world", collection="blog", status=EntryStatus.PUBLISHED),
            ]
        )
        await session.commit()

    yield factory

    await engine.dispose()


@pytest.fixture
def client():
    """TestClient running the app lifespan (built-ins registered, tables created)."""
    from main import app

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
