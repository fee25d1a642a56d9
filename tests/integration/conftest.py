import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio

from app.config.settings import Settings
from app.database.connection import apply_schema, close_pool, get_connection, init_pool


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "proofshare_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest_asyncio.fixture
async def integration_pool(test_settings: Settings) -> AsyncGenerator[None, None]:
    try:
        await init_pool(test_settings)
        await apply_schema()
    except Exception as e:
        await close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to point at one.")
    try:
        yield
    finally:
        await close_pool()


@pytest_asyncio.fixture
async def integration_cleanup(integration_pool: None) -> AsyncGenerator[list[int], None]:
    """Collects files.id values to delete after the test."""
    cleanup: list[int] = []
    yield cleanup
    if not cleanup:
        return
    async with get_connection() as conn:
        await conn.execute("DELETE FROM files WHERE id = ANY(%s)", (cleanup,))
        await conn.commit()
