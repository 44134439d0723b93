"""
Pytest Configuration and Shared Fixtures

Provides settings, temporary storage directories, a storage backend with a
frozen clock, and an async HTTP client bound to the application.
"""

import os
import tempfile
from pathlib import Path
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Test environment setup
os.environ["FILESERVICE_ENVIRONMENT"] = "test"

from app import create_app
from config.settings import Settings, StorageSettings, reload_settings
from data.storage import LocalFileStorage

# Every stored name produced under this clock starts with this prefix
FROZEN_TIME = 1700000000.0
FROZEN_PREFIX = "1700000000000-"


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test component interactions"
    )


# =============================================================================
# Settings Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def reset_settings():
    """Reset cached settings after each test."""
    yield
    reload_settings()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def uploads_dir(temp_dir: Path) -> Path:
    """Generic store location (not created up front)."""
    return temp_dir / "uploads"


@pytest.fixture
def images_dir(temp_dir: Path) -> Path:
    """Image store location (not created up front)."""
    return temp_dir / "public" / "images"


@pytest.fixture
def test_settings(uploads_dir: Path, images_dir: Path) -> Settings:
    """Settings pointing both stores at the temporary directory."""
    return Settings(
        environment="test",
        storage=StorageSettings(uploads_dir=uploads_dir, images_dir=images_dir),
    )


# =============================================================================
# Storage Fixtures
# =============================================================================

def frozen_clock() -> float:
    return FROZEN_TIME


@pytest.fixture
def storage(uploads_dir: Path, images_dir: Path) -> LocalFileStorage:
    """Local storage whose clock never advances."""
    return LocalFileStorage(
        uploads_dir=uploads_dir,
        images_dir=images_dir,
        clock=frozen_clock,
    )


# =============================================================================
# FastAPI App Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def app(test_settings: Settings, storage: LocalFileStorage):
    """Create FastAPI app backed by the temporary stores."""
    app = create_app(settings=test_settings, storage=storage)

    yield app


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
