"""
Test Configuration
==================

Pytest configuration with fixtures for unit and integration tests.
Provides test settings, mocked Playwright objects and a live browser session.
"""

import os

os.environ.setdefault("RENDER_ENVIRONMENT", "testing")

import pytest
import pytest_asyncio
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock, patch

from pydantic_settings import SettingsConfigDict

from src.config.settings import Settings
from src.core.exceptions import EngineFatalError
from src.core.session import AutomationSessionManager

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 16
PDF_BYTES = b"%PDF-1.4\n%mock\n"


# Test settings override
class TestSettings(Settings):
    """Test-specific settings."""

    environment: str = "testing"
    debug: bool = True
    log_level: str = "DEBUG"
    playwright_headless: bool = True
    navigation_timeout: int = 15000
    script_timeout: int = 5000
    selector_timeout: int = 1000

    model_config = SettingsConfigDict(env_file=".env.test", env_prefix="RENDER_")


@pytest.fixture(scope="session")
def test_settings() -> TestSettings:
    """Test settings fixture."""
    return TestSettings()


@pytest.fixture(scope="session", autouse=True)
def override_settings(test_settings: TestSettings):
    """Override application settings for testing."""
    with patch("src.config.settings.settings", test_settings):
        yield test_settings


def make_mock_page() -> AsyncMock:
    """Playwright page double with sync members set up as plain mocks."""
    page = AsyncMock()
    page.set_default_timeout = MagicMock()
    page.viewport_size = {"width": 800, "height": 600}
    page.screenshot.return_value = PNG_BYTES
    page.pdf.return_value = PDF_BYTES
    return page


def make_mock_session(page: AsyncMock) -> MagicMock:
    """Playwright browser double whose contexts yield the given page."""
    context = AsyncMock()
    context.new_page.return_value = page

    browser = MagicMock()
    browser.version = "120.0.6099.28"
    browser.is_connected.return_value = True
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()
    return browser


@pytest.fixture
def mock_page() -> AsyncMock:
    """Mock Playwright page."""
    return make_mock_page()


@pytest.fixture
def mock_session(mock_page: AsyncMock) -> MagicMock:
    """Mock Playwright browser serving mock_page."""
    return make_mock_session(mock_page)


@pytest.fixture
def mock_context(mock_session: MagicMock) -> AsyncMock:
    """The browser context mock_session hands out."""
    return mock_session.new_context.return_value


@pytest.fixture
def mock_session_manager(mock_session: MagicMock, test_settings: TestSettings) -> MagicMock:
    """Session manager double that always returns mock_session."""
    manager = MagicMock(spec=AutomationSessionManager)
    manager.settings = test_settings
    manager.acquire = AsyncMock(return_value=mock_session)
    manager.shutdown = AsyncMock()
    manager.is_live = True
    manager.launch_count = 1
    return manager


@pytest_asyncio.fixture
async def live_session_manager(
    test_settings: TestSettings,
) -> AsyncGenerator[AutomationSessionManager, None]:
    """Session manager backed by a real Chromium; skips when none can launch."""
    manager = AutomationSessionManager(test_settings)
    try:
        await manager.acquire()
    except EngineFatalError as e:
        pytest.skip(f"Chromium is not available: {e}")

    yield manager

    await manager.shutdown()


# Pytest configuration
def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on file paths."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
