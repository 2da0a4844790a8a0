"""
Unit Test Fixtures.

Fixtures for unit tests: external dependencies are mocked.
Service tests that need real SQL live under tests/integration.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest


# =============================================================================
# Database Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """Mock AsyncSession with the common methods and an info dict."""
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.execute = AsyncMock()
    session.add = MagicMock()
    session.info = {}
    return session
