"""
Fixtures for communications tests.
"""

from unittest.mock import AsyncMock

import pytest


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    return AsyncMock()


@pytest.fixture
def mock_email_client():
    """Email client whose bulk send reports every recipient delivered."""
    client = AsyncMock()
    client.send_bulk_announcement = AsyncMock(side_effect=lambda recipients, **_: len(recipients))
    return client
