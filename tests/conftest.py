"""
Shared fixtures.
"""

from unittest.mock import AsyncMock, patch

import pytest


@pytest.fixture
def no_sleep():
    """Skip the wait between progress checks, counting the polls."""
    with patch(
        "cloudformation_deploy.cloudformation.operation.asyncio.sleep",
        new_callable=AsyncMock,
    ) as mock_sleep:
        yield mock_sleep
