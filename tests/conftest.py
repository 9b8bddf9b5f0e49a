from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.config import Settings
from tests.fakes import SECRET, FakeStream


@pytest.fixture
def settings():
    return Settings(
        gemini_api_key="test-gemini-key",
        internal_api_key=SECRET,
        _env_file=None,
    )


@pytest.fixture
def make_client():
    """Factory for a mocked AsyncOpenAI client whose create() returns ``stream``."""

    def _make_client(stream=None, error=None):
        client = MagicMock()
        if error is not None:
            client.chat.completions.create = AsyncMock(side_effect=error)
        else:
            client.chat.completions.create = AsyncMock(return_value=stream if stream is not None else FakeStream())
        client.close = AsyncMock()
        return client

    return _make_client
