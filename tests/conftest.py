"""
Pytest configuration for Lava Show chat backend tests.

Sets up test environment and global fixtures.
"""
import os

import pytest

# Disable config validation during tests
# This allows tests to run without requiring real environment variables
os.environ["VALIDATE_CONFIG"] = "false"

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ["API_KEY"] = "test-api-key"
os.environ["GOOGLE_API_KEY"] = "test-google-api-key"

from lavashow_chat.schemas.context import ConversationContext  # noqa: E402
from lavashow_chat.services.chat_service import ChatService  # noqa: E402
from lavashow_chat.services.session_store import InMemoryTTLStore  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def context():
    """Fresh, empty conversation context."""
    return ConversationContext()


@pytest.fixture
def chat_service(clock):
    """ChatService over in-memory stores driven by the fake clock."""
    return ChatService(
        sessions=InMemoryTTLStore(name="sessions", clock=clock),
        responses=InMemoryTTLStore(name="responses", clock=clock),
        ttl=3600,
    )
