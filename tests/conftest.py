"""Pytest configuration and fixtures."""

from typing import List, Optional

import pytest

from uba_wallet.core.config import UbaConfig
from uba_wallet.core.wallet_types import StoredEvent
from uba_wallet.interfaces.event_store import EventStore
from uba_wallet.storage.memory_store import InMemoryEventStore

TEST_MNEMONIC = (
    "abandon abandon abandon abandon abandon abandon "
    "abandon abandon abandon abandon abandon about"
)
TEST_PRIVATE_KEY = "0000000000000000000000000000000000000000000000000000000000000001"
TEST_RELAYS = ["wss://relay.example.com"]
TEST_EVENT_ID = "1234567890abcdef1234567890abcdef1234567890abcdef1234567890abcdef"


class ForbiddenStore(EventStore):
    """Store double that fails the test on any contact."""

    def __init__(self):
        self.calls: List[str] = []

    async def publish(self, content: str, tags: List[List[str]]) -> str:
        self.calls.append("publish")
        raise AssertionError("publish must not be called")

    async def fetch(self, event_id: str, type_filter: Optional[int] = None) -> Optional[StoredEvent]:
        self.calls.append("fetch")
        raise AssertionError("fetch must not be called")

    async def exists(self, event_id: str) -> bool:
        self.calls.append("exists")
        raise AssertionError("exists must not be called")


@pytest.fixture
def mnemonic() -> str:
    return TEST_MNEMONIC


@pytest.fixture
def config() -> UbaConfig:
    return UbaConfig()


@pytest.fixture
def store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def forbidden_store() -> ForbiddenStore:
    return ForbiddenStore()


@pytest.fixture
def encryption_key() -> bytes:
    return bytes(range(32))
