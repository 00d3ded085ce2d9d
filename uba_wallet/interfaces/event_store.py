from abc import ABC, abstractmethod
from typing import List, Optional

from uba_wallet.core.wallet_types import StoredEvent

class EventStore(ABC):
    """Append-only store of tagged text events addressed by id"""

    @abstractmethod
    async def publish(self, content: str, tags: List[List[str]]) -> str:
        """Publish content with tags, return the new event id"""
        pass

    @abstractmethod
    async def fetch(self, event_id: str, type_filter: Optional[int] = None) -> Optional[StoredEvent]:
        """Fetch an event by id, None when no store holds it"""
        pass

    async def exists(self, event_id: str) -> bool:
        return await self.fetch(event_id) is not None

    async def close(self) -> None:
        """Release connections"""
        pass

    async def __aenter__(self) -> 'EventStore':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
