import hashlib
import json
import time
from typing import Dict, List, Optional

from uba_wallet.core.wallet_types import StoredEvent
from uba_wallet.interfaces.event_store import EventStore
from uba_wallet.network.nostr_client import UBA_EVENT_KIND
from uba_wallet.utils.logging import logger

class InMemoryEventStore(EventStore):
    """Process-local event store for offline use and tests.

    Ids are content-addressed (sha256 over pubkey, timestamp, kind, tags,
    content, and a sequence number so identical publishes stay distinct).
    """

    def __init__(self, pubkey: str = "0" * 64, kind: int = UBA_EVENT_KIND):
        self.pubkey = pubkey
        self.kind = kind
        self.events: Dict[str, StoredEvent] = {}
        self.publish_calls = 0
        self.fetch_calls = 0
        self.closed = False
        self._sequence = 0

    def _event_id(self, created_at: int, tags: List[List[str]], content: str) -> str:
        self._sequence += 1
        serialized = json.dumps(
            [self._sequence, self.pubkey, created_at, self.kind, tags, content],
            separators=(',', ':'), ensure_ascii=False
        )
        return hashlib.sha256(serialized.encode('utf-8')).hexdigest()

    async def publish(self, content: str, tags: List[List[str]]) -> str:
        self.publish_calls += 1
        created_at = int(time.time())
        tags = [list(tag) for tag in tags]
        event_id = self._event_id(created_at, tags, content)
        self.events[event_id] = StoredEvent(
            id=event_id,
            content=content,
            tags=tags,
            pubkey=self.pubkey,
            created_at=created_at,
            kind=self.kind,
        )
        logger.debug("Stored event in memory", event_id=event_id)
        return event_id

    async def fetch(self, event_id: str, type_filter: Optional[int] = None) -> Optional[StoredEvent]:
        self.fetch_calls += 1
        event = self.events.get(event_id)
        if event is None:
            return None
        if type_filter is not None and event.kind != type_filter:
            return None
        return event

    async def close(self) -> None:
        self.closed = True

    @property
    def call_count(self) -> int:
        return self.publish_calls + self.fetch_calls
