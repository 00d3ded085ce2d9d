# uba_wallet/network/nostr_client.py
import asyncio
import hashlib
import json
import logging
import secrets
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException
from coincurve import PrivateKey, PublicKeyXOnly

from uba_wallet.core.wallet_types import StoredEvent
from uba_wallet.core.exceptions import (
    KeyDerivationError, NetworkError, NostrRelayError, RateLimitError, UbaTimeoutError
)
from uba_wallet.crypto.key_management import nostr_secret_from_seed
from uba_wallet.interfaces.event_store import EventStore
from uba_wallet.utils.rate_limiter import RateLimiter

logger = logging.getLogger("uba_wallet.NostrClient")

UBA_EVENT_KIND = 30000

class NostrKeys:
    """secp256k1 key pair of a publishing Nostr identity"""

    def __init__(self, secret_key: bytes):
        try:
            self._private_key = PrivateKey(secret_key)
        except ValueError as e:
            raise KeyDerivationError(f"Invalid Nostr secret key: {e}") from e
        self.public_key_xonly = self._private_key.public_key.format(compressed=True)[1:]

    @classmethod
    def generate(cls) -> 'NostrKeys':
        return cls(secrets.token_bytes(32))

    @classmethod
    def from_seed(cls, seed: str) -> 'NostrKeys':
        """Same seed, same identity"""
        return cls(nostr_secret_from_seed(seed))

    @property
    def public_key_hex(self) -> str:
        return self.public_key_xonly.hex()

    def sign(self, message: bytes) -> bytes:
        """BIP340 Schnorr signature over a 32-byte digest"""
        if len(message) != 32:
            raise ValueError(f"BIP340 signing requires a 32-byte digest, got {len(message)} bytes")
        return self._private_key.sign_schnorr(message)

def compute_event_id(pubkey: str, created_at: int, kind: int,
                     tags: List[List[str]], content: str) -> str:
    """NIP-01 id: sha256 of the canonical serialization"""
    serialized = json.dumps(
        [0, pubkey, created_at, kind, tags, content],
        separators=(',', ':'), ensure_ascii=False
    )
    return hashlib.sha256(serialized.encode('utf-8')).hexdigest()

def build_event(keys: NostrKeys, content: str, tags: List[List[str]],
                kind: int = UBA_EVENT_KIND, created_at: Optional[int] = None) -> Dict[str, Any]:
    created_at = int(time.time()) if created_at is None else created_at
    tags = [list(tag) for tag in tags]
    event_id = compute_event_id(keys.public_key_hex, created_at, kind, tags, content)
    return {
        'id': event_id,
        'pubkey': keys.public_key_hex,
        'created_at': created_at,
        'kind': kind,
        'tags': tags,
        'content': content,
        'sig': keys.sign(bytes.fromhex(event_id)).hex(),
    }

def verify_event(event: Dict[str, Any]) -> bool:
    """Check the id matches the content and the signature matches the id"""
    try:
        expected = compute_event_id(
            event['pubkey'], event['created_at'], event['kind'], event['tags'], event['content']
        )
        if expected != event['id']:
            return False
        public_key = PublicKeyXOnly(bytes.fromhex(event['pubkey']))
        return public_key.verify(bytes.fromhex(event['sig']), bytes.fromhex(event['id']))
    except (KeyError, TypeError, ValueError):
        return False

def event_to_stored(event: Dict[str, Any]) -> StoredEvent:
    return StoredEvent(
        id=event['id'],
        content=event['content'],
        tags=[list(tag) for tag in event['tags']],
        pubkey=event['pubkey'],
        created_at=event['created_at'],
        kind=event['kind'],
        sig=event.get('sig', ''),
    )

async def check_relay(url: str, timeout: float = 5) -> bool:
    """True when a websocket handshake with the relay succeeds"""
    try:
        async with websockets.connect(url, open_timeout=timeout, close_timeout=timeout):
            return True
    except (asyncio.TimeoutError, WebSocketException, OSError) as e:
        logger.debug(f"Relay {url} unreachable: {e}")
        return False

class NostrRelayStore(EventStore):
    """Event store backed by a set of Nostr relays.

    Each request opens a short-lived websocket per relay. Publishing succeeds
    when at least one relay acknowledges the event; fetching returns the
    first verified copy.
    """

    def __init__(self, relay_urls: Sequence[str], keys: Optional[NostrKeys] = None,
                 timeout: float = 10, rate_limiter: Optional[RateLimiter] = None):
        if not relay_urls:
            raise NostrRelayError("No relays configured")
        self.relay_urls = list(relay_urls)
        self.keys = keys or NostrKeys.generate()
        self.timeout = timeout
        self.rate_limiter = rate_limiter

    def _check_rate_limit(self, url: str) -> None:
        if self.rate_limiter is not None:
            self.rate_limiter.is_allowed(url)

    async def publish(self, content: str, tags: List[List[str]]) -> str:
        event = build_event(self.keys, content, tags)
        results = await asyncio.gather(
            *(self._publish_to_relay(url, event) for url in self.relay_urls)
        )

        accepted = [url for url, status, _ in results if status == "accepted"]
        if accepted:
            logger.info(f"Event {event['id']} accepted by {len(accepted)}/{len(results)} relays")
            return event['id']

        _raise_for_statuses(results, f"publishing event {event['id']}")
        raise NostrRelayError(f"No relay accepted the event: {_reasons(results)}")

    async def _publish_to_relay(self, url: str, event: Dict[str, Any]) -> Tuple[str, str, str]:
        try:
            self._check_rate_limit(url)
        except RateLimitError as e:
            return url, "rate_limited", str(e)

        try:
            return await asyncio.wait_for(self._send_event(url, event), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Timed out publishing to {url}")
            return url, "timeout", "timed out"
        except (WebSocketException, OSError, ValueError) as e:
            logger.warning(f"Failed to publish to {url}: {e}")
            return url, "error", str(e)

    async def _send_event(self, url: str, event: Dict[str, Any]) -> Tuple[str, str, str]:
        async with websockets.connect(url, open_timeout=self.timeout) as websocket:
            await websocket.send(json.dumps(["EVENT", event], ensure_ascii=False))
            async for raw in websocket:
                message = json.loads(raw)
                if not isinstance(message, list) or not message:
                    continue
                if message[0] == "OK" and len(message) >= 3 and message[1] == event['id']:
                    reason = message[3] if len(message) > 3 else ""
                    if message[2] is True:
                        return url, "accepted", reason
                    return url, "rejected", reason
                if message[0] == "NOTICE":
                    logger.debug(f"Notice from {url}: {message[1:]}")
        return url, "error", "connection closed before acknowledgement"

    async def fetch(self, event_id: str, type_filter: Optional[int] = None) -> Optional[StoredEvent]:
        """First verified copy, or None when a relay answered without it.

        Raises when no relay gave an answer at all, so an outage is never
        mistaken for a missing event.
        """
        kind = UBA_EVENT_KIND if type_filter is None else type_filter
        results = await asyncio.gather(
            *(self._fetch_from_relay(url, event_id, kind) for url in self.relay_urls)
        )
        for _, status, event in results:
            if status == "found":
                return event_to_stored(event)
        if any(status == "missing" for _, status, _ in results):
            return None

        _raise_for_statuses(results, f"fetching event {event_id}")
        raise NetworkError(f"No relay answered for event {event_id}: {_reasons(results)}")

    async def _fetch_from_relay(self, url: str, event_id: str, kind: int) -> Tuple[str, str, Any]:
        try:
            self._check_rate_limit(url)
        except RateLimitError as e:
            logger.warning(str(e))
            return url, "rate_limited", str(e)

        try:
            event = await asyncio.wait_for(self._request_event(url, event_id, kind), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Timed out fetching {event_id} from {url}")
            return url, "timeout", "timed out"
        except (WebSocketException, OSError, ValueError, NetworkError) as e:
            logger.warning(f"Failed to fetch from {url}: {e}")
            return url, "error", str(e)
        if event is None:
            return url, "missing", ""
        return url, "found", event

    async def _request_event(self, url: str, event_id: str, kind: int) -> Optional[Dict[str, Any]]:
        """Event from one relay, None once it reports end of stored events without it"""
        subscription_id = secrets.token_hex(8)
        request = ["REQ", subscription_id, {"ids": [event_id], "kinds": [kind], "limit": 1}]
        found = None
        answered = False

        async with websockets.connect(url, open_timeout=self.timeout) as websocket:
            await websocket.send(json.dumps(request))
            async for raw in websocket:
                message = json.loads(raw)
                if not isinstance(message, list) or len(message) < 2 or message[1] != subscription_id:
                    continue
                if message[0] == "EVENT" and len(message) >= 3:
                    event = message[2]
                    if found is None and isinstance(event, dict) and event.get('id') == event_id:
                        if verify_event(event):
                            found = event
                        else:
                            logger.warning(f"Discarding event with bad id or signature from {url}")
                elif message[0] in ("EOSE", "CLOSED"):
                    answered = True
                    break
            try:
                await websocket.send(json.dumps(["CLOSE", subscription_id]))
            except ConnectionClosed:
                pass

        if found is None and not answered:
            raise NetworkError(f"{url} closed the connection before answering")
        return found

def _reasons(results: Sequence[Tuple[str, str, Any]]) -> str:
    return "; ".join(f"{url}: {reason}" for url, _, reason in results)

def _raise_for_statuses(results: Sequence[Tuple[str, str, Any]], operation: str) -> None:
    """Raise the store error shared by every relay, if there is one"""
    statuses = {status for _, status, _ in results}
    if statuses == {"timeout"}:
        raise UbaTimeoutError(f"All relays timed out {operation}")
    if statuses == {"rate_limited"}:
        raise RateLimitError(f"Rate limit exceeded on every relay {operation}: {_reasons(results)}")
    if statuses == {"error"}:
        raise NetworkError(f"Every relay failed {operation}: {_reasons(results)}")
