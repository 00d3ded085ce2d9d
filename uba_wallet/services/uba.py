# uba_wallet/services/uba.py
"""
UBA string handling and the publish / resolve / replace flows.

A UBA is ``UBA:<64-hex event id>`` with an optional ``&label=<value>``
suffix. The event id is the only resolution key: updates publish a new
event tagged ``replaces=<old id>`` and return a new UBA, and the old event
stays resolvable forever.
"""
import asyncio
import dataclasses
import secrets
from contextlib import asynccontextmanager
from typing import List, Optional, Sequence, Union
from urllib.parse import quote, unquote_to_bytes

from uba_wallet.core.config import UbaConfig
from uba_wallet.core.wallet_types import BitcoinAddresses, ParsedUba, StoredEvent
from uba_wallet.core.exceptions import (
    ConfigError, EventNotFoundError, InvalidUbaFormatError, NoteNotFoundError,
    SerializationError, UbaTimeoutError
)
from uba_wallet.crypto.address import AddressDerivation
from uba_wallet.crypto.encryption import encrypt_if_enabled, decrypt_if_needed
from uba_wallet.interfaces.event_store import EventStore
from uba_wallet.network.nostr_client import NostrKeys, NostrRelayStore, UBA_EVENT_KIND
from uba_wallet.utils.helpers import current_timestamp, short_id, strip_uba_prefix
from uba_wallet.utils.logging import logger
from uba_wallet.utils.validation import (
    validate_address_collection, validate_label, validate_nostr_id, validate_relay_urls,
    validate_seed
)

UBA_PREFIX = "UBA:"
UBA_TAG = ["uba", "bitcoin-addresses"]

def format_uba(nostr_id: str, label: Optional[str] = None) -> str:
    if label:
        return f"{UBA_PREFIX}{nostr_id}&label={quote(label, safe='')}"
    return f"{UBA_PREFIX}{nostr_id}"

def parse_uba(uba: str) -> ParsedUba:
    """
    Split a UBA string into its event id and optional label.

    Raises InvalidUbaFormatError when the prefix is missing, the id is not
    64 hex characters, or the label is not valid percent-encoded UTF-8.
    Unknown parameters are ignored.
    """
    if not isinstance(uba, str) or not uba.startswith(UBA_PREFIX):
        raise InvalidUbaFormatError("UBA must start with 'UBA:'")

    body = uba[len(UBA_PREFIX):]
    nostr_id, _, query = body.partition("&")
    validate_nostr_id(nostr_id)

    label = None
    if query:
        for param in query.split("&"):
            key, sep, value = param.partition("=")
            if sep and key == "label":
                label = _percent_decode(value) or None
    return ParsedUba(nostr_id=nostr_id, label=label)

def _percent_decode(value: str) -> str:
    for i, char in enumerate(value):
        if char == "%":
            escape = value[i + 1:i + 3]
            if len(escape) != 2 or any(c not in "0123456789abcdefABCDEF" for c in escape):
                raise InvalidUbaFormatError("Failed to decode label: malformed percent escape")
    try:
        return unquote_to_bytes(value).decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidUbaFormatError(f"Failed to decode label: {e}") from e

def build_tags(addresses: BitcoinAddresses, encrypted: bool, replaces: Optional[str] = None) -> List[List[str]]:
    tags = [list(UBA_TAG)]
    if replaces is not None:
        tags.append(["replaces", replaces])
    if encrypted:
        tags.append(["encrypted", "true"])
    if addresses.metadata is not None and addresses.metadata.label:
        tags.append(["label", addresses.metadata.label])
    tags.append(["version", str(addresses.version)])
    if replaces is not None:
        tags.append(["updated_at", str(addresses.created_at)])
    # kind 30000 is addressable by (pubkey, d): a fresh d per event keeps every version
    tags.append(["d", secrets.token_hex(16)])
    return tags

def _resolve_relays(relay_urls: Sequence[str], config: UbaConfig) -> List[str]:
    relays = list(relay_urls) if relay_urls else config.get_relay_urls()
    if not relays:
        raise ConfigError("No relay URLs supplied and none configured")
    return validate_relay_urls(relays)

async def _bounded(awaitable, config: UbaConfig, operation: str):
    try:
        return await asyncio.wait_for(awaitable, timeout=config.relay_timeout)
    except asyncio.TimeoutError as e:
        raise UbaTimeoutError(f"{operation} timed out after {config.relay_timeout}s") from e

@asynccontextmanager
async def _open_store(store: Optional[EventStore], relays: List[str], config: UbaConfig,
                      keys: Optional[NostrKeys] = None):
    """Use the caller's store as is, or open (and close) a relay store"""
    if store is not None:
        yield store
        return
    async with NostrRelayStore(relays, keys=keys, timeout=config.relay_timeout) as relay_store:
        yield relay_store

async def _publish_collection(store: EventStore, addresses: BitcoinAddresses, config: UbaConfig,
                              replaces: Optional[str] = None) -> str:
    try:
        payload = addresses.to_json()
    except (TypeError, ValueError) as e:
        raise SerializationError("Failed to serialize address collection") from e
    key = config.encryption_key if config.is_encryption_enabled() else None
    content = encrypt_if_enabled(payload, key)
    tags = build_tags(addresses, encrypted=key is not None, replaces=replaces)
    return await _bounded(store.publish(content, tags), config, "Publish")

async def generate(seed: str, label: Optional[str] = None, relay_urls: Sequence[str] = (),
                   config: Optional[UbaConfig] = None, store: Optional[EventStore] = None) -> str:
    """Derive addresses from ``seed``, publish them and return the UBA string"""
    config = config.copy() if config is not None else UbaConfig()
    relays = _resolve_relays(relay_urls, config)
    validate_seed(seed)
    validate_label(label)

    addresses = AddressDerivation(config).generate_addresses(seed, label)

    keys = NostrKeys.from_seed(seed) if store is None else None
    async with _open_store(store, relays, config, keys) as event_store:
        event_id = await _publish_collection(event_store, addresses, config)

    logger.info("UBA generated", event_id=short_id(event_id), families=len(addresses.addresses))
    return format_uba(event_id, label)

async def _fetch_collection(uba: str, relay_urls: Sequence[str], config: UbaConfig,
                            store: Optional[EventStore]) -> BitcoinAddresses:
    parsed = parse_uba(uba)
    relays = _resolve_relays(relay_urls, config)

    async with _open_store(store, relays, config) as event_store:
        event = await _bounded(event_store.fetch(parsed.nostr_id, UBA_EVENT_KIND), config, "Fetch")

    if event is None:
        raise NoteNotFoundError(parsed.nostr_id)
    return _decode_event(event, config)

def _decode_event(event: StoredEvent, config: UbaConfig) -> BitcoinAddresses:
    if not event.has_tag(*UBA_TAG):
        raise InvalidUbaFormatError(f"Event {event.id} is not a UBA address collection")

    key = config.encryption_key if config.is_encryption_enabled() else None
    payload = decrypt_if_needed(event.content, key,
                                expect_encrypted=event.has_tag("encrypted", "true"))
    return BitcoinAddresses.from_json(payload)

async def retrieve_full(uba: str, relay_urls: Sequence[str] = (), config: Optional[UbaConfig] = None,
                        store: Optional[EventStore] = None) -> BitcoinAddresses:
    config = config.copy() if config is not None else UbaConfig()
    addresses = await _fetch_collection(uba, relay_urls, config, store)
    logger.debug("UBA resolved", total=len(addresses))
    return addresses

async def retrieve(uba: str, relay_urls: Sequence[str] = (), config: Optional[UbaConfig] = None,
                   store: Optional[EventStore] = None) -> List[str]:
    """Flat address list, families in enumeration order"""
    addresses = await retrieve_full(uba, relay_urls, config, store)
    return addresses.get_all_addresses()

async def _replace(original: str, addresses: BitcoinAddresses, relays: List[str], config: UbaConfig,
                   store: Optional[EventStore], keys: Optional[NostrKeys]) -> str:
    async with _open_store(store, relays, config, keys) as event_store:
        exists = await _bounded(event_store.exists(original), config, "Existence check")
        if not exists:
            raise EventNotFoundError(f"Event not found: {original}")

        updated = dataclasses.replace(addresses, created_at=current_timestamp())
        new_id = await _publish_collection(event_store, updated, config, replaces=original)

    logger.info("UBA updated", replaces=short_id(original), event_id=short_id(new_id))
    return f"{UBA_PREFIX}{new_id}"

async def update_uba(original: str, seed: str, relay_urls: Sequence[str] = (),
                     config: Optional[UbaConfig] = None, store: Optional[EventStore] = None) -> str:
    """Re-derive from ``seed`` and publish as a replacement of ``original``"""
    config = config.copy() if config is not None else UbaConfig()
    original_id = strip_uba_prefix(original)
    validate_nostr_id(original_id)
    relays = _resolve_relays(relay_urls, config)
    validate_seed(seed)

    addresses = AddressDerivation(config).generate_addresses(seed, None)
    validate_address_collection(addresses)

    keys = NostrKeys.from_seed(seed) if store is None else None
    return await _replace(original_id, addresses, relays, config, store, keys)

async def update_uba_with_addresses(original: str, addresses: BitcoinAddresses,
                                    relay_urls: Sequence[str] = (), config: Optional[UbaConfig] = None,
                                    store: Optional[EventStore] = None) -> str:
    """Publish an explicit collection as a replacement of ``original``"""
    config = config.copy() if config is not None else UbaConfig()
    original_id = strip_uba_prefix(original)
    validate_nostr_id(original_id)
    relays = _resolve_relays(relay_urls, config)
    validate_address_collection(addresses)

    return await _replace(original_id, addresses, relays, config, store, keys=None)

async def update(original: str, source: Union[str, BitcoinAddresses], relay_urls: Sequence[str] = (),
                 config: Optional[UbaConfig] = None, store: Optional[EventStore] = None) -> str:
    if isinstance(source, BitcoinAddresses):
        return await update_uba_with_addresses(original, source, relay_urls, config, store)
    return await update_uba(original, source, relay_urls, config, store)