# uba_wallet/core/wallet_types.py
import json
import time
from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any

from uba_wallet.core.exceptions import SerializationError

FORMAT_VERSION = 1

class AddressType(Enum):
    """Address families, in derivation order. Values are the JSON wire names."""
    P2PKH = "P2PKH"
    P2SH = "P2SH"
    P2WPKH = "P2WPKH"
    P2TR = "P2TR"
    LIQUID = "Liquid"
    LIGHTNING = "Lightning"
    NOSTR = "Nostr"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def is_bitcoin_l1(self) -> bool:
        return self in BITCOIN_L1_TYPES

    @classmethod
    def parse(cls, value: Any) -> 'AddressType':
        """Accept a member, its wire name or its member name"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if value == member.value or value.upper() == member.name:
                    return member
        raise ValueError(f"Unknown address type: {value!r}")

_DESCRIPTIONS = {
    AddressType.P2PKH: "Legacy Bitcoin address (P2PKH)",
    AddressType.P2SH: "SegWit-wrapped Bitcoin address (P2SH)",
    AddressType.P2WPKH: "Native SegWit Bitcoin address (P2WPKH)",
    AddressType.P2TR: "Taproot Bitcoin address (P2TR)",
    AddressType.LIQUID: "Liquid sidechain address",
    AddressType.LIGHTNING: "Lightning Network node id",
    AddressType.NOSTR: "Nostr public key (npub format)",
}

BITCOIN_L1_TYPES = (
    AddressType.P2PKH,
    AddressType.P2SH,
    AddressType.P2WPKH,
    AddressType.P2TR,
)

ALL_ADDRESS_TYPES = tuple(AddressType)

class Network(Enum):
    """Bitcoin networks and the encoding parameters each one implies"""
    MAINNET = "mainnet"
    TESTNET = "testnet"
    SIGNET = "signet"
    REGTEST = "regtest"

    @property
    def p2pkh_version(self) -> bytes:
        return b'\x00' if self is Network.MAINNET else b'\x6f'

    @property
    def p2sh_version(self) -> bytes:
        return b'\x05' if self is Network.MAINNET else b'\xc4'

    @property
    def segwit_hrp(self) -> str:
        return {
            Network.MAINNET: "bc",
            Network.TESTNET: "tb",
            Network.SIGNET: "tb",
            Network.REGTEST: "bcrt",
        }[self]

    @property
    def liquid_hrp(self) -> str:
        """Non-confidential segwit HRP of the matching Elements chain"""
        return {
            Network.MAINNET: "ex",
            Network.TESTNET: "tex",
            Network.SIGNET: "tex",
            Network.REGTEST: "ert",
        }[self]

    @property
    def liquid_blech32_hrp(self) -> str:
        """Confidential (blech32) HRP of the matching Elements chain"""
        return {
            Network.MAINNET: "lq",
            Network.TESTNET: "tlq",
            Network.SIGNET: "tlq",
            Network.REGTEST: "el",
        }[self]

    @classmethod
    def parse(cls, value: Any) -> 'Network':
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            name = value.strip().lower()
            # common alias for mainnet
            if name == "bitcoin":
                name = "mainnet"
            for member in cls:
                if member.value == name:
                    return member
        raise ValueError(f"Unknown network: {value!r}")

# Curated relays with good uptime; overridable through UbaConfig.custom_relays
DEFAULT_PUBLIC_RELAYS = (
    "wss://relay.damus.io",
    "wss://nos.lol",
    "wss://relay.snort.social",
    "wss://nostr.wine",
    "wss://relay.nostr.band",
    "wss://nostr.mutinywallet.com",
    "wss://relay.primal.net",
    "wss://relay.nostrati.com",
    "wss://nostr.sethforprivacy.com",
    "wss://offchain.pub",
    "wss://relay.nostrplebs.com",
    "wss://purplepag.es",
)

EXTENDED_PUBLIC_RELAYS = DEFAULT_PUBLIC_RELAYS + (
    "wss://relay.bitcoinpark.com",
    "wss://lightningrelay.com",
    "wss://relay.orangepill.dev",
    "wss://nostr.bitcoiner.social",
    "wss://relay.exit.pub",
    "wss://purplerelay.com",
    "wss://brb.io",
    "wss://nostr.milou.lol",
    "wss://relayable.org",
    "wss://relay.mostr.pub",
)

def default_public_relays() -> List[str]:
    return list(DEFAULT_PUBLIC_RELAYS)

def extended_public_relays() -> List[str]:
    return list(EXTENDED_PUBLIC_RELAYS)

@dataclass
class AddressMetadata:
    """Optional metadata for an address collection"""
    label: Optional[str] = None
    description: Optional[str] = None
    # Never populated: the extended key is not published
    xpub: Optional[str] = None
    derivation_paths: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'label': self.label,
            'description': self.description,
            'xpub': self.xpub,
            'derivation_paths': list(self.derivation_paths) if self.derivation_paths is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AddressMetadata':
        if not isinstance(data, dict):
            raise SerializationError("metadata must be an object")
        paths = data.get('derivation_paths')
        return cls(
            label=data.get('label'),
            description=data.get('description'),
            xpub=data.get('xpub'),
            derivation_paths=list(paths) if paths is not None else None,
        )

@dataclass
class BitcoinAddresses:
    """Collection of addresses across layers, keyed by address type"""
    addresses: Dict[AddressType, List[str]] = field(default_factory=dict)
    metadata: Optional[AddressMetadata] = None
    created_at: int = field(default_factory=lambda: int(time.time()))
    version: int = FORMAT_VERSION

    def add_address(self, address_type: AddressType, address: str) -> None:
        self.addresses.setdefault(address_type, []).append(address)

    def get_addresses(self, address_type: AddressType) -> Optional[List[str]]:
        return self.addresses.get(address_type)

    def get_all_addresses(self) -> List[str]:
        """Flat list in family enumeration order"""
        result = []
        for address_type in ALL_ADDRESS_TYPES:
            result.extend(self.addresses.get(address_type, []))
        return result

    def is_empty(self) -> bool:
        return not any(self.addresses.values())

    def __len__(self) -> int:
        return sum(len(addrs) for addrs in self.addresses.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'addresses': {
                address_type.value: list(self.addresses[address_type])
                for address_type in ALL_ADDRESS_TYPES
                if address_type in self.addresses
            },
            'metadata': self.metadata.to_dict() if self.metadata else None,
            'created_at': self.created_at,
            'version': self.version,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(',', ':'))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BitcoinAddresses':
        if not isinstance(data, dict):
            raise SerializationError("address collection must be an object")
        try:
            raw_addresses = data['addresses']
            created_at = int(data['created_at'])
            version = int(data['version'])
        except (KeyError, TypeError, ValueError) as e:
            raise SerializationError(f"Invalid address collection: {e}") from e

        if not isinstance(raw_addresses, dict):
            raise SerializationError("addresses must be an object")

        addresses: Dict[AddressType, List[str]] = {}
        for key, values in raw_addresses.items():
            try:
                address_type = AddressType.parse(key)
            except ValueError as e:
                raise SerializationError(str(e)) from e
            if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
                raise SerializationError(f"addresses for {key} must be a list of strings")
            addresses[address_type] = list(values)

        metadata = data.get('metadata')
        return cls(
            addresses=addresses,
            metadata=AddressMetadata.from_dict(metadata) if metadata is not None else None,
            created_at=created_at,
            version=version,
        )

    @classmethod
    def from_json(cls, payload: str) -> 'BitcoinAddresses':
        try:
            data = json.loads(payload)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"JSON error: {e}") from e
        return cls.from_dict(data)

@dataclass
class ParsedUba:
    """Components of a parsed UBA string"""
    nostr_id: str
    label: Optional[str] = None

@dataclass
class StoredEvent:
    """An event as returned by an event store"""
    id: str
    content: str
    tags: List[List[str]] = field(default_factory=list)
    pubkey: str = ""
    created_at: int = 0
    kind: int = 0
    sig: str = ""

    def get_tag(self, name: str) -> Optional[str]:
        for tag in self.tags:
            if len(tag) >= 2 and tag[0] == name:
                return tag[1]
        return None

    def has_tag(self, name: str, value: str) -> bool:
        return any(len(tag) >= 2 and tag[0] == name and tag[1] == value for tag in self.tags)
