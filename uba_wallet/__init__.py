from uba_wallet.core.config import UbaConfig
from uba_wallet.core.wallet_types import (
    AddressType, Network, BitcoinAddresses, AddressMetadata, ParsedUba
)
from uba_wallet.crypto.address import AddressDerivation, derive_addresses
from uba_wallet.crypto.encryption import UbaEncryption, derive_encryption_key, generate_random_key
from uba_wallet.services.uba import (
    format_uba, parse_uba, generate, retrieve, retrieve_full,
    update, update_uba, update_uba_with_addresses
)
from uba_wallet.storage.memory_store import InMemoryEventStore
from uba_wallet.network.nostr_client import NostrRelayStore, NostrKeys

__version__ = "0.1.0"
__all__ = [
    'UbaConfig',
    'AddressType',
    'Network',
    'BitcoinAddresses',
    'AddressMetadata',
    'ParsedUba',
    'AddressDerivation',
    'derive_addresses',
    'UbaEncryption',
    'derive_encryption_key',
    'generate_random_key',
    'format_uba',
    'parse_uba',
    'generate',
    'retrieve',
    'retrieve_full',
    'update',
    'update_uba',
    'update_uba_with_addresses',
    'InMemoryEventStore',
    'NostrRelayStore',
    'NostrKeys'
]
