from .exceptions import (
    UbaError, ValidationError, InvalidSeedError, InvalidUbaFormatError, InvalidLabelError,
    InvalidRelayUrlError, InvalidEncryptionKeyError, ConfigError, UpdateValidationError,
    AddressGenerationError, KeyDerivationError, EncryptionError, SerializationError,
    StoreError, NostrRelayError, NetworkError, UbaTimeoutError, NoteNotFoundError,
    EventNotFoundError, RateLimitError
)
from .wallet_types import AddressType, Network, AddressMetadata, BitcoinAddresses, ParsedUba, StoredEvent
from .config import UbaConfig
from .config_manager import ConfigManager

__all__ = [
    'UbaError',
    'ValidationError',
    'InvalidSeedError',
    'InvalidUbaFormatError',
    'InvalidLabelError',
    'InvalidRelayUrlError',
    'InvalidEncryptionKeyError',
    'ConfigError',
    'UpdateValidationError',
    'AddressGenerationError',
    'KeyDerivationError',
    'EncryptionError',
    'SerializationError',
    'StoreError',
    'NostrRelayError',
    'NetworkError',
    'UbaTimeoutError',
    'NoteNotFoundError',
    'EventNotFoundError',
    'RateLimitError',
    'AddressType',
    'Network',
    'AddressMetadata',
    'BitcoinAddresses',
    'ParsedUba',
    'StoredEvent',
    'UbaConfig',
    'ConfigManager'
]
