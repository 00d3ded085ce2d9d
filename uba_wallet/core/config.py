# uba_wallet/core/config.py
import copy
import secrets
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Union

from uba_wallet.core.wallet_types import (
    AddressType, Network, ALL_ADDRESS_TYPES, BITCOIN_L1_TYPES, default_public_relays,
    extended_public_relays
)
from uba_wallet.core.exceptions import ConfigError, InvalidEncryptionKeyError
from uba_wallet.utils.logging import logger

ENCRYPTION_KEY_SIZE = 32

@dataclass
class UbaConfig:
    """Configuration for UBA generation, retrieval and update"""
    network: Union[Network, str] = Network.MAINNET
    encrypt_data: bool = False
    encryption_key: Optional[bytes] = None
    relay_timeout: float = 10
    max_addresses_per_type: int = 1
    # None means "use max_addresses_per_type"
    address_counts: Dict[AddressType, Optional[int]] = field(default_factory=dict)
    address_filters: Dict[AddressType, bool] = field(default_factory=dict)
    custom_relays: Optional[List[str]] = None

    def __post_init__(self):
        """Normalise fields so every address type has a defined count and filter"""
        try:
            self.network = Network.parse(self.network)
        except ValueError as e:
            raise ConfigError(str(e)) from e

        if self.max_addresses_per_type < 0:
            raise ConfigError("max_addresses_per_type cannot be negative")
        if self.relay_timeout <= 0:
            raise ConfigError("relay_timeout must be positive")

        self.address_counts = self._normalise_table(self.address_counts, None)
        self.address_filters = self._normalise_table(self.address_filters, True)

        for address_type, count in self.address_counts.items():
            if count is not None and count < 0:
                raise ConfigError(f"Address count for {address_type.value} cannot be negative")

        if self.encryption_key is not None:
            self.set_encryption_key(self.encryption_key)

        if self.custom_relays is not None:
            self.custom_relays = list(self.custom_relays)

    @staticmethod
    def _normalise_table(table: Dict[Any, Any], default: Any) -> Dict[AddressType, Any]:
        normalised = {address_type: default for address_type in ALL_ADDRESS_TYPES}
        for key, value in (table or {}).items():
            try:
                normalised[AddressType.parse(key)] = value
            except ValueError as e:
                raise ConfigError(str(e)) from e
        return normalised

    # Address counts

    def set_address_count(self, address_type: AddressType, count: int) -> None:
        if count < 0:
            raise ConfigError(f"Address count for {address_type.value} cannot be negative")
        self.address_counts[address_type] = count

    def get_address_count(self, address_type: AddressType) -> int:
        count = self.address_counts.get(address_type)
        return self.max_addresses_per_type if count is None else count

    def set_bitcoin_l1_counts(self, count: int) -> None:
        for address_type in BITCOIN_L1_TYPES:
            self.set_address_count(address_type, count)

    def set_all_counts(self, count: int) -> None:
        for address_type in ALL_ADDRESS_TYPES:
            self.set_address_count(address_type, count)

    # Address type filters

    def set_address_type_enabled(self, address_type: AddressType, enabled: bool) -> None:
        self.address_filters[address_type] = bool(enabled)

    def is_address_type_enabled(self, address_type: AddressType) -> bool:
        return self.address_filters.get(address_type, True)

    def enable_bitcoin_l1(self) -> None:
        for address_type in BITCOIN_L1_TYPES:
            self.set_address_type_enabled(address_type, True)

    def disable_bitcoin_l1(self) -> None:
        for address_type in BITCOIN_L1_TYPES:
            self.set_address_type_enabled(address_type, False)

    def enable_all_address_types(self) -> None:
        for address_type in ALL_ADDRESS_TYPES:
            self.set_address_type_enabled(address_type, True)

    def disable_all_address_types(self) -> None:
        for address_type in ALL_ADDRESS_TYPES:
            self.set_address_type_enabled(address_type, False)

    def get_enabled_address_types(self) -> List[AddressType]:
        return [t for t in ALL_ADDRESS_TYPES if self.is_address_type_enabled(t)]

    # Relays

    def set_custom_relays(self, relays: List[str]) -> None:
        self.custom_relays = list(relays)

    def add_custom_relay(self, relay_url: str) -> None:
        if self.custom_relays is None:
            self.custom_relays = []
        self.custom_relays.append(relay_url)

    def get_relay_urls(self) -> List[str]:
        if self.custom_relays is not None:
            return list(self.custom_relays)
        return default_public_relays()

    def use_default_relays(self) -> None:
        self.custom_relays = None

    def use_extended_relays(self) -> None:
        """Publish to the default relays plus a wider public set"""
        self.custom_relays = extended_public_relays()

    # Encryption key

    def set_encryption_key(self, key: bytes) -> None:
        if not isinstance(key, (bytes, bytearray)) or len(key) != ENCRYPTION_KEY_SIZE:
            raise InvalidEncryptionKeyError("Encryption key must be exactly 32 bytes")
        self.encryption_key = bytes(key)
        logger.add_sensitive_data(self.encryption_key.hex())

    def set_encryption_key_from_hex(self, key_hex: str) -> None:
        if len(key_hex) != ENCRYPTION_KEY_SIZE * 2:
            raise InvalidEncryptionKeyError(
                "Encryption key must be exactly 64 hex characters (32 bytes)"
            )
        try:
            key_bytes = bytes.fromhex(key_hex)
        except ValueError as e:
            raise InvalidEncryptionKeyError(f"Invalid hex string: {e}") from e
        self.set_encryption_key(key_bytes)

    def generate_random_encryption_key(self) -> bytes:
        key = secrets.token_bytes(ENCRYPTION_KEY_SIZE)
        self.set_encryption_key(key)
        return key

    def is_encryption_enabled(self) -> bool:
        return self.encryption_key is not None

    def get_encryption_key_hex(self) -> Optional[str]:
        return self.encryption_key.hex() if self.encryption_key is not None else None

    # Value semantics

    def copy(self) -> 'UbaConfig':
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'network': self.network.value,
            'encrypt_data': self.encrypt_data,
            'encryption_key': self.get_encryption_key_hex(),
            'relay_timeout': self.relay_timeout,
            'max_addresses_per_type': self.max_addresses_per_type,
            'address_counts': {
                t.value: c for t, c in self.address_counts.items() if c is not None
            },
            'address_filters': {t.value: e for t, e in self.address_filters.items()},
            'custom_relays': list(self.custom_relays) if self.custom_relays is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UbaConfig':
        data = dict(data or {})
        key_hex = data.pop('encryption_key', None)
        known = {
            'network', 'encrypt_data', 'relay_timeout', 'max_addresses_per_type',
            'address_counts', 'address_filters', 'custom_relays'
        }
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown configuration options: {', '.join(sorted(unknown))}")

        config = cls(**data)
        if key_hex:
            config.set_encryption_key_from_hex(key_hex)
        return config
