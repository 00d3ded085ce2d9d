"""Tests for UbaConfig."""

import pytest

from uba_wallet.core.config import UbaConfig
from uba_wallet.core.exceptions import ConfigError, InvalidEncryptionKeyError
from uba_wallet.core.wallet_types import (
    AddressType, Network, ALL_ADDRESS_TYPES, BITCOIN_L1_TYPES, DEFAULT_PUBLIC_RELAYS,
    EXTENDED_PUBLIC_RELAYS
)


def test_defaults_populate_every_family(config: UbaConfig) -> None:
    assert config.network is Network.MAINNET
    assert set(config.address_counts) == set(ALL_ADDRESS_TYPES)
    assert set(config.address_filters) == set(ALL_ADDRESS_TYPES)
    assert all(config.get_address_count(t) == 1 for t in ALL_ADDRESS_TYPES)
    assert config.get_enabled_address_types() == list(ALL_ADDRESS_TYPES)
    assert not config.is_encryption_enabled()


def test_network_accepts_strings() -> None:
    assert UbaConfig(network="testnet").network is Network.TESTNET
    assert UbaConfig(network="bitcoin").network is Network.MAINNET
    with pytest.raises(ConfigError):
        UbaConfig(network="litecoin")


def test_count_override_and_fallback(config: UbaConfig) -> None:
    config.max_addresses_per_type = 3
    config.set_address_count(AddressType.P2TR, 5)

    assert config.get_address_count(AddressType.P2TR) == 5
    assert config.get_address_count(AddressType.P2PKH) == 3


def test_bulk_count_setters(config: UbaConfig) -> None:
    config.set_bitcoin_l1_counts(2)
    assert [config.get_address_count(t) for t in BITCOIN_L1_TYPES] == [2, 2, 2, 2]
    assert config.get_address_count(AddressType.NOSTR) == 1

    config.set_all_counts(4)
    assert all(config.get_address_count(t) == 4 for t in ALL_ADDRESS_TYPES)


def test_negative_counts_rejected(config: UbaConfig) -> None:
    with pytest.raises(ConfigError):
        config.set_address_count(AddressType.P2PKH, -1)
    with pytest.raises(ConfigError):
        UbaConfig(max_addresses_per_type=-1)
    with pytest.raises(ConfigError):
        UbaConfig(address_counts={"P2PKH": -2})


def test_filters_keep_counts(config: UbaConfig) -> None:
    config.set_address_count(AddressType.LIQUID, 7)
    config.set_address_type_enabled(AddressType.LIQUID, False)

    assert AddressType.LIQUID not in config.get_enabled_address_types()
    assert config.get_address_count(AddressType.LIQUID) == 7


def test_bulk_filters(config: UbaConfig) -> None:
    config.disable_bitcoin_l1()
    assert config.get_enabled_address_types() == [
        AddressType.LIQUID, AddressType.LIGHTNING, AddressType.NOSTR
    ]

    config.disable_all_address_types()
    assert config.get_enabled_address_types() == []

    config.enable_bitcoin_l1()
    assert config.get_enabled_address_types() == list(BITCOIN_L1_TYPES)

    config.enable_all_address_types()
    assert config.get_enabled_address_types() == list(ALL_ADDRESS_TYPES)


def test_relays(config: UbaConfig) -> None:
    assert config.get_relay_urls() == list(DEFAULT_PUBLIC_RELAYS)

    config.set_custom_relays(["wss://a.example"])
    config.add_custom_relay("wss://b.example")
    assert config.get_relay_urls() == ["wss://a.example", "wss://b.example"]

    config.use_default_relays()
    assert config.get_relay_urls() == list(DEFAULT_PUBLIC_RELAYS)

    config.use_extended_relays()
    assert config.get_relay_urls() == list(EXTENDED_PUBLIC_RELAYS)
    assert config.get_relay_urls()[:len(DEFAULT_PUBLIC_RELAYS)] == list(DEFAULT_PUBLIC_RELAYS)


def test_add_custom_relay_starts_fresh_list(config: UbaConfig) -> None:
    config.add_custom_relay("wss://only.example")
    assert config.get_relay_urls() == ["wss://only.example"]


def test_default_relay_list_is_immutable() -> None:
    assert isinstance(DEFAULT_PUBLIC_RELAYS, tuple)


def test_encryption_key_from_hex(config: UbaConfig) -> None:
    config.set_encryption_key_from_hex("ab" * 32)
    assert config.encryption_key == bytes([0xab] * 32)
    assert config.get_encryption_key_hex() == "ab" * 32
    assert config.is_encryption_enabled()


@pytest.mark.parametrize("key_hex", ["ab" * 31, "ab" * 33, "zz" * 32, ""])
def test_encryption_key_from_bad_hex(config: UbaConfig, key_hex: str) -> None:
    with pytest.raises(InvalidEncryptionKeyError):
        config.set_encryption_key_from_hex(key_hex)


def test_encryption_key_wrong_length(config: UbaConfig) -> None:
    with pytest.raises(InvalidEncryptionKeyError):
        config.set_encryption_key(b"short")


def test_random_encryption_key(config: UbaConfig) -> None:
    first = config.generate_random_encryption_key()
    second = UbaConfig().generate_random_encryption_key()

    assert len(first) == 32
    assert config.encryption_key == first
    assert first != second


def test_copy_is_independent(config: UbaConfig) -> None:
    clone = config.copy()
    clone.set_address_count(AddressType.P2PKH, 9)
    clone.add_custom_relay("wss://clone.example")

    assert config.get_address_count(AddressType.P2PKH) == 1
    assert config.custom_relays is None


def test_dict_round_trip(config: UbaConfig) -> None:
    config.network = Network.SIGNET
    config.set_address_count(AddressType.P2WPKH, 3)
    config.set_address_type_enabled(AddressType.NOSTR, False)
    config.set_encryption_key(bytes(32))
    config.set_custom_relays(["wss://relay.example.com"])

    restored = UbaConfig.from_dict(config.to_dict())

    assert restored.network is Network.SIGNET
    assert restored.get_address_count(AddressType.P2WPKH) == 3
    assert not restored.is_address_type_enabled(AddressType.NOSTR)
    assert restored.encryption_key == bytes(32)
    assert restored.get_relay_urls() == ["wss://relay.example.com"]


def test_from_dict_accepts_member_names() -> None:
    config = UbaConfig.from_dict({"address_filters": {"liquid": False, "Lightning": False}})
    assert not config.is_address_type_enabled(AddressType.LIQUID)
    assert not config.is_address_type_enabled(AddressType.LIGHTNING)


def test_from_dict_rejects_unknown_options() -> None:
    with pytest.raises(ConfigError):
        UbaConfig.from_dict({"colour": "blue"})
    with pytest.raises(ConfigError):
        UbaConfig.from_dict({"address_counts": {"Dogecoin": 1}})


def test_non_positive_timeout_rejected() -> None:
    with pytest.raises(ConfigError):
        UbaConfig(relay_timeout=0)
