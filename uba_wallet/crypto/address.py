# uba_wallet/crypto/address.py
from typing import Callable, Dict, Optional, Tuple

from uba_wallet.core.config import UbaConfig
from uba_wallet.core.wallet_types import (
    AddressType, AddressMetadata, BitcoinAddresses, Network, ALL_ADDRESS_TYPES
)
from uba_wallet.core.exceptions import UbaError, AddressGenerationError
from uba_wallet.crypto.key_management import KeyManager
from uba_wallet.crypto import encoding
from uba_wallet.utils.logging import logger

COLLECTION_DESCRIPTION = "UBA generated address collection"

# Liquid blinding keys live beside the spending keys, offset by this index
LIQUID_BLINDING_OFFSET = 1000

Renderer = Callable[[KeyManager, str, int, Network], str]

def _render_p2pkh(keys: KeyManager, prefix: str, index: int, network: Network) -> str:
    return encoding.encode_p2pkh(keys.derive_child_public_key(prefix, index), network.p2pkh_version)

def _render_p2sh(keys: KeyManager, prefix: str, index: int, network: Network) -> str:
    return encoding.encode_p2sh_p2wpkh(keys.derive_child_public_key(prefix, index), network.p2sh_version)

def _render_p2wpkh(keys: KeyManager, prefix: str, index: int, network: Network) -> str:
    return encoding.encode_p2wpkh(keys.derive_child_public_key(prefix, index), network.segwit_hrp)

def _render_p2tr(keys: KeyManager, prefix: str, index: int, network: Network) -> str:
    return encoding.encode_p2tr(keys.derive_child_public_key(prefix, index), network.segwit_hrp)

def _render_liquid(keys: KeyManager, prefix: str, index: int, network: Network) -> str:
    public_key = keys.derive_child_public_key(prefix, index)
    if network is Network.MAINNET:
        blinding_key = keys.derive_child_public_key(prefix, index + LIQUID_BLINDING_OFFSET)
        return encoding.encode_liquid_p2wpkh(public_key, network, blinding_key)
    return encoding.encode_liquid_p2wpkh(public_key, network)

def _render_lightning(keys: KeyManager, prefix: str, index: int, network: Network) -> str:
    return keys.derive_child_public_key(prefix, index).hex()

def _render_nostr(keys: KeyManager, prefix: str, index: int, network: Network) -> str:
    return encoding.encode_npub(keys.derive_child_public_key(prefix, index))

ADDRESS_FAMILIES: Dict[AddressType, Tuple[str, Renderer]] = {
    AddressType.P2PKH: ("m/44'/0'/0'/0", _render_p2pkh),
    AddressType.P2SH: ("m/49'/0'/0'/0", _render_p2sh),
    AddressType.P2WPKH: ("m/84'/0'/0'/0", _render_p2wpkh),
    AddressType.P2TR: ("m/86'/0'/0'/0", _render_p2tr),
    AddressType.LIQUID: ("m/84'/1776'/0'/0", _render_liquid),
    AddressType.LIGHTNING: ("m/1017'/0'/0'", _render_lightning),
    AddressType.NOSTR: ("m/44'/1237'/0'/0", _render_nostr),
}

_missing = set(ALL_ADDRESS_TYPES) - set(ADDRESS_FAMILIES)
if _missing:
    raise ImportError(f"No derivation rule for: {', '.join(t.value for t in _missing)}")

def derivation_prefix(address_type: AddressType) -> str:
    return ADDRESS_FAMILIES[address_type][0]

class AddressDerivation:
    """Derives a multi-layer address collection from a single seed"""

    def __init__(self, config: Optional[UbaConfig] = None):
        self.config = config.copy() if config is not None else UbaConfig()

    def generate_addresses(self, seed_input: str, label: Optional[str] = None) -> BitcoinAddresses:
        """
        Derive every enabled address family from ``seed_input``.

        Families are processed in enumeration order and each contributes
        ``config.get_address_count(family)`` addresses at ``<prefix>/i``.
        A family with a zero count is omitted. Either every address is
        derived or an error is raised.
        """
        keys = KeyManager(seed_input)
        network = self.config.network

        addresses = BitcoinAddresses()
        derivation_paths = []

        for address_type in self.config.get_enabled_address_types():
            count = self.config.get_address_count(address_type)
            if count == 0:
                continue

            prefix, render = ADDRESS_FAMILIES[address_type]
            try:
                rendered = [render(keys, prefix, index, network) for index in range(count)]
            except UbaError:
                raise
            except Exception as e:
                raise AddressGenerationError(
                    f"Failed to generate {address_type.value} address: {e}"
                ) from e

            addresses.addresses[address_type] = rendered
            derivation_paths.append(prefix)
            logger.debug("Derived address family", family=address_type.value,
                         count=count, network=network.value)

        addresses.metadata = AddressMetadata(
            label=label,
            description=COLLECTION_DESCRIPTION,
            xpub=None,
            derivation_paths=derivation_paths,
        )

        logger.info("Address collection generated", families=len(addresses.addresses),
                    total=len(addresses))
        return addresses

def derive_addresses(seed_input: str, label: Optional[str] = None,
                     config: Optional[UbaConfig] = None) -> BitcoinAddresses:
    return AddressDerivation(config).generate_addresses(seed_input, label)
