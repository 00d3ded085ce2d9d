from uba_wallet.crypto.key_management import KeyManager
from uba_wallet.crypto.address import AddressDerivation, derive_addresses
from uba_wallet.crypto.encryption import UbaEncryption

__all__ = [
    'KeyManager',
    'AddressDerivation',
    'derive_addresses',
    'UbaEncryption'
]
