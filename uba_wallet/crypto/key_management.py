# uba_wallet/crypto/key_management.py
import hashlib
import string
from bip32 import BIP32
from mnemonic import Mnemonic

from uba_wallet.core.exceptions import InvalidSeedError, AddressGenerationError, KeyDerivationError
from uba_wallet.utils.logging import logger

HARDENED_OFFSET = 0x80000000
RAW_SEED_HEX_LENGTH = 64

_mnemonic = Mnemonic("english")

def _strip_hex_prefix(value: str) -> str:
    if value[:2].lower() == "0x":
        return value[2:]
    return value

def _is_raw_seed(value: str) -> bool:
    candidate = _strip_hex_prefix(value)
    return len(candidate) == RAW_SEED_HEX_LENGTH and all(c in string.hexdigits for c in candidate)

def seed_to_bytes(seed_input: str) -> bytes:
    """Resolve a seed input into BIP32 master seed bytes.

    A 32-byte hex scalar (optional ``0x``) is used directly as the master
    seed; otherwise the input must be a valid BIP39 English mnemonic and is
    stretched with an empty passphrase.
    """
    if not isinstance(seed_input, str) or not seed_input.strip():
        raise InvalidSeedError("Seed cannot be empty")

    value = seed_input.strip()
    if _is_raw_seed(value):
        return bytes.fromhex(_strip_hex_prefix(value))

    phrase = " ".join(value.split())
    try:
        valid = _mnemonic.check(phrase)
    except (ValueError, LookupError) as e:
        raise InvalidSeedError(f"Invalid mnemonic: {e}") from e
    if not valid:
        raise InvalidSeedError("Seed is neither a valid BIP39 mnemonic nor a 32-byte hex key")

    return Mnemonic.to_seed(phrase, passphrase="")

def nostr_secret_from_seed(seed_input: str) -> bytes:
    """Secret key of the publishing Nostr identity for a seed"""
    return hashlib.sha256(seed_to_bytes(seed_input)).digest()

def child_path(prefix: str, index: int) -> str:
    if index < 0 or index >= HARDENED_OFFSET:
        raise AddressGenerationError(f"Derivation index out of range: {index}")
    return f"{prefix}/{index}"

class KeyManager:
    """Holds a BIP32 master key for the duration of one derivation run.

    The master key is never exposed; callers only see child keys.
    """

    def __init__(self, seed_input: str):
        seed = seed_to_bytes(seed_input)
        logger.add_sensitive_data(seed_input.strip())
        logger.add_sensitive_data(" ".join(seed_input.split()))
        try:
            self._bip32 = BIP32.from_seed(seed)
        except Exception as e:
            raise KeyDerivationError(f"Failed to derive master key: {e}") from e
        logger.debug("KeyManager initialized")

    def derive_public_key(self, path: str) -> bytes:
        """Compressed (33-byte) public key at ``path``"""
        try:
            return self._bip32.get_pubkey_from_path(path)
        except Exception as e:
            logger.error("Public key derivation failed", path=path)
            raise KeyDerivationError(f"Failed to derive public key at {path}: {e}") from e

    def derive_child_public_key(self, prefix: str, index: int) -> bytes:
        return self.derive_public_key(child_path(prefix, index))
