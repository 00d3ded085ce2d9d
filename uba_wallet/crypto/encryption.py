# uba_wallet/crypto/encryption.py
import base64
import binascii
import secrets
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.backends import default_backend

from uba_wallet.core.exceptions import EncryptionError, InvalidEncryptionKeyError
from uba_wallet.utils.logging import logger

class CryptographicConstants:
    """Envelope parameters. Changing any of these breaks existing payloads."""
    KEY_SIZE = 32
    NONCE_SIZE = 12
    TAG_SIZE = 16
    HKDF_SALT = b'UBA-encryption-salt-v1'
    HKDF_INFO = b'UBA-encryption-key'

def derive_encryption_key(passphrase: str, salt: Optional[bytes] = None) -> bytes:
    """HKDF-SHA256 of a passphrase into a 32-byte envelope key"""
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=CryptographicConstants.KEY_SIZE,
        salt=salt if salt is not None else CryptographicConstants.HKDF_SALT,
        info=CryptographicConstants.HKDF_INFO,
        backend=default_backend()
    )
    return hkdf.derive(passphrase.encode('utf-8'))

def generate_random_key() -> bytes:
    return secrets.token_bytes(CryptographicConstants.KEY_SIZE)

class UbaEncryption:
    """ChaCha20-Poly1305 envelope: base64(nonce || ciphertext || tag)"""

    def __init__(self, key: bytes):
        if not isinstance(key, (bytes, bytearray)) or len(key) != CryptographicConstants.KEY_SIZE:
            raise InvalidEncryptionKeyError("Encryption key must be exactly 32 bytes")
        self._cipher = ChaCha20Poly1305(bytes(key))

    @classmethod
    def from_passphrase(cls, passphrase: str, salt: Optional[bytes] = None) -> 'UbaEncryption':
        return cls(derive_encryption_key(passphrase, salt))

    def encrypt(self, plaintext: str) -> str:
        nonce = secrets.token_bytes(CryptographicConstants.NONCE_SIZE)
        try:
            ciphertext = self._cipher.encrypt(nonce, plaintext.encode('utf-8'), None)
        except Exception as e:
            raise EncryptionError("Encryption failed") from e
        return base64.b64encode(nonce + ciphertext).decode('ascii')

    def decrypt(self, encoded: str) -> str:
        try:
            payload = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise EncryptionError("Base64 decode failed") from e

        if len(payload) < CryptographicConstants.NONCE_SIZE:
            raise EncryptionError("Invalid encrypted data: missing nonce")

        nonce = payload[:CryptographicConstants.NONCE_SIZE]
        ciphertext = payload[CryptographicConstants.NONCE_SIZE:]
        try:
            plaintext = self._cipher.decrypt(nonce, ciphertext, None)
        except InvalidTag as e:
            raise EncryptionError("Decryption failed") from e

        try:
            return plaintext.decode('utf-8')
        except UnicodeDecodeError as e:
            raise EncryptionError("Decrypted data is not valid UTF-8") from e

def encrypt_if_enabled(data: str, key: Optional[bytes]) -> str:
    if key is None:
        return data
    return UbaEncryption(key).encrypt(data)

def decrypt_if_needed(data: str, key: Optional[bytes], expect_encrypted: bool = False) -> str:
    """
    Decrypt ``data`` when a key is available.

    Without ``expect_encrypted`` a payload that does not decrypt is assumed to
    be plaintext and returned unchanged. With it, a missing key or a failed
    decryption raises ``EncryptionError``.
    """
    if key is None:
        if expect_encrypted:
            raise EncryptionError("Payload is encrypted but no encryption key is configured")
        return data

    encryption = UbaEncryption(key)
    try:
        return encryption.decrypt(data)
    except EncryptionError:
        if expect_encrypted:
            raise
        logger.debug("Payload did not decrypt, treating it as plaintext")
        return data
