"""Tests for the ChaCha20-Poly1305 envelope."""

import base64

import pytest

from uba_wallet.core.exceptions import EncryptionError, InvalidEncryptionKeyError
from uba_wallet.crypto.encryption import (
    UbaEncryption, decrypt_if_needed, derive_encryption_key, encrypt_if_enabled, generate_random_key
)


@pytest.mark.parametrize("plaintext", ["", "hello", '{"addresses":{}}', "ünïcødé ₿ 🚀"])
def test_round_trip(encryption_key: bytes, plaintext: str) -> None:
    envelope = UbaEncryption(encryption_key)
    assert envelope.decrypt(envelope.encrypt(plaintext)) == plaintext


def test_wire_format(encryption_key: bytes) -> None:
    encoded = UbaEncryption(encryption_key).encrypt("abc")
    raw = base64.b64decode(encoded)

    # 12-byte nonce, 3 bytes ciphertext, 16-byte tag
    assert len(raw) == 12 + 3 + 16


def test_fresh_nonce_per_call(encryption_key: bytes) -> None:
    envelope = UbaEncryption(encryption_key)
    assert envelope.encrypt("same") != envelope.encrypt("same")


def test_tampered_ciphertext(encryption_key: bytes) -> None:
    envelope = UbaEncryption(encryption_key)
    raw = bytearray(base64.b64decode(envelope.encrypt("payload")))
    raw[-1] ^= 0x01

    with pytest.raises(EncryptionError):
        envelope.decrypt(base64.b64encode(bytes(raw)).decode())


def test_wrong_key(encryption_key: bytes) -> None:
    encoded = UbaEncryption(encryption_key).encrypt("payload")
    with pytest.raises(EncryptionError):
        UbaEncryption(bytes(32)).decrypt(encoded)


def test_missing_nonce(encryption_key: bytes) -> None:
    with pytest.raises(EncryptionError, match="missing nonce"):
        UbaEncryption(encryption_key).decrypt(base64.b64encode(b"short").decode())


def test_malformed_base64(encryption_key: bytes) -> None:
    with pytest.raises(EncryptionError):
        UbaEncryption(encryption_key).decrypt("not base64!!")


@pytest.mark.parametrize("key", [b"", bytes(31), bytes(33), "0" * 32])
def test_invalid_key(key) -> None:
    with pytest.raises(InvalidEncryptionKeyError):
        UbaEncryption(key)


def test_passphrase_key_is_deterministic() -> None:
    assert derive_encryption_key("correct horse") == derive_encryption_key("correct horse")
    assert len(derive_encryption_key("correct horse")) == 32


def test_passphrase_key_is_distinct() -> None:
    assert derive_encryption_key("one") != derive_encryption_key("two")
    assert derive_encryption_key("one") != derive_encryption_key("one", salt=b"other-salt")


def test_from_passphrase_round_trip() -> None:
    encoded = UbaEncryption.from_passphrase("secret").encrypt("data")
    assert UbaEncryption(derive_encryption_key("secret")).decrypt(encoded) == "data"


def test_random_keys() -> None:
    assert len(generate_random_key()) == 32
    assert generate_random_key() != generate_random_key()


def test_encrypt_if_enabled(encryption_key: bytes) -> None:
    assert encrypt_if_enabled("plain", None) == "plain"
    encrypted = encrypt_if_enabled("plain", encryption_key)
    assert encrypted != "plain"
    assert decrypt_if_needed(encrypted, encryption_key) == "plain"


def test_decrypt_without_key_passes_through() -> None:
    assert decrypt_if_needed("plain", None) == "plain"


def test_decrypt_without_key_when_encrypted_expected() -> None:
    with pytest.raises(EncryptionError):
        decrypt_if_needed("anything", None, expect_encrypted=True)


def test_plaintext_falls_back(encryption_key: bytes) -> None:
    payload = '{"addresses":{}}'
    assert decrypt_if_needed(payload, encryption_key) == payload


def test_wrong_key_falls_back_unless_expected(encryption_key: bytes) -> None:
    encrypted = encrypt_if_enabled("plain", encryption_key)

    assert decrypt_if_needed(encrypted, bytes(32)) == encrypted
    with pytest.raises(EncryptionError):
        decrypt_if_needed(encrypted, bytes(32), expect_encrypted=True)
