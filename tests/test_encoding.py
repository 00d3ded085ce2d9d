"""Tests for address encoders."""

import base58
import bech32
import pytest
from bip_utils import SegwitBech32Decoder

from uba_wallet.core.exceptions import AddressGenerationError
from uba_wallet.core.wallet_types import Network
from uba_wallet.crypto import encoding

# secp256k1 generator point, compressed
G = bytes.fromhex("0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798")


def test_hash160_of_generator() -> None:
    assert encoding.hash160(G).hex() == "751e76e8199196d454941c45d1b3a323f1433bd6"


def test_p2pkh_of_generator() -> None:
    assert encoding.encode_p2pkh(G, Network.MAINNET.p2pkh_version) == "1BgGZ9tcN4rm9KBzDn7KprQz87SZ26SAMH"


def test_p2wpkh_of_generator() -> None:
    assert encoding.encode_p2wpkh(G, "bc") == "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4"


def test_p2sh_decodes_to_redeem_script_hash() -> None:
    address = encoding.encode_p2sh_p2wpkh(G, Network.MAINNET.p2sh_version)
    decoded = base58.b58decode_check(address)

    assert address.startswith("3")
    assert decoded[0] == 0x05
    assert decoded[1:] == encoding.hash160(b"\x00\x14" + encoding.hash160(G))


def test_segwit_v1_uses_bech32m() -> None:
    address = encoding.encode_segwit("bc", 1, G[1:])

    assert address == "bc1p0xlxvlhemja6c4dqv22uapctqupfhlxm9h8z3k2e72q4k9hcz7vqzk5jj0"


def test_p2tr_is_bech32m_v1() -> None:
    address = encoding.encode_p2tr(G, "bc")
    version, program = SegwitBech32Decoder.Decode("bc", address)

    assert address.startswith("bc1p")
    assert version == 1
    assert bytes(program) == encoding.taproot_output_key(G)
    assert len(program) == 32


def test_taproot_tweak_ignores_key_parity() -> None:
    odd = b"\x03" + G[1:]
    assert encoding.taproot_output_key(odd) == encoding.taproot_output_key(G)


def test_npub() -> None:
    npub = encoding.encode_npub(G)
    hrp, data = bech32.bech32_decode(npub)

    assert hrp == "npub"
    assert bytes(bech32.convertbits(data, 5, 8, False)) == G[1:]
    assert len(npub) == 63


def test_xonly_requires_compressed_key() -> None:
    with pytest.raises(AddressGenerationError):
        encoding.xonly(b"\x04" + bytes(64))


def test_segwit_rejects_bad_program() -> None:
    with pytest.raises(AddressGenerationError):
        encoding.encode_segwit("bc", 0, bytes(5))


def test_blech32_checksum_verifies() -> None:
    address = encoding.encode_liquid_p2wpkh(G, Network.MAINNET, blinding_key=G)
    hrp, _, data_part = address.rpartition("1")
    values = [bech32.CHARSET.find(c) for c in data_part]

    assert hrp == "lq"
    assert address.startswith("lq1q")
    assert encoding.blech32_verify_checksum(hrp, values)
    assert not encoding.blech32_verify_checksum("ex", values)


def test_blech32_payload_holds_blinding_key_and_program() -> None:
    address = encoding.encode_liquid_p2wpkh(G, Network.MAINNET, blinding_key=G)
    _, _, data_part = address.rpartition("1")
    values = [bech32.CHARSET.find(c) for c in data_part]
    payload = bytes(bech32.convertbits(values[1:-12], 5, 8, False))

    assert values[0] == 0
    assert payload == G + encoding.hash160(G)


def test_blech32_rejects_bad_blinding_key() -> None:
    with pytest.raises(AddressGenerationError):
        encoding.encode_blech32_address("lq", 0, bytes(32), bytes(20))


@pytest.mark.parametrize("network,prefix", [
    (Network.TESTNET, "tex1q"),
    (Network.SIGNET, "tex1q"),
    (Network.REGTEST, "ert1q"),
])
def test_unconfidential_liquid(network: Network, prefix: str) -> None:
    assert encoding.encode_liquid_p2wpkh(G, network).startswith(prefix)
