# uba_wallet/crypto/encoding.py
"""
Address encodings used by the derivation engine.

Base58check comes from ``base58``, segwit bech32/bech32m from ``bip_utils``
and npub bech32 from ``bech32``. Blech32 (Elements confidential addresses)
shares bech32's character set and layout but uses a 12-character checksum
over a different BCH generator, so only the checksum is computed here.
"""
import hashlib
from typing import List

import base58
import bech32
from bip_utils import SegwitBech32Encoder
from coincurve import PublicKey
from Crypto.Hash import RIPEMD160

from uba_wallet.core.exceptions import AddressGenerationError

def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()

def hash160(data: bytes) -> bytes:
    """RIPEMD160(SHA256(data))"""
    return RIPEMD160.new(sha256(data)).digest()

def tagged_hash(tag: str, data: bytes) -> bytes:
    """BIP340 tagged hash"""
    tag_hash = sha256(tag.encode())
    return sha256(tag_hash + tag_hash + data)

def base58check_encode(version: bytes, payload: bytes) -> str:
    return base58.b58encode_check(version + payload).decode('ascii')

def encode_p2pkh(public_key: bytes, version: bytes) -> str:
    return base58check_encode(version, hash160(public_key))

def p2wpkh_redeem_script(public_key: bytes) -> bytes:
    """OP_0 <20-byte key hash>"""
    return b'\x00\x14' + hash160(public_key)

def encode_p2sh_p2wpkh(public_key: bytes, version: bytes) -> str:
    return base58check_encode(version, hash160(p2wpkh_redeem_script(public_key)))

def _valid_witness_program(witness_version: int, program: bytes) -> bool:
    if not 0 <= witness_version <= 16 or not 2 <= len(program) <= 40:
        return False
    return witness_version != 0 or len(program) in (20, 32)

def encode_segwit(hrp: str, witness_version: int, program: bytes) -> str:
    """bech32 for v0, bech32m for v1+"""
    if not _valid_witness_program(witness_version, program):
        raise AddressGenerationError(
            f"Invalid witness program (version {witness_version}, {len(program)} bytes)"
        )
    try:
        return SegwitBech32Encoder.Encode(hrp, witness_version, bytes(program))
    except ValueError as e:
        raise AddressGenerationError(f"Segwit encoding failed: {e}") from e

def encode_p2wpkh(public_key: bytes, hrp: str) -> str:
    return encode_segwit(hrp, 0, hash160(public_key))

def xonly(public_key: bytes) -> bytes:
    if len(public_key) != 33:
        raise AddressGenerationError(f"Expected compressed public key, got {len(public_key)} bytes")
    return public_key[1:]

def taproot_output_key(public_key: bytes) -> bytes:
    """BIP341 key-path-only output key for an internal public key"""
    internal = xonly(public_key)
    tweak = tagged_hash("TapTweak", internal)
    try:
        # lift_x: the internal key is taken with even Y
        even_point = PublicKey(b'\x02' + internal)
        output_point = even_point.add(tweak)
    except ValueError as e:
        raise AddressGenerationError(f"Taproot tweak failed: {e}") from e
    return output_point.format(compressed=True)[1:]

def encode_p2tr(public_key: bytes, hrp: str) -> str:
    return encode_segwit(hrp, 1, taproot_output_key(public_key))

def encode_npub(public_key: bytes) -> str:
    data = bech32.convertbits(list(xonly(public_key)), 8, 5)
    return bech32.bech32_encode("npub", data)

# Blech32

_BLECH32_GENERATOR = (
    0x7d52fba40bd886,
    0x5e8dbf1a03950c,
    0x1c3a3c74072a18,
    0x385d72fa0e5139,
    0x7093e5a608865b,
)
BLECH32_CONST = 1
BLECH32M_CONST = 0x455972a3350f7a1
_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"

def _blech32_polymod(values: List[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 55
        chk = ((chk & 0x7fffffffffffff) << 5) ^ value
        for i in range(5):
            if (top >> i) & 1:
                chk ^= _BLECH32_GENERATOR[i]
    return chk

def _hrp_expand(hrp: str) -> List[int]:
    return [ord(x) >> 5 for x in hrp] + [0] + [ord(x) & 31 for x in hrp]

def blech32_create_checksum(hrp: str, data: List[int], const: int = BLECH32_CONST) -> List[int]:
    polymod = _blech32_polymod(_hrp_expand(hrp) + data + [0] * 12) ^ const
    return [(polymod >> 5 * (11 - i)) & 31 for i in range(12)]

def blech32_verify_checksum(hrp: str, data: List[int]) -> bool:
    return _blech32_polymod(_hrp_expand(hrp) + data) in (BLECH32_CONST, BLECH32M_CONST)

def encode_blech32_address(hrp: str, witness_version: int, blinding_key: bytes, program: bytes) -> str:
    """Confidential segwit address: the program is prefixed by the blinding pubkey"""
    if len(blinding_key) != 33:
        raise AddressGenerationError("Blinding key must be a 33-byte compressed public key")
    const = BLECH32_CONST if witness_version == 0 else BLECH32M_CONST
    data = [witness_version] + bech32.convertbits(list(blinding_key + program), 8, 5)
    combined = data + blech32_create_checksum(hrp, data, const)
    return hrp + '1' + ''.join(_CHARSET[d] for d in combined)

def encode_liquid_p2wpkh(public_key: bytes, network, blinding_key: bytes = None) -> str:
    """Confidential when a blinding key is supplied, plain segwit otherwise"""
    program = hash160(public_key)
    if blinding_key is not None:
        return encode_blech32_address(network.liquid_blech32_hrp, 0, blinding_key, program)
    return encode_segwit(network.liquid_hrp, 0, program)
