from typing import List, Optional, Tuple

import bech32
from Crypto.Hash import SHA256

from src.explorer.protocol import HASH_PREFIX

BECH32M_CONST = 0x2BC830A3


def ensure_hex_prefix(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value)
    if value[:2] != HASH_PREFIX:
        return HASH_PREFIX + value
    return value


def strip_hex_prefix(value: str) -> str:
    if value[:2] == HASH_PREFIX:
        return value[2:]
    return value


def hex_to_bytes(value: str) -> bytes:
    return bytes.fromhex(strip_hex_prefix(value))


def int_to_bytes(value: int) -> bytes:
    """
    Minimal two's complement big-endian encoding, the way the chain serializes
    amounts before hashing. Zero encodes to an empty byte string.
    """
    if value == 0:
        return b""
    byte_count = (value.bit_length() + 8) >> 3
    encoded = value.to_bytes(byte_count, "big", signed=True)
    while len(encoded) > 1 and encoded[0] == (0xFF if encoded[1] & 0x80 else 0):
        encoded = encoded[1:]
    return encoded


def coin_name(parent_coin_info: str, puzzle_hash: str, amount: int) -> str:
    payload = hex_to_bytes(parent_coin_info) + hex_to_bytes(puzzle_hash) + int_to_bytes(int(amount))
    return HASH_PREFIX + SHA256.new(payload).hexdigest()


# bech32m (BIP-350) differs from bech32 only in the checksum constant

def _bech32m_checksum(hrp: str, data: List[int]) -> List[int]:
    polymod = bech32.bech32_polymod(bech32.bech32_hrp_expand(hrp) + data + [0] * 6) ^ BECH32M_CONST
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]


def bech32m_encode(hrp: str, data: List[int]) -> str:
    combined = data + _bech32m_checksum(hrp, data)
    return hrp + "1" + "".join(bech32.CHARSET[d] for d in combined)


def bech32m_decode(bech: str) -> Tuple[Optional[str], Optional[List[int]]]:
    if any(ord(x) < 33 or ord(x) > 126 for x in bech) or (bech.lower() != bech and bech.upper() != bech):
        return None, None
    bech = bech.lower()
    pos = bech.rfind("1")
    if pos < 1 or pos + 7 > len(bech) or len(bech) > 90:
        return None, None
    if not all(x in bech32.CHARSET for x in bech[pos + 1:]):
        return None, None
    hrp = bech[:pos]
    data = [bech32.CHARSET.find(x) for x in bech[pos + 1:]]
    if bech32.bech32_polymod(bech32.bech32_hrp_expand(hrp) + data) != BECH32M_CONST:
        return None, None
    return hrp, data[:-6]


def encode_puzzle_hash(puzzle_hash: str, prefix: str) -> str:
    return bech32m_encode(prefix, bech32.convertbits(hex_to_bytes(puzzle_hash), 8, 5))


def decode_puzzle_hash(address: str) -> bytes:
    _, data = bech32m_decode(address)
    if data is None:
        raise ValueError(f"Invalid address: {address}")
    decoded = bech32.convertbits(data, 5, 8, False)
    if decoded is None:
        raise ValueError(f"Invalid address: {address}")
    return bytes(decoded)
