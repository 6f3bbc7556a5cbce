"""
Packing of '0'/'1' bit strings into bytes (MSB first) and back.

The final partial byte is padded with zero bits; callers keep pad_bits next to the payload.
"""

from typing import Tuple

from huffman import MalformedStreamError


def pack_bits(bitstring: str) -> Tuple[bytes, int]:
    """
    Converts a bit string into packed bytes
    Returns (packed_bytes, pad_bits) where pad_bits is number of 0 bits added at the end
    """
    out = bytearray()
    acc = 0
    acc_bits = 0

    for index, ch in enumerate(bitstring):
        if ch == '1':
            acc = (acc << 1) | 1
        elif ch == '0':
            acc = acc << 1
        else:
            raise MalformedStreamError(f"invalid digit {ch!r} at bit {index}")
        acc_bits += 1
        if acc_bits == 8:
            out.append(acc)
            acc = 0
            acc_bits = 0

    pad_bits = 0
    if acc_bits != 0:
        pad_bits = 8 - acc_bits
        out.append((acc << pad_bits) & 0xFF)

    return bytes(out), pad_bits


def unpack_bits(packed: bytes, pad_bits: int) -> str:
    if not 0 <= pad_bits <= 7:
        raise MalformedStreamError(f"pad_bits must be in 0..7, got {pad_bits}")
    if not packed and pad_bits:
        raise MalformedStreamError("pad_bits set on an empty payload")

    bits = "".join(format(byte, "08b") for byte in packed)
    total_bits = len(bits) - pad_bits
    return bits[:total_bits]
