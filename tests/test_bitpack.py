import pytest

import huffman as huff
from bitpack import pack_bits, unpack_bits
from huffman import MalformedStreamError


def test_pack_empty():
    assert pack_bits("") == (b"", 0)
    assert unpack_bits(b"", 0) == ""


def test_pack_msb_first_with_padding():
    assert pack_bits("1") == (b"\x80", 7)
    assert pack_bits("00000001" + "1") == (b"\x01\x80", 7)
    assert pack_bits("10101010") == (b"\xaa", 0)


@pytest.mark.parametrize("bits", ["0", "1110", "10101010", "110" * 11])
def test_unpack_restores_exact_length(bits):
    packed, pad_bits = pack_bits(bits)
    assert len(packed) == (len(bits) + 7) // 8
    assert unpack_bits(packed, pad_bits) == bits


def test_pack_rejects_non_binary():
    with pytest.raises(MalformedStreamError):
        pack_bits("0120")


@pytest.mark.parametrize("pad_bits", [-1, 8])
def test_unpack_rejects_bad_pad(pad_bits):
    with pytest.raises(MalformedStreamError):
        unpack_bits(b"\x00", pad_bits)


def test_unpack_rejects_pad_without_payload():
    with pytest.raises(MalformedStreamError):
        unpack_bits(b"", 3)


def test_packed_message_decodes():
    text = "data compression is essential"
    message = huff.encode_message(text)
    packed, pad_bits = pack_bits(message.bits)
    assert "".join(huff.huffman_decode(unpack_bits(packed, pad_bits), message.root)) == text
