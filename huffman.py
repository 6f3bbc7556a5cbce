"""
Huffman prefix-code construction, encoding and decoding.

Pipeline: count_frequencies -> build_huffman_tree -> generate_huffman_codes -> huffman_encode,
and huffman_decode walks the same tree back to symbols.

Conventions shared by every function here:
  - left child = '0', right child = '1'
  - the first node popped from the queue becomes the left child
  - ties on frequency go to whichever node entered the queue first
  - one distinct symbol -> the tree is a single leaf and its code is "0"
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterable, List, Optional, Sequence, Union


SINGLE_SYMBOL_CODE = "0"


# Errors

class HuffmanError(ValueError):
    """Base class for every error raised by the codec."""


class EmptyInputError(HuffmanError):
    """No symbols to build a tree (or code table) from."""


class UnknownSymbolError(HuffmanError, KeyError):
    """A symbol to encode has no entry in the code table."""

    def __init__(self, symbol, position: Optional[int] = None):
        self.symbol = symbol
        self.position = position
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"symbol {symbol!r}{where} has no code in the table")

    def __str__(self):
        # KeyError would otherwise repr() the message
        return self.args[0]


class MalformedStreamError(HuffmanError):
    """The bit stream does not decode cleanly against the tree."""


# Tree

@dataclass(frozen=True)
class HuffmanLeaf:
    symbol: Hashable
    frequency: int


@dataclass(frozen=True)
class HuffmanInternal:
    frequency: int  # sum of both children
    left: "HuffmanNode" = field(repr=False)
    right: "HuffmanNode" = field(repr=False)


HuffmanNode = Union[HuffmanLeaf, HuffmanInternal]


def count_frequencies(data: Iterable[Hashable]) -> Dict[Hashable, int]: # keys keep first-occurrence order
    freqs: Dict[Hashable, int] = {}
    for symbol in data:
        freqs[symbol] = freqs.get(symbol, 0) + 1
    return freqs


def build_huffman_tree(frequency_table: Dict[Hashable, int]) -> HuffmanNode:
    """
    Greedy min-frequency merge (Huffman's algorithm)

    Queue entries are (frequency, insertion_order, node) so equal frequencies pop in
    insertion order and nodes themselves are never compared. Leaves are queued in the
    iteration order of frequency_table, merged nodes after everything already queued.
    """
    if not frequency_table:
        raise EmptyInputError("cannot build a Huffman tree from an empty frequency table")

    order = itertools.count()
    priority_queue = [(frequency, next(order), HuffmanLeaf(symbol, frequency))
                      for symbol, frequency in frequency_table.items()]
    heapq.heapify(priority_queue)

    while len(priority_queue) > 1:
        left_freq, _, left = heapq.heappop(priority_queue)
        right_freq, _, right = heapq.heappop(priority_queue)
        merged = HuffmanInternal(left_freq + right_freq, left, right)
        heapq.heappush(priority_queue, (merged.frequency, next(order), merged))

    return priority_queue[0][2] # root of the tree (a lone leaf when there is one symbol)


def generate_huffman_codes(root: Optional[HuffmanNode]) -> Dict[Hashable, str]: # symbol -> code, in left-to-right leaf order
    if root is None:
        raise EmptyInputError("cannot generate codes for an empty tree")

    if isinstance(root, HuffmanLeaf):
        return {root.symbol: SINGLE_SYMBOL_CODE}

    codes: Dict[Hashable, str] = {}
    stack = [(root, "")]
    while stack:
        node, current_code = stack.pop()
        if isinstance(node, HuffmanLeaf):
            codes[node.symbol] = current_code
            continue
        # right pushed first so the left subtree is visited first
        stack.append((node.right, current_code + "1"))
        stack.append((node.left, current_code + "0"))
    return codes


def huffman_encode(data: Iterable[Hashable], code_map: Dict[Hashable, str]) -> str:
    out: List[str] = []
    for position, symbol in enumerate(data):
        try:
            out.append(code_map[symbol])
        except KeyError:
            raise UnknownSymbolError(symbol, position) from None
    return "".join(out)


def huffman_decode(bitstring: str, root: Optional[HuffmanNode]) -> list:
    """
    Walk the tree one bit at a time, emitting a symbol at every leaf.

    Raises MalformedStreamError for non-binary characters, for a stream that stops
    in the middle of a code, and for a '1' against a single-leaf tree.
    """
    if root is None:
        if bitstring:
            raise EmptyInputError("cannot decode a non-empty stream without a tree")
        return []

    decoded = []

    if isinstance(root, HuffmanLeaf):
        for index, bit in enumerate(bitstring):
            if bit != SINGLE_SYMBOL_CODE:
                raise MalformedStreamError(
                    f"unexpected {bit!r} at bit {index}: tree has a single symbol coded {SINGLE_SYMBOL_CODE!r}")
            decoded.append(root.symbol)
        return decoded

    current_node = root
    for index, bit in enumerate(bitstring):
        if bit == "0":
            current_node = current_node.left
        elif bit == "1":
            current_node = current_node.right
        else:
            raise MalformedStreamError(f"invalid digit {bit!r} at bit {index}")

        if isinstance(current_node, HuffmanLeaf):
            decoded.append(current_node.symbol)
            current_node = root

    if current_node is not root:
        raise MalformedStreamError(
            f"stream of {len(bitstring)} bits ends in the middle of a code (truncated or corrupt)")
    return decoded


# Session helpers

@dataclass
class EncodedMessage:
    bits: str
    root: Optional[HuffmanNode]
    code_map: Dict[Hashable, str]
    frequencies: Dict[Hashable, int]
    length: int  # number of input symbols

    @property
    def bit_length(self) -> int:
        return len(self.bits)


def encode_message(data: Sequence[Hashable]) -> EncodedMessage:
    """Count, build, generate and encode in one go. Empty input gives an empty message with no tree."""
    frequencies = count_frequencies(data)
    if not frequencies:
        return EncodedMessage(bits="", root=None, code_map={}, frequencies={}, length=0)

    root = build_huffman_tree(frequencies)
    code_map = generate_huffman_codes(root)
    bits = huffman_encode(data, code_map)
    return EncodedMessage(bits=bits, root=root, code_map=code_map, frequencies=frequencies, length=len(data))


def decode_message(message: EncodedMessage, like=None):
    """Decode message.bits; pass the original type (a str or bytes) as `like` to get that type back"""
    symbols = huffman_decode(message.bits, message.root)
    if isinstance(like, str):
        return "".join(symbols)
    if isinstance(like, (bytes, bytearray)):
        return bytes(symbols)
    return symbols


def compression_ratio(encoded_bits: int, symbol_count: int, bits_per_symbol: int = 8) -> float:
    if bits_per_symbol <= 0:
        raise ValueError(f"bits_per_symbol must be positive, got {bits_per_symbol}")
    if symbol_count <= 0:
        return 0.0
    return encoded_bits / (symbol_count * bits_per_symbol)
