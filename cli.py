"""
Command-line front end: Huffman-code a piece of text and report on it.

How to run:
  huffman-codec "huffman coding is fun"
  huffman-codec --file notes.txt --quiet
  echo "data compression is essential" | huffman-codec
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import huffman as huff


def display_symbol(symbol) -> str:
    # whitespace and control characters would vanish in the table
    text = symbol if isinstance(symbol, str) else chr(symbol)
    return text if text.isprintable() and not text.isspace() else repr(text)


def print_frequency_table(frequencies) -> None:
    print("Frequency Table:")
    for symbol, count in sorted(frequencies.items(), key=lambda kv: (-kv[1], str(kv[0]))):
        print(f"  {display_symbol(symbol):>6} : {count}")


def print_code_table(code_map, frequencies) -> None:
    print(f"{'Symbol':>8} | {'Frequency':>9} | Huffman Code")
    for symbol, code in sorted(code_map.items(), key=lambda kv: (len(kv[1]), kv[1])):
        print(f"{display_symbol(symbol):>8} | {frequencies[symbol]:>9} | {code}")


def read_text(args) -> str:
    if args.file is not None:
        return Path(args.file).read_text(encoding=args.encoding)
    if args.text is not None:
        return args.text
    return sys.stdin.read().rstrip("\n")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="huffman-codec", description="Huffman-code a string and report the result")
    ap.add_argument("text", nargs="?", default=None, help="Text to encode (stdin when omitted)")
    ap.add_argument("--file", type=str, default=None, help="Read the text from this file instead")
    ap.add_argument("--encoding", type=str, default="utf-8", help="Encoding used with --file")
    ap.add_argument("--bits-per-symbol", type=int, default=8, help="Raw size of one symbol for the ratio")
    ap.add_argument("--quiet", action="store_true", help="Only print sizes and the ratio")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.bits_per_symbol < 1:
        print(f"error: --bits-per-symbol must be at least 1, got {args.bits_per_symbol}", file=sys.stderr)
        return 1

    try:
        text = read_text(args)
        message = huff.encode_message(text)
        if message.root is None:
            # an empty string has no tree to report on
            raise huff.EmptyInputError("input is empty, nothing to encode")
        decoded = huff.decode_message(message, like=text)
    except (huff.HuffmanError, OSError, UnicodeDecodeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if not args.quiet:
        print_frequency_table(message.frequencies)
        print()
        print_code_table(message.code_map, message.frequencies)
        print()
        print(f"Original String: {text}")
        print(f"Encoded Binary Representation: {message.bits}")
        print(f"Decoded String: {decoded}")

    if decoded == text:
        print("The decoded string matches the original string.")
    else:
        print("Error: The decoded string does not match the original string.")

    original_bits = message.length * args.bits_per_symbol
    ratio = huff.compression_ratio(message.bit_length, message.length, args.bits_per_symbol)
    print()
    print(f"Original Size: {original_bits} bits")
    print(f"Compressed Size: {message.bit_length} bits")
    print(f"Compression Ratio: {ratio * 100:.2f}%")
    return 0 if decoded == text else 1


if __name__ == "__main__":
    raise SystemExit(main())
