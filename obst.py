"""
Optimal binary search tree over a Huffman code table.

Used as an alternative to a dict lookup when encoding: frequent symbols sit near the
root so the average number of key comparisons per symbol is minimised.
"""

from __future__ import annotations

from typing import Dict, Hashable, Iterable, List, Optional, Sequence, Tuple

from huffman import EmptyInputError, UnknownSymbolError


class OBSTNode: # Optimal Binary Search Tree Node
    __slots__ = ("key", "value", "left", "right")

    def __init__(self, key, value=None):
        self.key = key # symbol
        self.value = value # its Huffman code
        self.left = None
        self.right = None


def build_obst(keys: Sequence, weights: Sequence[float], values: Optional[Sequence] = None) -> OBSTNode:
    """
    keys must be sorted ascending; weights[i] is the access weight of keys[i].

    Knuth's O(n^2) variant of the DP: the optimal root of keys[i..j] lies between
    the optimal roots of keys[i..j-1] and keys[i+1..j].
    """
    n = len(keys)
    if n == 0:
        raise EmptyInputError("cannot build a search tree without keys")

    # 1-based tables, cost[i][i-1] = 0 for empty ranges
    prefix = [0.0] * (n + 1)
    for i, w in enumerate(weights, start=1):
        prefix[i] = prefix[i - 1] + w

    cost = [[0.0] * (n + 2) for _ in range(n + 2)]
    root_table = [[0] * (n + 2) for _ in range(n + 2)]
    for i in range(1, n + 1):
        cost[i][i] = weights[i - 1]
        root_table[i][i] = i

    for length in range(2, n + 1):
        for i in range(1, n - length + 2):
            j = i + length - 1
            range_weight = prefix[j] - prefix[i - 1]
            best_cost = float("inf")
            best_root = root_table[i][j - 1]
            for r in range(root_table[i][j - 1], root_table[i + 1][j] + 1):
                c = cost[i][r - 1] + cost[r + 1][j]
                if c < best_cost:
                    best_cost = c
                    best_root = r
            cost[i][j] = best_cost + range_weight
            root_table[i][j] = best_root

    def build_tree(i, j):
        if i > j:
            return None
        r = root_table[i][j]
        node = OBSTNode(keys[r - 1], values[r - 1] if values else None)
        node.left = build_tree(i, r - 1)
        node.right = build_tree(r + 1, j)
        return node

    return build_tree(1, n)


def build_code_lookup(code_map: Dict[Hashable, str], frequencies: Dict[Hashable, int]) -> OBSTNode:
    keys = sorted(code_map.keys())
    weights = [frequencies.get(k, 0) for k in keys]
    values = [code_map[k] for k in keys]
    return build_obst(keys, weights, values=values)


def obst_search(root: Optional[OBSTNode], key) -> Tuple[Optional[str], int]: # (value or None, comparisons made)
    comparisons = 0
    node = root
    while node is not None:
        comparisons += 1
        if key == node.key:
            return node.value, comparisons
        try:
            node = node.left if key < node.key else node.right
        except TypeError:
            # not orderable against the table's symbols, so not one of them
            return None, comparisons
    return None, comparisons


def obst_encode(data: Iterable, root: OBSTNode) -> Tuple[str, int]:
    """Encode via OBST lookups; returns (bits, total comparisons)"""
    out: List[str] = []
    total_comparisons = 0
    for position, symbol in enumerate(data):
        code, comps = obst_search(root, symbol)
        total_comparisons += comps
        if code is None:
            raise UnknownSymbolError(symbol, position)
        out.append(code)
    return "".join(out), total_comparisons
