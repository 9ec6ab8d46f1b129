#!/usr/bin/env python3
import heapq
from typing import Dict, Optional, Sequence, Set

import numpy as np

from huffstream.bit_io import EOF, BitInputStream, BitOutputStream
from huffstream.errors import EmptyInputError, MalformedHeaderError


BITS_PER_WORD = 8
BITS_PER_INT = 32
ALPH_SIZE = 1 << BITS_PER_WORD  # 256
PSEUDO_EOF = ALPH_SIZE
HUFF_NUMBER = 0xFACE8200
HUFF_TREE = HUFF_NUMBER | 1

MAX_DEPTH = ALPH_SIZE + 1
COUNT_CHUNK = 1 << 16


class HuffNode:
    __slots__ = ("value", "weight", "left", "right")

    def __init__(self, value: int, weight: int,
                 left: Optional["HuffNode"] = None, right: Optional["HuffNode"] = None) -> None:
        self.value = value
        self.weight = weight
        self.left = left
        self.right = right

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def __repr__(self) -> str:
        if self.is_leaf:
            return f"HuffNode(value={self.value}, weight={self.weight})"
        return f"HuffNode(weight={self.weight}, left={self.left!r}, right={self.right!r})"


def read_for_counts(bits_in: BitInputStream) -> np.ndarray:
    freqs = np.zeros(ALPH_SIZE + 1, dtype=np.int64)
    chunk = bytearray()
    while True:
        val = bits_in.read_bits(BITS_PER_WORD)
        if val == EOF:
            break
        chunk.append(val)
        if len(chunk) >= COUNT_CHUNK:
            freqs += np.bincount(np.frombuffer(bytes(chunk), dtype=np.uint8), minlength=ALPH_SIZE + 1)
            chunk.clear()
    if chunk:
        freqs += np.bincount(np.frombuffer(bytes(chunk), dtype=np.uint8), minlength=ALPH_SIZE + 1)
    freqs[PSEUDO_EOF] = 1
    return freqs


def build_huffman_tree(freqs: Sequence[int]) -> HuffNode:
    """Merge the two lightest nodes until one root remains.

    Ties on weight are broken by an order key: a leaf uses its symbol value,
    an internal node uses ``ALPH_SIZE + 1`` plus its creation index. The first
    node popped becomes the left child. The resulting bitstream is therefore
    fully determined by the counts.
    """
    heap = []
    for sym, f in enumerate(freqs):
        f = int(f)
        if f < 0:
            raise ValueError(f"Negative frequency for symbol {sym}: {f}")
        if f > 0:
            heap.append((f, sym, HuffNode(sym, f)))
    if not heap:
        raise EmptyInputError("Cannot build a Huffman tree from an empty frequency table.")
    heapq.heapify(heap)

    order = ALPH_SIZE + 1
    while len(heap) > 1:
        f1, _, left = heapq.heappop(heap)
        f2, _, right = heapq.heappop(heap)
        heapq.heappush(heap, (f1 + f2, order, HuffNode(0, f1 + f2, left, right)))
        order += 1
    return heap[0][2]


def build_codes(root: HuffNode) -> Dict[int, str]:
    codes: Dict[int, str] = {}

    def walk(node: HuffNode, path: str) -> None:
        if node.is_leaf:
            codes[node.value] = path
            return
        walk(node.left, path + "0")
        walk(node.right, path + "1")

    walk(root, "")
    return codes


def code_lengths(codes: Dict[int, str]) -> np.ndarray:
    lengths = np.zeros(ALPH_SIZE + 1, dtype=np.int64)
    for sym, code in codes.items():
        lengths[sym] = len(code)
    return lengths


def payload_bits(freqs: Sequence[int], codes: Dict[int, str]) -> int:
    """Exact payload size in bits, PSEUDO_EOF code included."""
    return int(np.dot(np.asarray(freqs, dtype=np.int64), code_lengths(codes)))


def write_header(root: HuffNode, bits_out: BitOutputStream) -> None:
    if root.is_leaf:
        bits_out.write_bits(1, 1)
        bits_out.write_bits(BITS_PER_WORD + 1, root.value)
        return
    bits_out.write_bits(1, 0)
    write_header(root.left, bits_out)
    write_header(root.right, bits_out)


def read_tree(bits_in: BitInputStream) -> HuffNode:
    seen: Set[int] = set()

    def read_node(depth: int) -> HuffNode:
        if depth > MAX_DEPTH:
            raise MalformedHeaderError(f"Tree header nests deeper than {MAX_DEPTH} levels.")
        bit = bits_in.read_bits(1)
        if bit == EOF:
            raise MalformedHeaderError("Reading tree header failed: unexpected end of input.")
        if bit == 0:
            left = read_node(depth + 1)
            right = read_node(depth + 1)
            return HuffNode(0, 0, left, right)
        value = bits_in.read_bits(BITS_PER_WORD + 1)
        if value == EOF:
            raise MalformedHeaderError("Reading tree header failed: truncated leaf symbol.")
        if value > PSEUDO_EOF:
            raise MalformedHeaderError(f"Leaf symbol out of range: {value}")
        if value in seen:
            raise MalformedHeaderError(f"Leaf symbol {value} appears twice in tree header.")
        seen.add(value)
        return HuffNode(value, 0)

    return read_node(0)
