#!/usr/bin/env python3
import io
import logging
import os
import shutil
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from huffstream.bit_io import EOF, BitInputStream, BitOutputStream
from huffstream.errors import HuffException, InvalidFormatError, MalformedHeaderError, TruncatedStreamError
from huffstream.huffman_utils import (
    BITS_PER_INT,
    BITS_PER_WORD,
    HUFF_NUMBER,
    HUFF_TREE,
    PSEUDO_EOF,
    HuffNode,
    build_codes,
    build_huffman_tree,
    payload_bits,
    read_for_counts,
    read_tree,
    write_header,
)
from huffstream.log_utils import DEBUG_HIGH, DEBUG_LOW

logger = logging.getLogger(__name__)


@dataclass
class HuffStats:
    bits_read: int
    bits_written: int
    header_bits: int
    symbols: int

    @property
    def ratio(self) -> float:
        return self.bits_read / self.bits_written if self.bits_written > 0 else 0.0


def write_compressed_bits(codes: Dict[int, str], bits_in: BitInputStream, bits_out: BitOutputStream) -> int:
    """Encode every byte of ``bits_in`` followed by the PSEUDO_EOF code.

    Returns the number of bytes encoded.
    """
    table: Dict[int, Tuple[int, int]] = {
        sym: (int(code, 2) if code else 0, len(code)) for sym, code in codes.items()
    }
    count = 0
    while True:
        val = bits_in.read_bits(BITS_PER_WORD)
        if val == EOF:
            break
        if val not in table:
            raise HuffException(f"Symbol {val} has no Huffman code; input changed between passes?")
        value, length = table[val]
        bits_out.write_bits(length, value)
        count += 1
    value, length = table[PSEUDO_EOF]
    bits_out.write_bits(length, value)
    return count


def decode_payload(root: HuffNode, bits_in: BitInputStream, bits_out: BitOutputStream) -> int:
    if root.is_leaf:
        if root.value == PSEUDO_EOF:
            return 0
        raise MalformedHeaderError(f"Single-leaf tree without PSEUDO_EOF (symbol {root.value}).")
    count = 0
    current = root
    while True:
        bit = bits_in.read_bits(1)
        if bit == EOF:
            raise TruncatedStreamError(f"Bad input: no PSEUDO_EOF after {count} decoded bytes.")
        current = current.left if bit == 0 else current.right
        if current.is_leaf:
            if current.value == PSEUDO_EOF:
                break
            bits_out.write_bits(BITS_PER_WORD, current.value)
            count += 1
            current = root
    return count


class HuffProcessor:
    def __init__(self, debug_level: int = 0) -> None:
        self.debug_level = debug_level

    def _log_table(self, codes: Dict[int, str], counts: Optional[np.ndarray] = None) -> None:
        if self.debug_level < DEBUG_HIGH:
            return
        for sym in sorted(codes):
            if counts is None:
                logger.debug("symbol %d code %s", sym, codes[sym] or "<empty>")
            else:
                logger.debug("symbol %d count %d code %s", sym, int(counts[sym]), codes[sym] or "<empty>")

    def compress(self, bits_in: BitInputStream, bits_out: BitOutputStream) -> HuffStats:
        try:
            counts = read_for_counts(bits_in)
            root = build_huffman_tree(counts)
            codes = build_codes(root)
            if self.debug_level >= DEBUG_LOW:
                logger.debug("counted %d bytes, %d distinct symbols", bits_in.bits_read // BITS_PER_WORD, len(codes))
                logger.debug("predicted payload bits: %d", payload_bits(counts, codes))
            self._log_table(codes, counts)

            bits_out.write_bits(BITS_PER_INT, HUFF_TREE)
            write_header(root, bits_out)
            header_bits = bits_out.bits_written - BITS_PER_INT

            bits_in.reset()
            symbols = write_compressed_bits(codes, bits_in, bits_out)
        finally:
            bits_out.close()

        stats = HuffStats(bits_in.bits_read, bits_out.bits_written, header_bits, symbols)
        if self.debug_level >= DEBUG_LOW:
            logger.debug("header bits: %d", header_bits)
            logger.debug("bits read %d, bits written %d", stats.bits_read, stats.bits_written)
        return stats

    def decompress(self, bits_in: BitInputStream, bits_out: BitOutputStream) -> HuffStats:
        try:
            magic = bits_in.read_bits(BITS_PER_INT)
            if magic == EOF:
                raise InvalidFormatError(magic, "input too short to hold a magic number")
            if magic == HUFF_NUMBER:
                raise InvalidFormatError(magic, f"legacy count-table header 0x{magic:08x} is not supported")
            if magic != HUFF_TREE:
                raise InvalidFormatError(magic)

            root = read_tree(bits_in)
            header_bits = bits_in.bits_read - BITS_PER_INT
            codes = build_codes(root)
            if PSEUDO_EOF not in codes:
                raise MalformedHeaderError("Tree header has no PSEUDO_EOF leaf.")
            if self.debug_level >= DEBUG_LOW:
                logger.debug("read tree with %d leaves in %d header bits", len(codes), header_bits)
            self._log_table(codes)

            symbols = decode_payload(root, bits_in, bits_out)
        finally:
            bits_out.close()

        stats = HuffStats(bits_in.bits_read, bits_out.bits_written, header_bits, symbols)
        if self.debug_level >= DEBUG_LOW:
            logger.debug("bits read %d, bits written %d", stats.bits_read, stats.bits_written)
        return stats


def compress_bytes(data: bytes, debug_level: int = 0) -> bytes:
    out = io.BytesIO()
    HuffProcessor(debug_level).compress(BitInputStream(io.BytesIO(data)), BitOutputStream(out))
    return out.getvalue()


def decompress_bytes(data: bytes, debug_level: int = 0) -> bytes:
    out = io.BytesIO()
    HuffProcessor(debug_level).decompress(BitInputStream(io.BytesIO(data)), BitOutputStream(out))
    return out.getvalue()


def _run_on_files(op: Callable[[BitInputStream, BitOutputStream], HuffStats], src: str, dst: str) -> HuffStats:
    # Opening dst for writing would truncate src before it is read.
    if os.path.exists(dst) and os.path.exists(src) and os.path.samefile(src, dst):
        raise shutil.SameFileError(f"{src} and {dst} are the same file")
    with open(src, "rb") as fin, open(dst, "wb") as fout:
        try:
            return op(BitInputStream(fin), BitOutputStream(fout))
        except Exception:
            # Leave no partial output behind.
            fout.close()
            os.remove(dst)
            raise


def compress_file(src: str, dst: str, debug_level: int = 0) -> HuffStats:
    return _run_on_files(HuffProcessor(debug_level).compress, src, dst)


def decompress_file(src: str, dst: str, debug_level: int = 0) -> HuffStats:
    return _run_on_files(HuffProcessor(debug_level).decompress, src, dst)
