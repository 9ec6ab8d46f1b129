#!/usr/bin/env python3
from typing import BinaryIO


EOF = -1
CHUNK_SIZE = 1 << 16


class BitInputStream:
    def __init__(self, stream: BinaryIO, chunk_size: int = CHUNK_SIZE) -> None:
        self._stream = stream
        self._chunk_size = chunk_size
        self._buf = b""
        self._idx = 0
        self._acc = 0
        self._nbits = 0
        self.bits_read = 0

    def _next_byte(self) -> int:
        if self._idx >= len(self._buf):
            self._buf = self._stream.read(self._chunk_size)
            self._idx = 0
            if not self._buf:
                return EOF
        byte = self._buf[self._idx]
        self._idx += 1
        return byte

    def read_bits(self, n: int) -> int:
        """Read ``n`` bits MSB-first; return EOF if fewer than ``n`` bits remain."""
        while self._nbits < n:
            byte = self._next_byte()
            if byte == EOF:
                return EOF
            self._acc = (self._acc << 8) | byte
            self._nbits += 8
        self._nbits -= n
        value = self._acc >> self._nbits
        self._acc &= (1 << self._nbits) - 1
        self.bits_read += n
        return value

    def reset(self) -> None:
        self._stream.seek(0)
        self._buf = b""
        self._idx = 0
        self._acc = 0
        self._nbits = 0
        self.bits_read = 0

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "BitInputStream":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class BitOutputStream:
    def __init__(self, stream: BinaryIO, chunk_size: int = CHUNK_SIZE) -> None:
        self._stream = stream
        self._chunk_size = chunk_size
        self._buf = bytearray()
        self._acc = 0
        self._nbits = 0
        self.bits_written = 0

    def write_bits(self, n: int, value: int) -> None:
        if n <= 0:
            return
        self._acc = (self._acc << n) | (value & ((1 << n) - 1))
        self._nbits += n
        self.bits_written += n
        while self._nbits >= 8:
            self._nbits -= 8
            self._buf.append((self._acc >> self._nbits) & 0xFF)
        self._acc &= (1 << self._nbits) - 1
        if len(self._buf) >= self._chunk_size:
            self._stream.write(bytes(self._buf))
            self._buf.clear()

    def close(self) -> None:
        # Pad the trailing partial byte with zeros.
        if self._nbits:
            self._buf.append((self._acc << (8 - self._nbits)) & 0xFF)
            self._acc = 0
            self._nbits = 0
        if self._buf:
            self._stream.write(bytes(self._buf))
            self._buf.clear()
        self._stream.flush()

    def __enter__(self) -> "BitOutputStream":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
