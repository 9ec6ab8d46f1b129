#!/usr/bin/env python3


class HuffException(ValueError):
    """Base class for every failure detected while reading or writing a Huffman stream."""


class InvalidFormatError(HuffException):
    def __init__(self, magic: int, message: str = "") -> None:
        self.magic = magic
        super().__init__(message or f"invalid magic number 0x{magic:08x}")


class MalformedHeaderError(HuffException):
    pass


class TruncatedStreamError(HuffException):
    pass


class EmptyInputError(HuffException):
    pass
