from huffstream.bit_io import EOF, BitInputStream, BitOutputStream
from huffstream.errors import (
    EmptyInputError,
    HuffException,
    InvalidFormatError,
    MalformedHeaderError,
    TruncatedStreamError,
)
from huffstream.huffman_utils import (
    ALPH_SIZE,
    HUFF_TREE,
    PSEUDO_EOF,
    HuffNode,
    build_codes,
    build_huffman_tree,
    read_for_counts,
    read_tree,
    write_header,
)
from huffstream.processor import (
    HuffProcessor,
    HuffStats,
    compress_bytes,
    compress_file,
    decompress_bytes,
    decompress_file,
)

__version__ = "0.1.0"
