"""
Bit-level encode/decode for Huffman codes.

The packed stream carries no header: the decoder is handed the same tree
that produced the code map. Bits are packed most-significant-bit first and
the last byte is zero-padded, with the pad count kept alongside the bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import Dict, Iterable, Iterator, List, Optional

from huffman import (
    HuffmanNode,
    MalformedTreeError,
    SymbolNotInCodeMapError,
    TruncatedStreamError,
)

BUFFER_SIZE = 4096  # bytes held by a BitWriter before it flushes to its sink


@dataclass(frozen=True)
class PackedBits:
    data: bytes
    pad_bits: int = 0

    def __post_init__(self):
        if not 0 <= self.pad_bits <= 7:
            raise ValueError(f"pad_bits must be in 0..7, got {self.pad_bits}")
        if self.pad_bits and not self.data:
            raise ValueError("pad_bits set on an empty stream")

    @property
    def bit_length(self) -> int:
        return len(self.data) * 8 - self.pad_bits

    def __len__(self) -> int:
        return self.bit_length

    def __iter__(self) -> Iterator[int]:
        return iter(BitReader(self))

    def to_bitstring(self) -> str:
        return "".join("1" if bit else "0" for bit in self)


class BitWriter:
    """
    Accumulates bits into whole bytes, buffering them in a bytearray and
    flushing BUFFER_SIZE-byte chunks to a binary sink (BytesIO by default).
    """

    def __init__(self, sink=None, buffer_size: int = BUFFER_SIZE):
        self.sink = sink if sink is not None else BytesIO()
        self.buffer_size = buffer_size
        self._buffer = bytearray()
        self._acc = 0
        self._acc_bits = 0
        self._closed = False

    def write_bit(self, bit: int) -> None:
        if self._closed:
            raise ValueError("write to a closed BitWriter")
        self._acc = (self._acc << 1) | (1 if bit else 0)
        self._acc_bits += 1
        if self._acc_bits == 8:
            self._buffer.append(self._acc & 0xFF)
            self._acc = 0
            self._acc_bits = 0
            if len(self._buffer) >= self.buffer_size:
                self._flush_buffer()

    def write_code(self, code: str) -> None:
        for ch in code:
            if ch == '1':
                self.write_bit(1)
            elif ch == '0':
                self.write_bit(0)
            else:
                raise ValueError(f"code {code!r} contains non-binary character {ch!r}")

    def _flush_buffer(self) -> None:
        self.sink.write(bytes(self._buffer))
        self._buffer.clear()

    def close(self) -> int:
        """Pad the trailing partial byte with zeros, flush, and return the pad count."""
        if self._closed:
            raise ValueError("BitWriter already closed")
        pad_bits = 0
        if self._acc_bits != 0:
            pad_bits = 8 - self._acc_bits
            self._buffer.append((self._acc << pad_bits) & 0xFF)
            self._acc = 0
            self._acc_bits = 0
        self._flush_buffer()
        self._closed = True
        return pad_bits


class BitReader:
    """Yields the bits of a PackedBits stream in order, never the padding."""

    def __init__(self, packed: PackedBits):
        self.packed = packed

    def __iter__(self) -> Iterator[int]:
        total_bits = self.packed.bit_length
        bit_index = 0
        for byte in self.packed.data:
            for i in range(7, -1, -1):
                if bit_index >= total_bits:
                    return
                yield (byte >> i) & 1
                bit_index += 1


def huffman_encode(data: Iterable, code_map: Dict) -> PackedBits:
    """
    Concatenate the code of every symbol in data.

    A one-entry code map still writes its 1-bit code once per occurrence;
    decoding that case replays the leaf weight instead of reading the bits.
    """
    sink = BytesIO()
    writer = BitWriter(sink)
    for symbol in data:
        try:
            code = code_map[symbol]
        except KeyError:
            raise SymbolNotInCodeMapError(symbol) from None
        writer.write_code(code)
    pad_bits = writer.close()
    return PackedBits(sink.getvalue(), pad_bits)


def huffman_decode(packed: PackedBits, root: Optional[HuffmanNode]) -> List:
    """
    Walk the tree from the root, 0 = left and 1 = right, emitting a symbol
    at every leaf.

    The empty tree decodes to nothing. A lone-leaf tree decodes to its
    symbol repeated `frequency` times without reading any bits. Running out
    of bits away from the root raises TruncatedStreamError.
    """
    if root is None:
        return []

    if root.is_leaf():
        if root.symbol is None:
            raise MalformedTreeError("leaf root has no symbol")
        return [root.symbol] * root.frequency

    decoded = []
    current_node = root
    bits_consumed = 0
    for bit in BitReader(packed):
        current_node = current_node.right if bit else current_node.left
        bits_consumed += 1
        if current_node is None:
            raise MalformedTreeError(f"missing child reached after {bits_consumed} bits")

        # Leaf
        if current_node.is_leaf():
            if current_node.symbol is None:
                raise MalformedTreeError(f"leaf without symbol reached after {bits_consumed} bits")
            decoded.append(current_node.symbol)
            current_node = root

    if current_node is not root:
        raise TruncatedStreamError(bits_consumed)
    return decoded


def decode_bytes(packed: PackedBits, root: Optional[HuffmanNode]) -> bytes:
    return bytes(huffman_decode(packed, root))
