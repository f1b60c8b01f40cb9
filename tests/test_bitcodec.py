import random
from io import BytesIO

import pytest

import bitcodec
import huffman as huff


def _pipeline(data):
    root = huff.build_huffman_tree(huff.count_frequencies(data))
    codes = huff.generate_huffman_codes(root)
    return root, codes, bitcodec.huffman_encode(data, codes)


# PackedBits / BitWriter / BitReader

def test_bit_writer_packs_msb_first_and_pads():
    sink = BytesIO()
    writer = bitcodec.BitWriter(sink)
    writer.write_code("101")
    pad = writer.close()
    assert pad == 5
    assert sink.getvalue() == bytes([0b10100000])


def test_bit_writer_whole_bytes_need_no_padding():
    sink = BytesIO()
    writer = bitcodec.BitWriter(sink)
    writer.write_code("1111000011001100")
    assert writer.close() == 0
    assert sink.getvalue() == bytes([0xF0, 0xCC])


def test_bit_writer_flushes_in_chunks():
    sink = BytesIO()
    writer = bitcodec.BitWriter(sink, buffer_size=2)
    writer.write_code("11111111" * 3)
    assert sink.getvalue() == b"\xff\xff"  # third byte still buffered
    writer.close()
    assert sink.getvalue() == b"\xff\xff\xff"


def test_bit_writer_rejects_non_binary_code():
    writer = bitcodec.BitWriter()
    with pytest.raises(ValueError):
        writer.write_code("10x")


def test_bit_writer_close_twice():
    writer = bitcodec.BitWriter()
    writer.close()
    with pytest.raises(ValueError):
        writer.close()


def test_bit_reader_skips_padding():
    packed = bitcodec.PackedBits(bytes([0b10100000]), pad_bits=5)
    assert list(bitcodec.BitReader(packed)) == [1, 0, 1]
    assert packed.bit_length == 3
    assert len(packed) == 3
    assert packed.to_bitstring() == "101"


def test_packed_bits_validates_padding():
    with pytest.raises(ValueError):
        bitcodec.PackedBits(b"\x00", pad_bits=8)
    with pytest.raises(ValueError):
        bitcodec.PackedBits(b"", pad_bits=1)


# huffman_encode

def test_encode_scenario_bits():
    _, codes, packed = _pipeline("AAAABBBCCD")
    expected = "".join(codes[ch] for ch in "AAAABBBCCD")
    assert packed.to_bitstring() == expected
    assert packed.bit_length == 19
    assert packed.pad_bits == 5
    assert len(packed.data) == 3


def test_encode_missing_symbol():
    with pytest.raises(huff.SymbolNotInCodeMapError) as info:
        bitcodec.huffman_encode("abz", {'a': '0', 'b': '1'})
    assert info.value.symbol == 'z'


def test_encode_does_not_mutate_code_map():
    codes = {'a': '0', 'b': '1'}
    bitcodec.huffman_encode("abba", codes)
    assert codes == {'a': '0', 'b': '1'}


def test_encode_single_symbol_writes_one_bit_per_occurrence():
    _, codes, packed = _pipeline("qqqqqqqqqq")
    assert codes == {'q': '0'}
    assert packed.bit_length == 10
    assert packed.data == b"\x00\x00"


def test_encode_empty():
    root, codes, packed = _pipeline(b"")
    assert root is None
    assert codes == {}
    assert packed.data == b""
    assert packed.bit_length == 0


# huffman_decode

def test_roundtrip_text():
    data = "It was the best of times, it was the worst of times"
    root, _, packed = _pipeline(data)
    assert "".join(bitcodec.huffman_decode(packed, root)) == data


def test_roundtrip_random_bytes():
    rng = random.Random(7)
    data = bytes(rng.getrandbits(8) for _ in range(10 * 1024))
    assert len(set(data)) > 100
    root, _, packed = _pipeline(data)
    assert not root.is_leaf()
    assert bitcodec.decode_bytes(packed, root) == data


def test_roundtrip_all_bytes_once():
    data = bytes(range(256))
    root, _, packed = _pipeline(data)
    assert packed.bit_length == 256 * 8
    assert bitcodec.decode_bytes(packed, root) == data


@pytest.mark.parametrize("n", [1, 2, 3])
def test_roundtrip_small_inputs(n):
    # distinct bytes, so every n > 1 goes through the bit walk
    data = bytes(random.Random(n).sample(range(256), n))
    assert len(set(data)) == n
    root, _, packed = _pipeline(data)
    assert bitcodec.decode_bytes(packed, root) == data


def test_roundtrip_large_stream_crosses_buffer():
    rng = random.Random(3)
    data = bytes(rng.choice(b"abcdefgh") for _ in range(bitcodec.BUFFER_SIZE * 4))
    assert len(set(data)) == 8
    root, _, packed = _pipeline(data)
    assert len(packed.data) > bitcodec.BUFFER_SIZE
    assert bitcodec.decode_bytes(packed, root) == data


def test_bit_writer_rejects_write_after_close():
    sink = BytesIO()
    writer = bitcodec.BitWriter(sink, buffer_size=1)
    writer.write_code("1")
    writer.close()
    with pytest.raises(ValueError):
        writer.write_code("11111111")
    assert sink.getvalue() == b"\x80"


def test_decode_empty_tree_ignores_bits():
    assert bitcodec.huffman_decode(bitcodec.PackedBits(b"\xff\x00"), None) == []


def test_decode_single_leaf_replays_weight():
    root, _, packed = _pipeline(b"A" * 1000)
    assert bitcodec.decode_bytes(packed, root) == b"A" * 1000
    # the bits are not consulted for a lone leaf
    assert bitcodec.decode_bytes(bitcodec.PackedBits(b""), root) == b"A" * 1000
    assert bitcodec.decode_bytes(bitcodec.PackedBits(b"\xff"), root) == b"A" * 1000


def test_decode_truncated_stream():
    root, _, packed = _pipeline("AAAABBBCCD")
    # drop the last bit of the final code (C = 111)
    bits = packed.to_bitstring()[:-1]
    writer_sink = BytesIO()
    writer = bitcodec.BitWriter(writer_sink)
    writer.write_code(bits)
    pad = writer.close()
    truncated = bitcodec.PackedBits(writer_sink.getvalue(), pad)
    with pytest.raises(huff.TruncatedStreamError) as info:
        bitcodec.huffman_decode(truncated, root)
    assert info.value.bits_consumed == 18


def test_decode_tree_mismatch_reports_malformed_tree():
    bad = huff.HuffmanNode(None, 2, huff.HuffmanNode('a', 1), huff.HuffmanNode(None, 1))
    with pytest.raises(huff.MalformedTreeError):
        bitcodec.huffman_decode(bitcodec.PackedBits(b"\x40", pad_bits=6), bad)


def test_decode_iterating_packed_bits():
    root, codes, packed = _pipeline("abracadabra")
    assert "".join(str(b) for b in packed) == "".join(codes[ch] for ch in "abracadabra")
