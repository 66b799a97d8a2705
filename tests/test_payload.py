import io

import pytest
from bitarray import bitarray

from huffman_archive.bitchannel import BitChannel, Mode
from huffman_archive.errors import ArchiveIOError, CorruptArchive, TruncatedStream
from huffman_archive.frequency import FrequencyTable
from huffman_archive.payload import read_payload, write_payload
from huffman_archive.tree import HuffmanTree


def encode_payload(data: bytes, tree: HuffmanTree, chunk_size=4) -> bytes:
    stream = io.BytesIO()
    with BitChannel.open(stream, Mode.WRITE) as channel:
        write_payload(io.BytesIO(data), channel, tree.codes(), len(data), chunk_size)
    return stream.getvalue()


def decode_payload(payload: bytes, tree: HuffmanTree, length: int, chunk_size=4) -> bytes:
    sink = io.BytesIO()
    read_payload(BitChannel.open(io.BytesIO(payload), Mode.READ), tree, length, sink, chunk_size)
    return sink.getvalue()


def test_codes_are_concatenated_in_input_order():
    data = b'AABBBCCCC'
    tree = HuffmanTree.build(FrequencyTable.from_bytes(data))
    expected = bitarray('10' '10' '11' '11' '11' '0' '0' '0' '0')
    expected.fill()
    assert encode_payload(data, tree) == expected.tobytes()


@pytest.mark.parametrize('data', [b'ab', b'AABBBCCCC', b'abracadabra' * 20, bytes(range(256))])
def test_payload_round_trip(data):
    tree = HuffmanTree.build(FrequencyTable.from_bytes(data))
    assert decode_payload(encode_payload(data, tree), tree, len(data)) == data


def test_single_leaf_reads_no_bits():
    tree = HuffmanTree.build(FrequencyTable.from_bytes(b'q' * 10))
    assert encode_payload(b'q' * 10, tree) == b''
    channel = BitChannel.open(io.BytesIO(), Mode.READ)
    sink = io.BytesIO()
    assert read_payload(channel, tree, 10, sink, chunk_size=3) == 0
    assert sink.getvalue() == b'q' * 10
    assert channel.bits_read == 0


def test_decoding_stops_after_declared_length():
    data = b'abcabc'
    tree = HuffmanTree.build(FrequencyTable.from_bytes(data))
    assert decode_payload(encode_payload(data, tree), tree, 3) == b'abc'


def test_missing_bits_are_truncation():
    data = b'abcdefgh' * 4
    tree = HuffmanTree.build(FrequencyTable.from_bytes(data))
    payload = encode_payload(data, tree)
    with pytest.raises(TruncatedStream):
        decode_payload(payload[:-1], tree, len(data))


def test_missing_child_is_corruption():
    tree = HuffmanTree()
    tree.root = tree.add_branch(tree.add_leaf(ord('a')))
    with pytest.raises(CorruptArchive):
        decode_payload(b'\xff', tree, 1)


def test_source_that_shrinks_between_passes():
    tree = HuffmanTree.build(FrequencyTable.from_bytes(b'abc'))
    channel = BitChannel.open(io.BytesIO(), Mode.WRITE)
    with pytest.raises(ArchiveIOError):
        write_payload(io.BytesIO(b'ab'), channel, tree.codes(), 3)


def test_source_with_unseen_symbol():
    tree = HuffmanTree.build(FrequencyTable.from_bytes(b'abc'))
    channel = BitChannel.open(io.BytesIO(), Mode.WRITE)
    with pytest.raises(ArchiveIOError):
        write_payload(io.BytesIO(b'abz'), channel, tree.codes(), 3)


def test_empty_tree_decodes_nothing():
    sink = io.BytesIO()
    channel = BitChannel.open(io.BytesIO(b'\xff'), Mode.READ)
    assert read_payload(channel, HuffmanTree(), 0, sink) == 0
    assert read_payload(channel, HuffmanTree(), 5, sink) == 0
    assert sink.getvalue() == b''
    assert channel.bits_read == 0
