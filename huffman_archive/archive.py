"""
Archive encoder and decoder.

Layout, most significant bit first throughout::

    length   32 bits, number of original bytes
    tree     preorder code tree (absent when length is 0)
    payload  code of every original byte, in order
    padding  zero bits up to the next byte boundary
"""
import io
import logging
from typing import BinaryIO

from .bitchannel import BitChannel, Mode
from .errors import ArchiveTooLarge, translated, truncation
from .frequency import CHUNK_SIZE, FrequencyTable
from .payload import read_payload, write_payload
from .tree import HuffmanTree
from .treecodec import read_tree, write_tree

logger = logging.getLogger(__name__)

HEADER_BITS = 32
MAX_LENGTH = (1 << HEADER_BITS) - 1


def _rewindable(source: BinaryIO) -> BinaryIO:
    # encoding reads the input twice
    if source.seekable():
        return source
    logger.debug('source is not seekable, buffering it in memory')
    return io.BytesIO(source.read())


def encode(source: BinaryIO, sink: BinaryIO, chunk_size: int = CHUNK_SIZE) -> int:
    """Compress everything left in ``source`` into ``sink``; return the input length."""
    with translated('encoding'):
        source = _rewindable(source)
        start = source.tell()
        table = FrequencyTable.from_stream(source, chunk_size)
        if table.total > MAX_LENGTH:
            raise ArchiveTooLarge(table.total, MAX_LENGTH)
        logger.debug('input: %d bytes, %d distinct', table.total, table.distinct)

        tree = HuffmanTree.build(table)
        if logger.isEnabledFor(logging.DEBUG):
            for line in tree.describe():
                logger.debug('tree: %s', line)
        codes = tree.codes()

        with BitChannel.open(sink, Mode.WRITE) as channel:
            channel.write_bits(table.total, HEADER_BITS)
            if tree.root is not None:
                tree_size = write_tree(channel, tree)
                source.seek(start)
                payload_size = write_payload(source, channel, codes, table.total, chunk_size)
                logger.debug('wrote %d tree bits, %d payload bits', tree_size, payload_size)
        logger.debug('archive: %d bits + %d padding', channel.bits_written, channel.padding)
        return table.total


def decode(source: BinaryIO, sink: BinaryIO, chunk_size: int = CHUNK_SIZE) -> int:
    """Expand one archive from ``source`` into ``sink``; return the output length."""
    with translated('decoding'):
        channel = BitChannel.open(source, Mode.READ)
        with truncation('length header'):
            length = channel.read_bits(HEADER_BITS)
        logger.debug('header: %d bytes', length)
        if length == 0:
            return 0

        tree = read_tree(channel)
        logger.debug('read tree: %d nodes, %d bits', len(tree), channel.bits_read - HEADER_BITS)
        payload_size = read_payload(channel, tree, length, sink, chunk_size)
        logger.debug('read %d payload bits', payload_size)
        channel.close()
        return length


def compress(data: bytes) -> bytes:
    result = io.BytesIO()
    encode(io.BytesIO(data), result)
    return result.getvalue()


def decompress(data: bytes) -> bytes:
    result = io.BytesIO()
    decode(io.BytesIO(data), result)
    return result.getvalue()
