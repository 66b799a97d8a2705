from typing import BinaryIO, Sequence

from bitarray import bitarray, frozenbitarray

from .bitchannel import BitChannel
from .errors import ArchiveIOError, CorruptArchive, translated, truncation
from .frequency import CHUNK_SIZE
from .tree import Branch, HuffmanTree, Leaf


def write_payload(source: BinaryIO, channel: BitChannel, codes: Sequence[frozenbitarray | None],
                  length: int, chunk_size: int = CHUNK_SIZE) -> int:
    """Emit the code of each of the next ``length`` source bytes; return the bit count."""
    written = 0
    remaining = length
    while remaining:
        with translated('reading the input'):
            chunk = source.read(min(chunk_size, remaining))
        if not chunk:
            raise ArchiveIOError(f'input ended {remaining} bytes earlier than on the counting pass')
        bits = bitarray(endian='big')
        for symbol in chunk:
            code = codes[symbol]
            if code is None:
                raise ArchiveIOError(f'byte {symbol:#04x} was not present on the counting pass')
            bits += code
        channel.write(bits)
        written += len(bits)
        remaining -= len(chunk)
    return written


def read_payload(channel: BitChannel, tree: HuffmanTree, length: int, sink: BinaryIO,
                 chunk_size: int = CHUNK_SIZE) -> int:
    """Decode ``length`` symbols into ``sink``; return the number of payload bits read."""
    if length == 0 or tree.root is None:
        return 0
    start = channel.bits_read
    match tree.nodes[tree.root]:
        case Leaf(symbol, _):
            # zero-length code: every symbol is the root itself
            for offset in range(0, length, chunk_size):
                _emit(sink, bytes([symbol]) * min(chunk_size, length - offset))
            return 0

    nodes = tree.nodes
    root = nodes[tree.root]
    out = bytearray()
    with truncation('payload'):
        for _ in range(length):
            node = root
            while isinstance(node, Branch):
                handle = node.right if channel.read_bit() else node.left
                if handle is None:
                    raise CorruptArchive('code path leads to a missing child')
                node = nodes[handle]
            out.append(node.symbol)
            if len(out) >= chunk_size:
                _emit(sink, out)
                out = bytearray()
    if out:
        _emit(sink, out)
    return channel.bits_read - start


def _emit(sink: BinaryIO, data: bytes):
    with translated('writing the output'):
        sink.write(data)
