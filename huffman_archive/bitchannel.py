"""
Bit-granular reader/writer over a binary stream.

Bits are packed most significant first. A writer keeps fewer than eight bits
pending between calls and pads the last partial byte with zero bits when
closed, so every closed write session is byte aligned.
"""
from enum import Enum
from typing import BinaryIO

from bitarray import bitarray
from bitarray.util import ba2int, int2ba

from .errors import ArchiveIOError, UnexpectedEnd

BYTE_BITS = 8


class Mode(Enum):
    READ = 'r'
    WRITE = 'w'


class BitChannel:
    def __init__(self, stream: BinaryIO, mode: Mode):
        self.stream = stream
        self.mode = mode
        self.bits_read = 0
        self.bits_written = 0
        self.padding = 0
        self.closed = False
        self._pending = bitarray(endian='big')
        self._cursor = 0

    @classmethod
    def open(cls, stream: BinaryIO, mode: Mode) -> 'BitChannel':
        return cls(stream, mode)

    def __enter__(self) -> 'BitChannel':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        else:
            # aborted session: pending bits are dropped, not padded
            self.closed = True

    def _check(self, mode: Mode):
        if self.closed:
            raise ValueError('bit channel is closed')
        if self.mode is not mode:
            raise ValueError(f'bit channel is open for {self.mode.name.lower()}')

    def read_bit(self) -> int:
        self._check(Mode.READ)
        if self._cursor == len(self._pending):
            try:
                chunk = self.stream.read(1)
            except OSError as e:
                raise ArchiveIOError(f'read failed: {e}') from e
            if not chunk:
                raise UnexpectedEnd(f'stream exhausted after {self.bits_read} bits')
            self._pending = bitarray(endian='big')
            self._pending.frombytes(chunk)
            self._cursor = 0
        bit = self._pending[self._cursor]
        self._cursor += 1
        self.bits_read += 1
        return bit

    def read_bits(self, width: int) -> int:
        bits = bitarray((self.read_bit() for _ in range(width)), endian='big')
        return ba2int(bits)

    def write(self, bits: bitarray):
        self._check(Mode.WRITE)
        self._pending += bits
        self.bits_written += len(bits)
        whole = len(self._pending) - len(self._pending) % BYTE_BITS
        if whole:
            self._flush(self._pending[:whole].tobytes())
            del self._pending[:whole]

    def write_bit(self, bit: int):
        self.write(bitarray([bool(bit)], endian='big'))

    def write_bits(self, value: int, width: int):
        if value < 0 or value >> width:
            raise ValueError(f'{value} does not fit in {width} bits')
        self.write(int2ba(value, length=width, endian='big'))

    def _flush(self, data: bytes):
        try:
            self.stream.write(data)
        except OSError as e:
            raise ArchiveIOError(f'write failed: {e}') from e

    def close(self):
        if self.closed:
            return
        if self.mode is Mode.WRITE and self._pending:
            self.padding = self._pending.fill()
            self._flush(self._pending.tobytes())
            self._pending.clear()
        self.closed = True
