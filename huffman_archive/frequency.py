from collections import Counter
from typing import BinaryIO, Iterator

ALPHABET_SIZE = 256
CHUNK_SIZE = 64 * 1024


class FrequencyTable:
    """Occurrence count of every byte value, gathered in one pass."""

    def __init__(self):
        self.counts = [0] * ALPHABET_SIZE
        self.total = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> 'FrequencyTable':
        table = cls()
        table.update(data)
        return table

    @classmethod
    def from_stream(cls, stream: BinaryIO, chunk_size: int = CHUNK_SIZE) -> 'FrequencyTable':
        table = cls()
        while chunk := stream.read(chunk_size):
            table.update(chunk)
        return table

    def update(self, chunk: bytes):
        for symbol, count in Counter(chunk).items():
            self.counts[symbol] += count
        self.total += len(chunk)

    @property
    def distinct(self) -> int:
        return sum(1 for count in self.counts if count)

    def items(self) -> Iterator[tuple[int, int]]:
        return ((symbol, count) for symbol, count in enumerate(self.counts) if count)

    def __getitem__(self, symbol: int) -> int:
        return self.counts[symbol]

    def __len__(self) -> int:
        return self.distinct
