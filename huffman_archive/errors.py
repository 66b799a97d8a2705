from contextlib import contextmanager
from typing import Iterator


class HuffmanError(Exception):
    """Base class for every failure raised by the archive codec."""


class AllocationFailure(HuffmanError, MemoryError):
    pass


class ArchiveIOError(HuffmanError, OSError):
    """The underlying byte stream failed to read or write."""


class UnexpectedEnd(HuffmanError, EOFError):
    """A bit was requested after the underlying stream was exhausted."""


class TruncatedStream(UnexpectedEnd):
    """The archive ended before a header, tree or payload read completed."""


class CorruptArchive(HuffmanError, ValueError):
    pass


class DuplicateSymbol(CorruptArchive):
    def __init__(self, symbol: int):
        super().__init__(f'symbol {symbol:#04x} appears in more than one leaf')
        self.symbol = symbol


class ArchiveTooLarge(HuffmanError, ValueError):
    def __init__(self, length: int, limit: int):
        super().__init__(f'input of {length} bytes exceeds the {limit} byte archive limit')
        self.length = length
        self.limit = limit


@contextmanager
def translated(action: str) -> Iterator[None]:
    # HuffmanError subclasses OSError/MemoryError, so let ours through untouched
    try:
        yield
    except HuffmanError:
        raise
    except MemoryError as e:
        raise AllocationFailure(f'out of memory while {action}') from e
    except OSError as e:
        raise ArchiveIOError(f'I/O error while {action}: {e}') from e


@contextmanager
def truncation(part: str) -> Iterator[None]:
    try:
        yield
    except TruncatedStream:
        raise
    except UnexpectedEnd as e:
        raise TruncatedStream(f'archive ended while reading the {part}') from e
