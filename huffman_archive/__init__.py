from .archive import compress, decode, decompress, encode
from .errors import (AllocationFailure, ArchiveIOError, ArchiveTooLarge, CorruptArchive,
                     DuplicateSymbol, HuffmanError, TruncatedStream, UnexpectedEnd)

__version__ = '1.0.0'
