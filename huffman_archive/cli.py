import argparse
import logging
import os
import sys
import tempfile
from typing import BinaryIO

from .archive import decode, encode
from .errors import HuffmanError

ARCHIVE_SUFFIX = '.zmh'
STDIO = '-'

logger = logging.getLogger(__name__)


def process_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog='huffman-archive',
                                     description='Huffman coding based compressor')
    parser.add_argument('filename', nargs='?', default=STDIO,
                        help='file to process; standard input when omitted or "-"')
    parser.add_argument('-d', '--decompress', action='store_true')
    parser.add_argument('-o', '--output', help='output file; "-" for standard output')
    parser.add_argument('-v', '--verbose', action='store_true', help='log diagnostics to stderr')
    return parser.parse_args(argv)


def output_name(filename: str, decompress_mode: bool) -> str:
    if filename == STDIO:
        return STDIO
    if not decompress_mode:
        return f'{filename}{ARCHIVE_SUFFIX}'
    if filename.endswith(ARCHIVE_SUFFIX) and len(os.path.basename(filename)) > len(ARCHIVE_SUFFIX):
        return filename[:-len(ARCHIVE_SUFFIX)]
    raise ValueError(f'Wrong file extension, only {ARCHIVE_SUFFIX} files allowed')


def open_input(filename: str) -> BinaryIO:
    return sys.stdin.buffer if filename == STDIO else open(filename, 'rb')


def same_file(filename: str, output: str) -> bool:
    if STDIO in (filename, output):
        return False
    if os.path.exists(output):
        return os.path.samefile(filename, output)
    return os.path.realpath(filename) == os.path.realpath(output)


def convert(source: BinaryIO, sink: BinaryIO, decompress_mode: bool) -> int:
    length = decode(source, sink) if decompress_mode else encode(source, sink)
    sink.flush()
    return length


def write_output(source: BinaryIO, output: str, decompress_mode: bool) -> int:
    if output == STDIO:
        return convert(source, sys.stdout.buffer, decompress_mode)
    # existing output is replaced only once the whole conversion succeeded
    directory = os.path.dirname(os.path.abspath(output))
    with tempfile.NamedTemporaryFile(dir=directory, prefix='.huffman-', delete=False) as sink:
        try:
            length = convert(source, sink, decompress_mode)
        except BaseException:
            sink.close()
            os.unlink(sink.name)
            raise
    umask = os.umask(0)
    os.umask(umask)
    os.chmod(sink.name, 0o666 & ~umask)
    os.replace(sink.name, output)
    return length


def run(filename: str, output: str, decompress_mode: bool) -> int:
    if same_file(filename, output):
        raise ValueError(f'Output {output} would overwrite the input file')
    source = open_input(filename)
    try:
        length = write_output(source, output, decompress_mode)
    finally:
        if source is not sys.stdin.buffer:
            source.close()
    logger.info('%s %s -> %s (%d bytes)', 'decoded' if decompress_mode else 'encoded',
                filename, output, length)
    return length


def main(argv: list[str] | None = None):
    args = process_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    try:
        output = args.output or output_name(args.filename, args.decompress)
        run(args.filename, output, args.decompress)
    except (HuffmanError, OSError, ValueError) as e:
        logger.debug('aborted', exc_info=True)
        print(str(e), file=sys.stderr)
        sys.exit(-1)
