#!/usr/bin/env python3

"""
Name: tail
Description: display the last (or first) lines of one or more files
License: perl
"""

import sys
import argparse
from collections import deque, namedtuple
from enum import Enum

# Constants
EX_SUCCESS = 0
EX_FAILURE = 1
DEFAULT_COUNT = 10
SEPARATOR = '-' * 50
# Longest line accepted, in bytes
MAX_LINE_LENGTH = 64 * 1024

Selection = namedtuple('Selection', ['lines', 'total'])


class Direction(Enum):
    HEAD = 'first'
    TAIL = 'last'

    @property
    def label(self):
        return self.value


class TailError(Exception):
    """Base class for failures while extracting lines from a file."""
    def __init__(self, path, cause):
        super().__init__(path, cause)
        self.path = path
        self.cause = cause


class ReadError(TailError):
    """The file could not be opened or read."""
    def __str__(self):
        reason = getattr(self.cause, 'strerror', None) or self.cause
        return f"Couldn't open '{self.path}': {reason}"


class ScanError(TailError):
    """The file was read but could not be split into lines."""
    def __str__(self):
        return f"Couldn't split '{self.path}' into lines: {self.cause}"


# Settings for one run, passed to the extractor and the presenter.
Options = namedtuple(
    'Options',
    ['count', 'direction', 'number_lines', 'pretty'],
    defaults=[DEFAULT_COUNT, Direction.TAIL, False, False],
)


def chomp(line):
    """Strips the line terminator, including a carriage return before it."""
    if line.endswith('\n'):
        line = line[:-1]
    if line.endswith('\r'):
        line = line[:-1]
    return line


def read_lines(fh, path, encoding='utf-8'):
    """
    Yields the lines of a binary file handle as text, without terminators.

    Bytes that are not valid in `encoding` are replaced rather than
    rejected. A line longer than MAX_LINE_LENGTH bytes, not counting its
    newline, raises ScanError.
    """
    lineno = 0
    for raw in iter(lambda: fh.readline(MAX_LINE_LENGTH + 1), b''):
        lineno += 1
        if len(raw) > MAX_LINE_LENGTH and not raw.endswith(b'\n'):
            raise ScanError(path, f"line {lineno} is longer than {MAX_LINE_LENGTH} bytes")
        yield chomp(raw.decode(encoding, errors='replace'))


def select_lines(lines, count, direction=Direction.TAIL):
    """
    Picks the first or last `count` entries of an iterable of lines.

    Every line is counted, but at most `count` of them are held at once:
    head stops collecting once it has enough, and tail keeps a sliding
    window. Either way the result is in the original order.
    """
    if count < 0:
        raise ValueError(f"line count must not be negative: {count}")

    total = 0
    if direction is Direction.HEAD:
        selected = []
        for line in lines:
            if total < count:
                selected.append(line)
            total += 1
    else:
        window = deque(maxlen=count)
        for line in lines:
            window.append(line)
            total += 1
        selected = list(window)

    return Selection(selected, total)


def extract_lines(path, count, direction=Direction.TAIL, encoding='utf-8'):
    """
    Reads `path` and returns a Selection of its first or last `count` lines.

    Raises ReadError if the file cannot be opened or read, and ScanError if
    a line is too long to be split off.
    """
    try:
        fh = open(path, 'rb')
    except OSError as e:
        raise ReadError(path, e) from e

    with fh:
        try:
            return select_lines(read_lines(fh, path, encoding), count, direction)
        except OSError as e:
            raise ReadError(path, e) from e


def format_selection(name, selection, options):
    """Renders a Selection as the text block printed for one file."""
    out = []
    if options.pretty:
        out.append(SEPARATOR)
    out.append(f"File {name} showing {options.direction.label} "
               f"{len(selection.lines)} of {selection.total} lines")
    if options.pretty:
        out.append(SEPARATOR)

    for i, line in enumerate(selection.lines, 1):
        if options.number_lines:
            out.append(f"{i:<3d} {line}")
        else:
            out.append(line)

    return '\n'.join(out).strip()


def build_parser():
    parser = argparse.ArgumentParser(
        prog='tail',
        description="Print tail (or head) n lines of one or more files",
        epilog="Example: tail -n 10 file1.txt file2.txt",
        add_help=False,
    )
    # help is printed by main, not by argparse
    parser.add_argument('-h', '--help', action='store_true', help='print usage')
    parser.add_argument('-n', '--lines', dest='count', type=int, default=DEFAULT_COUNT,
                        help=f'number of lines (default: {DEFAULT_COUNT})')
    parser.add_argument('-H', '--head', action='store_true',
                        help='print head of file rather than tail')
    parser.add_argument('-N', '--number', dest='number_lines', action='store_true',
                        help='show line numbers')
    parser.add_argument('-p', '-pretty', '--pretty', dest='pretty', action='store_true',
                        help='add formatting to output')
    parser.add_argument('files', nargs='*', help='files to read')
    return parser


def usage(parser, message=None):
    """Prints a usage message to stderr and exits."""
    if message:
        sys.stderr.write(f"{parser.prog}: {message}\n")
    parser.print_usage(sys.stderr)
    sys.exit(EX_FAILURE)


def parse_args(argv=None):
    """Returns (options, files, show_help) for the given command line."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.help:
        return Options(), args.files, True

    if args.count < 0:
        usage(parser, f"invalid line count '{args.count}'")

    options = Options(
        count=args.count,
        direction=Direction.HEAD if args.head else Direction.TAIL,
        number_lines=args.number_lines,
        pretty=args.pretty,
    )
    return options, args.files, False


def main(argv=None):
    """Prints the selected lines of each file, stopping at the first failure."""
    options, files, show_help = parse_args(argv)

    if show_help:
        build_parser().print_help()
        return EX_SUCCESS

    if not files:
        print("No files specified. Exiting with usage information")
        print()
        build_parser().print_help()
        return EX_SUCCESS

    for path in files:
        try:
            selection = extract_lines(path, options.count, options.direction)
        except TailError as e:
            sys.stderr.write(f"tail: {e}\n")
            return EX_FAILURE
        print(format_selection(path, selection, options))

    return EX_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
