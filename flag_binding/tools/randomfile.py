'''
Write a file filled with pseudo-random bytes.
'''
import logging
import random
import sys
from dataclasses import dataclass
from typing import Optional, Sequence

from ..parser import parse_args
from ..types import Argument, ParserError, ValueKind
from ..utils import integer_type_fn
from .console import EXIT_SUCCESS, fail, setup_logging, wants_usage

logger = logging.getLogger(__name__)

USAGE = '''Usage:
    randomfile --size <file_size> [--filename <file_name>]

Arguments:
    --size\t file size to generate, default unit is B(yte), i.e. 512, 1000B, 200MB
    --filename\t optional, output filename, default is randomfile.tmp
    --verbose\t optional, print debug logs
'''

BUFFER_SIZE = 4096

ONE_KB = 1024
ONE_MB = 1024 * ONE_KB
ONE_GB = 1024 * ONE_MB
ONE_TB = 1024 * ONE_GB

# longest suffix first, "B" is a suffix of the others
SIZE_UNITS = (
    ('TB', ONE_TB), ('GB', ONE_GB), ('MB', ONE_MB), ('KB', ONE_KB), ('B', 1)
)


@dataclass
class CmdArgs:
    size: str = Argument('--size')
    filename: str = Argument(
        '--filename', optional=True, default='randomfile.tmp'
    )
    verbose: bool = Argument('--verbose', optional=True, default=False)


def parse_size(size: str) -> int:
    '''
        Convert a size string to a number of bytes.

        The grammar is `<integer><unit>`, the unit is one of B, KB, MB, GB, TB, case-insensitive.
        Without a unit the size is in bytes. Units are multiples of 1024.

        Parameters:
        - size (`str`): the size string, e.g. `512`, `1000B`, `200MB`.

        Returns:
        - `int`: the number of bytes.

        Raises:
        - `ValueError`: if the string does not follow the grammar or the size is negative.
    '''
    text = size.strip().upper()
    unit_size = 1
    for unit, multiple in SIZE_UNITS:
        if text.endswith(unit):
            text = text[:-len(unit)]
            unit_size = multiple
            break

    num = integer_type_fn(text, ValueKind.Int64)
    if num < 0:
        raise ValueError(f'Negative size: {size!r}')

    return num * unit_size


def write_random_file(
    filename: str, size: int, rand: Optional[random.Random] = None
) -> None:
    '''
        Create or truncate `filename` and fill it with exactly `size` pseudo-random bytes.
    '''
    rand = rand or random.Random()
    with open(filename, 'wb') as f:
        remaining = size
        while remaining > 0:
            block = min(BUFFER_SIZE, remaining)
            f.write(rand.randbytes(block))
            remaining -= block


def main(argv: Optional[Sequence[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    if wants_usage(argv):
        print(USAGE)
        return EXIT_SUCCESS

    try:
        cmd_args = parse_args(CmdArgs, argv)
    except ParserError as e:
        return fail(e.message)
    setup_logging(cmd_args.verbose)

    if not cmd_args.size.strip():
        return fail('no file size')
    try:
        size = parse_size(cmd_args.size)
    except ValueError:
        return fail('invalid file size: ' + cmd_args.size)

    logger.debug('writing %d bytes to %s', size, cmd_args.filename)
    try:
        write_random_file(cmd_args.filename, size)
    except OSError as e:
        return fail(f'cannot write file: {e}')

    return EXIT_SUCCESS


def run() -> None:
    sys.exit(main())


if __name__ == '__main__':
    run()
