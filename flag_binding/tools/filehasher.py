'''
Compute the hash of a file and print it as a hex string.
'''
import hashlib
import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional, Sequence

from ..parser import parse_args
from ..types import Argument, ParserError
from .console import EXIT_SUCCESS, fail, setup_logging, wants_usage

logger = logging.getLogger(__name__)

USAGE = '''Usage:
    filehasher --file <file_path> [--alg <alg_name>]

Arguments:
    --file\t file path to compute hash
    --alg\t optional, name of hash algorithm, i.e. md5(default), sha1, sha256...
    --verbose\t optional, print debug logs
'''

CHUNK_SIZE = 64 * 1024


@dataclass
class CmdArgs:
    input_file: str = Argument('--file')
    alg: str = Argument('--alg', optional=True, default='MD5')
    verbose: bool = Argument('--verbose', optional=True, default=False)


def file_digest(path: str, alg: str) -> str:
    '''
        Compute the hex digest of a file.

        Parameters:
        - path (`str`): the file to read.
        - alg (`str`): a `hashlib` algorithm name, case-insensitive.

        Raises:
        - `ValueError`: if the algorithm is not supported.
    '''
    hasher = hashlib.new(alg.strip().lower())
    if hasher.digest_size == 0:
        raise ValueError(f'Variable length digest is not supported: {alg}')
    with open(path, 'rb') as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b''):
            hasher.update(chunk)

    return hasher.hexdigest()


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

    if not os.path.isfile(cmd_args.input_file):
        return fail('file not found')
    try:
        digest = file_digest(cmd_args.input_file, cmd_args.alg)
    except ValueError:
        logger.debug('unsupported hash algorithm %r', cmd_args.alg)
        return fail('invalid hash alg')
    except OSError as e:
        return fail(f'cannot read file: {e}')

    logger.debug('%s of %s', cmd_args.alg, cmd_args.input_file)
    print(digest)
    return EXIT_SUCCESS


def run() -> None:
    sys.exit(main())


if __name__ == '__main__':
    run()
