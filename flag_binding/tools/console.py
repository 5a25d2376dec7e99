'''
Shared plumbing of the command-line tools: the stderr console, the logging setup and the usage check.
'''
import logging
from typing import Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

console = Console(stderr=True)


def wants_usage(argv: Sequence[str]) -> bool:
    '''
        Whether the usage should be printed instead of running: no arguments, or `--help` first.
    '''
    return len(argv) == 0 or argv[0].strip().lower() == '--help'


def fail(message: str) -> int:
    console.print(Text(message, style='bold red'))
    return EXIT_FAILURE


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(message)s',
        handlers=[RichHandler(console=console, show_path=False)],
        force=True
    )
