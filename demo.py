import sys
from dataclasses import dataclass
from typing import Optional

from flag_binding import Argument, BindingParser, ParserError, ValueKind


@dataclass
class TestOptions:

    input_file: str = Argument('--file')
    workers: int = Argument(optional=True, default=1, kind=ValueKind.UInt16)
    separator: str = Argument(optional=True, default=',', kind=ValueKind.Char)
    limit: Optional[int] = None

    verbose: bool = False


if __name__ == '__main__':
    parser = BindingParser(TestOptions)

    try:
        options = parser.parse(sys.argv[1:])
    except ParserError as e:
        print(e.message, file=sys.stderr)
        sys.exit(1)

    print(options)
