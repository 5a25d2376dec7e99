'''
Simple parser to bind the command-line flags to the fields of a dataclass.
'''
from .parser import BindingParser, parse_args, parse_into
from .types import Argument, ErrorKind, FieldSpec, ParserError, SchemaError, ValueKind
