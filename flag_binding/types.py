'''
defined the data classes to describe the arguments bound from the command-line.
'''
from dataclasses import MISSING, dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

DataclassType = TypeVar('DataclassType')

META_TAG = 'tag'
META_OPTIONAL = 'optional'
META_KIND = 'kind'


def normalize_tag(name: str) -> str:
    '''
        Normalize a flag name for the case-insensitive lookup.

        Args:
            - name: `str`, the flag name, or a token from the command-line.

        Returns:
            The stripped and lower-cased flag name.
    '''
    return name.strip().lower()


def default_tag(name: str) -> str:
    '''
        Derive the flag name of a field that declares no tag, e.g. `input_file` -> `--input_file`.
    '''
    return normalize_tag('--' + name)


class ValueKind(Enum):
    '''
        Enum representing the declared semantic type of a bound field.

        The kind selects the coercion applied to the textual value that follows the flag.

        Value Kinds:
        - SByte, Int16, Int32, Int64: signed integers of 8, 16, 32 and 64 bits.
        - Byte, UInt16, UInt32, UInt64: unsigned integers of 8, 16, 32 and 64 bits.
        - Int: an integer without bounds.
        - Single, Double: single and double precision floating point.
        - Decimal: `decimal.Decimal`.
        - Bool: a switch, set by the bare flag.
        - String: the token as it is.
        - Char: a string of exactly one character.
        - DateTime: an ISO-8601 date or date-time.
    '''
    SByte = 'sbyte'
    Int16 = 'int16'
    Int32 = 'int32'
    Int64 = 'int64'
    Byte = 'byte'
    UInt16 = 'uint16'
    UInt32 = 'uint32'
    UInt64 = 'uint64'
    Int = 'int'
    Single = 'single'
    Double = 'double'
    Decimal = 'decimal'
    Bool = 'bool'
    String = 'string'
    Char = 'char'
    DateTime = 'datetime'

    @staticmethod
    def is_integer(kind: 'ValueKind') -> bool:
        if kind is ValueKind.SByte or \
            kind is ValueKind.Int16 or \
            kind is ValueKind.Int32 or \
            kind is ValueKind.Int64 or \
            kind is ValueKind.Byte or \
            kind is ValueKind.UInt16 or \
            kind is ValueKind.UInt32 or \
            kind is ValueKind.UInt64 or \
            kind is ValueKind.Int:
            return True
        return False


class ErrorKind(Enum):
    '''
        The reasons a parse could fail.

        - NullArguments: the argument vector or the target instance is missing, a mistake of the caller.
        - DuplicateArgument: a flag was given twice.
        - MissingValue: a flag expecting a value was the last token.
        - ValueConversionError: the value could not be converted to the declared type.
        - MissingRequiredArgument: a required flag was never given.
    '''
    NullArguments = 'null-arguments'
    DuplicateArgument = 'duplicate-argument'
    MissingValue = 'missing-value'
    ValueConversionError = 'value-conversion-error'
    MissingRequiredArgument = 'missing-required-argument'


_MESSAGES = {
    ErrorKind.DuplicateArgument: 'duplicate argument: {flag}',
    ErrorKind.MissingValue: 'missing value for argument: {flag}',
    ErrorKind.ValueConversionError: 'invalid value for argument: {flag}',
    ErrorKind.MissingRequiredArgument: 'missing required argument: {flag}',
}


class ParserError(Exception):
    '''
        Raised when the command-line could not be bound, the message is ready to show to the user.

        Attributes:
        - kind (`ErrorKind`): the reason of the failure.
        - flag (`Optional[str]`): the offending flag, None for `ErrorKind.NullArguments`.
        - message (`str`): the human-readable description.
    '''

    def __init__(
        self,
        kind: ErrorKind,
        flag: Optional[str] = None,
        message: Optional[str] = None
    ) -> None:
        if message is None:
            message = _MESSAGES.get(kind, kind.value).format(flag=flag)
        super(ParserError, self).__init__(message)
        self.kind = kind
        self.flag = flag
        self.message = message


class SchemaError(Exception):
    '''
        Raised when a dataclass cannot be used as an argument schema.
    '''


@dataclass(frozen=True)
class FieldSpec:
    '''
        The description of one bindable field of a dataclass.

        Attributes:
        - name (str):
            The attribute name of the field.
        - tag (str):
            The normalized flag name, e.g. `--file`.
        - kind (ValueKind):
            The declared value type.
        - convert (Callable[[str], Any]):
            The coercion from the textual value, resolved when the schema is built.
        - optional (bool, optional):
            Whether the flag can be left out.
        - nullable (bool, optional):
            Whether the field accepts None, i.e. annotated as `Optional[X]`.
        - default (Any, optional):
            The default value declared on the field.
        - default_factory (Callable, optional):
            The default factory declared on the field.
    '''
    name: str
    tag: str
    kind: ValueKind
    convert: Callable[[str], Any]
    optional: bool = False
    nullable: bool = False
    default: Any = field(default_factory=lambda: MISSING)
    default_factory: Any = field(default_factory=lambda: MISSING)

    @property
    def is_switch(self) -> bool:
        return self.kind is ValueKind.Bool

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING or self.default_factory is not MISSING


def Argument(
    tag: Optional[str] = None,
    optional: bool = False,
    default: Optional[Any] = MISSING,
    default_factory: Optional[Callable] = MISSING,
    kind: Optional[ValueKind] = None
):
    '''
        Create a dataclass field with the argument information.

        Parameters:
        - tag (`Optional[str]`, optional):
            The flag name, e.g. `--file`. Defaults to `--<field-name>` with underscores replaced by dashes.
            Matched case-insensitively.
        - optional (`bool`, optional):
            Whether the flag can be left out. Defaults to False. An optional field without a default is None.
        - default (`Optional[Any]`, optional):
            Default value for the field. Defaults to MISSING.
        - default_factory (`Optional[Callable]`, optional):
            Default factory for the field. Defaults to MISSING.
        - kind (`Optional[ValueKind]`, optional):
            The declared value type, use the type hint if this is not provided.
            Needed for the kinds without a Python type of their own, e.g. `ValueKind.UInt16` or `ValueKind.Char`.

        Returns:
        - `dataclasses.Field`:
            A dataclass field with the specified metadata.

        Example:
        ```python
        @dataclass
        class CmdArgs:
            input_file: str = Argument('--file')
            alg: str = Argument('--alg', optional=True, default='MD5')
        ```
    '''
    meta_info = {META_OPTIONAL: optional}
    if tag is not None:
        meta_info[META_TAG] = tag
    if kind is not None:
        meta_info[META_KIND] = kind

    if default is not MISSING:
        return field(default=default, metadata=meta_info)
    elif default_factory is not MISSING:
        return field(default_factory=default_factory, metadata=meta_info)
    elif optional:
        return field(default=None, metadata=meta_info)
    else:
        return field(metadata=meta_info)
