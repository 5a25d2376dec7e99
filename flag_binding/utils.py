'''
methods to convert the textual values and to analysis the dataclass into an argument schema.
'''
import datetime
import decimal
import logging
import re
import struct
import types
import warnings
from dataclasses import MISSING, Field, fields, is_dataclass
from functools import lru_cache, partial
from inspect import isclass
from typing import (
    Any,
    Callable,
    Dict,
    Mapping,
    Optional,
    Tuple,
    Type,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from .types import (
    META_KIND,
    META_OPTIONAL,
    META_TAG,
    DataclassType,
    FieldSpec,
    SchemaError,
    ValueKind,
    default_tag,
    normalize_tag,
)

logger = logging.getLogger(__name__)

UnionType = getattr(types, 'UnionType', None)

_INTEGER_PATTERN = re.compile(r'[+-]?[0-9]+')

_INTEGER_RANGES: Dict[ValueKind, Tuple[Optional[int], Optional[int]]] = {
    ValueKind.SByte: (-2**7, 2**7 - 1),
    ValueKind.Int16: (-2**15, 2**15 - 1),
    ValueKind.Int32: (-2**31, 2**31 - 1),
    ValueKind.Int64: (-2**63, 2**63 - 1),
    ValueKind.Byte: (0, 2**8 - 1),
    ValueKind.UInt16: (0, 2**16 - 1),
    ValueKind.UInt32: (0, 2**32 - 1),
    ValueKind.UInt64: (0, 2**64 - 1),
    ValueKind.Int: (None, None),
}

_PYTHON_KINDS: Dict[type, ValueKind] = {
    bool: ValueKind.Bool,
    int: ValueKind.Int,
    float: ValueKind.Double,
    decimal.Decimal: ValueKind.Decimal,
    str: ValueKind.String,
    datetime.datetime: ValueKind.DateTime,
}


def integer_type_fn(val: str, kind: ValueKind) -> int:
    '''
        Convert a string to an integer within the range of the kind.

        An optional sign followed by decimal digits is accepted, surrounding whitespace is ignored.

        Parameters:
        - val (`str`):
            The input string.
        - kind (`ValueKind`):
            One of the integer kinds, selects the bounds.

        Returns:
        - `int`

        Raises:
        - `ValueError`:
            If the string is not an integer or the integer is out of range.
    '''
    text = val.strip()
    if not _INTEGER_PATTERN.fullmatch(text):
        raise ValueError(f'Not an integer: {val!r}')
    num = int(text)
    low, high = _INTEGER_RANGES[kind]
    if (low is not None and num < low) or (high is not None and num > high):
        raise ValueError(f'The integer {num} is out of range for {kind.value}')

    return num


def single_type_fn(val: str) -> float:
    '''
        Convert a string to a float rounded to single precision, finite values too large raise `OverflowError`.
    '''
    return struct.unpack('<f', struct.pack('<f', float(val)))[0]


def decimal_type_fn(val: str) -> decimal.Decimal:
    num = decimal.Decimal(val.strip())
    if not num.is_finite():
        raise ValueError(f'Not a finite decimal: {val!r}')

    return num


def bool_type_fn(val: str) -> bool:
    text = val.strip().lower()
    if text == 'true':
        return True
    if text == 'false':
        return False

    raise ValueError(f'Not a boolean: {val!r}')


def char_type_fn(val: str) -> str:
    if len(val) != 1:
        raise ValueError(f'Not a single character: {val!r}')

    return val


def string_type_fn(val: str) -> str:
    return val


def datetime_type_fn(val: str) -> datetime.datetime:
    return datetime.datetime.fromisoformat(val.strip())


COERCIONS: Dict[ValueKind, Callable[[str], Any]] = {
    ValueKind.Single: single_type_fn,
    ValueKind.Double: float,
    ValueKind.Decimal: decimal_type_fn,
    ValueKind.Bool: bool_type_fn,
    ValueKind.String: string_type_fn,
    ValueKind.Char: char_type_fn,
    ValueKind.DateTime: datetime_type_fn,
}
COERCIONS.update(
    {
        kind: partial(integer_type_fn, kind=kind)
        for kind in _INTEGER_RANGES
    }
)


def coerce_value(val: Optional[str], spec: FieldSpec) -> Any:
    '''
        Convert the textual value of a flag to the declared type of the field.

        Parameters:
        - val (`Optional[str]`):
            The token following the flag. None is accepted by nullable fields only.
        - spec (`FieldSpec`):
            The field to convert the value for.

        Returns:
        - `Any`
            The converted value, None if the field is nullable and the value is None.

        Raises:
        - `ValueError`:
            If the value cannot be converted, whatever the reason reported by the underlying parser.
    '''
    if val is None:
        if spec.nullable:
            return None
        raise ValueError(f'The field "{spec.name}" does not accept None')
    if not isinstance(val, str):
        raise ValueError(f'Not a string: {val!r}')
    try:
        return spec.convert(val)
    except (TypeError, ArithmeticError) as e:
        raise ValueError(str(e)) from e


def _python_type(kind: ValueKind) -> type:
    if ValueKind.is_integer(kind):
        return int
    if kind is ValueKind.Single:
        return float
    if kind is ValueKind.Char:
        return str
    for python_type, python_kind in _PYTHON_KINDS.items():
        if python_kind is kind:
            return python_type


def _analysis_type(dtype) -> Tuple[Optional[ValueKind], bool]:
    origin_type = get_origin(dtype)
    if origin_type is Union or (
        UnionType is not None and origin_type is UnionType
    ):
        dtype_generics = [x for x in get_args(dtype) if x is not type(None)]
        if len(dtype_generics) > 1:
            raise SchemaError(
                'Only `Union[X, NoneType]` (i.e., `Optional[X]`) is allowed for `Union` because'
                ' a flag only supports one type.'
            )
        kind, _ = _analysis_type(dtype_generics[0])
        return kind, True
    if isclass(dtype):
        for python_type, kind in _PYTHON_KINDS.items():
            if dtype is python_type:
                return kind, False

    return None, False


def analysis_field(field: Field, dtype: Any) -> Optional[FieldSpec]:
    if not field.init:
        return None

    kind, nullable = _analysis_type(dtype)

    meta_kind = field.metadata.get(META_KIND, None)
    if meta_kind is not None:
        if not isinstance(meta_kind, ValueKind):
            raise SchemaError(
                f'The kind of field "{field.name}" must be a ValueKind, got {meta_kind!r}.'
            )
        if kind is not None and _python_type(kind) is not _python_type(
            meta_kind
        ):
            warnings.warn(
                f'The type for "{field.name}" will be occupied with meta.',
                UserWarning
            )
        kind = meta_kind
    if kind is None:
        raise SchemaError(
            f'The field "{field.name}" is unknown type, you have to specify the kind in the meta.'
        )

    tag = field.metadata.get(META_TAG, None)
    if tag is None:
        tag = default_tag(field.name)
    else:
        tag = normalize_tag(tag)
        if not tag.startswith('-'):
            raise SchemaError(
                f'The flag "{tag}" of field "{field.name}" must start with "-".'
            )

    has_default = field.default is not MISSING or \
        field.default_factory is not MISSING
    optional = field.metadata.get(META_OPTIONAL, None)
    if optional is None:
        optional = has_default

    return FieldSpec(
        name=field.name,
        tag=tag,
        kind=kind,
        convert=COERCIONS[kind],
        optional=optional,
        nullable=nullable,
        default=field.default,
        default_factory=field.default_factory
    )


@lru_cache(maxsize=None)
def analysis_dataclass(clz: Type[DataclassType]) -> Mapping[str, FieldSpec]:
    '''
        Build the argument schema of a dataclass.

        The schema maps each normalized flag name to the field it binds, in the declaration order of the fields.
        It is built once per dataclass and shared by all the following parses, so it is read-only.

        Parameters:
        - clz (`Type[DataclassType]`): the dataclass type.

        Returns:
        - `Mapping[str, FieldSpec]`

        Raises:
        - `SchemaError`:
            If the type is not a dataclass, a field has a type that cannot be bound,
            or two fields share a flag name.
    '''
    if not isclass(clz) or not is_dataclass(clz):
        raise SchemaError(f'{clz!r} is not a dataclass type.')

    type_hints = get_type_hints(clz)
    schema: Dict[str, FieldSpec] = {}
    for field in fields(clz):
        res = analysis_field(field, type_hints.get(field.name, field.type))
        if res is None:
            continue
        if res.tag in schema:
            raise SchemaError(
                f'The flag "{res.tag}" is declared by both "{schema[res.tag].name}" and "{res.name}".'
            )
        schema[res.tag] = res

    logger.debug(
        'argument schema of %s: %s', clz.__qualname__, ', '.join(schema)
    )

    return types.MappingProxyType(schema)
