import datetime
import decimal
from dataclasses import dataclass, field
from typing import Optional

import pytest

from flag_binding.types import Argument, FieldSpec, SchemaError, ValueKind
from flag_binding.utils import analysis_dataclass, coerce_value, single_type_fn


@dataclass
class SampleArgs:
    must: int
    input_file: str = Argument('--File')
    port: int = Argument(kind=ValueKind.UInt16, optional=True, default=8080)
    sep: str = Argument('--sep', optional=True, default=',', kind=ValueKind.Char)
    ratio: float = 0.5
    precise: decimal.Decimal = decimal.Decimal('1.0')
    verbose: bool = False
    name: Optional[str] = 'hello'
    limit: Optional[int] = None
    since: Optional[datetime.datetime] = None
    hidden: int = field(default=0, init=False)


def test_analysis_dataclass():
    schema = analysis_dataclass(SampleArgs)

    assert list(schema) == [
        '--must', '--file', '--port', '--sep', '--ratio', '--precise',
        '--verbose', '--name', '--limit', '--since'
    ]
    assert schema['--must'].kind is ValueKind.Int
    assert not schema['--must'].optional
    assert not schema['--file'].optional
    assert schema['--file'].name == 'input_file'
    assert schema['--port'].kind is ValueKind.UInt16
    assert schema['--sep'].kind is ValueKind.Char
    assert schema['--ratio'].kind is ValueKind.Double
    assert schema['--ratio'].optional
    assert schema['--precise'].kind is ValueKind.Decimal
    assert schema['--verbose'].is_switch
    assert schema['--limit'].nullable
    assert schema['--since'].kind is ValueKind.DateTime
    assert not schema['--name'].is_switch


def test_analysis_dataclass_is_cached_and_read_only():
    schema = analysis_dataclass(SampleArgs)

    assert analysis_dataclass(SampleArgs) is schema
    with pytest.raises(TypeError):
        schema['--other'] = schema['--must']


def test_derived_tag_keeps_field_name():

    @dataclass
    class Options:
        output_dir: str = './output'
        Mode: str = 'fast'

    assert list(analysis_dataclass(Options)) == ['--output_dir', '--mode']


def test_field_spec_defaults():
    spec = FieldSpec(
        name='size', tag='--size', kind=ValueKind.String, convert=str
    )

    assert not spec.optional
    assert not spec.nullable
    assert not spec.has_default
    assert FieldSpec(
        name='size',
        tag='--size',
        kind=ValueKind.String,
        convert=str,
        default='1KB'
    ).has_default


def test_duplicate_tag():

    @dataclass
    class Options:
        first: str = Argument('--name')
        second: str = Argument('--NAME')

    with pytest.raises(SchemaError):
        analysis_dataclass(Options)


def test_derived_tag_collides_with_declared_tag():

    @dataclass
    class Options:
        size: str = Argument('--length')
        length: int = 0

    with pytest.raises(SchemaError):
        analysis_dataclass(Options)


def test_unknown_type():

    @dataclass
    class Options:
        values: list = None

    with pytest.raises(SchemaError):
        analysis_dataclass(Options)


def test_union_type():

    @dataclass
    class Options:
        value: 'int | str' = 0

    with pytest.raises(SchemaError):
        analysis_dataclass(Options)


def test_not_dataclass():

    class Options:
        name: str = 'x'

    with pytest.raises(SchemaError):
        analysis_dataclass(Options)


def test_tag_without_dash():

    @dataclass
    class Options:
        name: str = Argument('name', optional=True)

    with pytest.raises(SchemaError):
        analysis_dataclass(Options)


def test_kind_overrides_annotation():

    @dataclass
    class Options:
        count: str = Argument(optional=True, kind=ValueKind.Int32)

    with pytest.warns(UserWarning):
        schema = analysis_dataclass(Options)
    assert schema['--count'].kind is ValueKind.Int32


@pytest.mark.parametrize(
    'tag, val, expected', [
        ('--must', '42', 42),
        ('--must', ' -7 ', -7),
        ('--must', '+3', 3),
        ('--port', '65535', 65535),
        ('--port', '0', 0),
        ('--sep', ';', ';'),
        ('--sep', ' ', ' '),
        ('--ratio', '2.5', 2.5),
        ('--ratio', '1e3', 1000.0),
        ('--precise', '12.50', decimal.Decimal('12.50')),
        ('--name', '', ''),
        ('--name', ' spaced ', ' spaced '),
        ('--limit', '10', 10),
        ('--limit', None, None),
        ('--since', '2024-01-02', datetime.datetime(2024, 1, 2)),
        (
            '--since', '2024-01-02T03:04:05',
            datetime.datetime(2024, 1, 2, 3, 4, 5)
        ),
    ]
)
def test_coerce_value(tag, val, expected):
    spec = analysis_dataclass(SampleArgs)[tag]

    assert coerce_value(val, spec) == expected


@pytest.mark.parametrize(
    'tag, val', [
        ('--must', 'abc'),
        ('--must', '1.5'),
        ('--must', '1_000'),
        ('--must', ''),
        ('--must', None),
        ('--port', '65536'),
        ('--port', '-1'),
        ('--sep', ''),
        ('--sep', 'ab'),
        ('--ratio', 'fast'),
        ('--precise', 'nan'),
        ('--precise', '1,5'),
        ('--since', 'yesterday'),
        ('--since', '2024-13-01'),
        ('--must', 5),
        ('--name', 5),
    ]
)
def test_coerce_value_failure(tag, val):
    spec = analysis_dataclass(SampleArgs)[tag]

    with pytest.raises(ValueError):
        coerce_value(val, spec)


@pytest.mark.parametrize(
    'kind, low, high', [
        (ValueKind.SByte, -128, 127),
        (ValueKind.Byte, 0, 255),
        (ValueKind.Int16, -32768, 32767),
        (ValueKind.UInt16, 0, 65535),
        (ValueKind.Int32, -2**31, 2**31 - 1),
        (ValueKind.UInt32, 0, 2**32 - 1),
        (ValueKind.Int64, -2**63, 2**63 - 1),
        (ValueKind.UInt64, 0, 2**64 - 1),
    ]
)
def test_integer_bounds(kind, low, high):

    @dataclass
    class Options:
        value: int = Argument(optional=True, default=0, kind=kind)

    spec = analysis_dataclass(Options)['--value']

    assert coerce_value(str(low), spec) == low
    assert coerce_value(str(high), spec) == high
    with pytest.raises(ValueError):
        coerce_value(str(low - 1), spec)
    with pytest.raises(ValueError):
        coerce_value(str(high + 1), spec)


def test_single_precision():
    assert single_type_fn('0.5') == 0.5
    assert single_type_fn('0.1') != 0.1
    assert single_type_fn(str(single_type_fn('0.1'))) == single_type_fn('0.1')

    @dataclass
    class Options:
        value: float = Argument(optional=True, default=0.0, kind=ValueKind.Single)

    spec = analysis_dataclass(Options)['--value']
    with pytest.raises(ValueError):
        coerce_value('1e39', spec)


def test_bool_coercion():

    @dataclass
    class Options:
        value: Optional[bool] = None

    spec = analysis_dataclass(Options)['--value']

    assert coerce_value('TRUE', spec) is True
    assert coerce_value(' false ', spec) is False
    assert coerce_value(None, spec) is None
    with pytest.raises(ValueError):
        coerce_value('yes', spec)
