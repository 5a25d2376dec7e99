'''
A simple parser to bind the command-line arguments to the fields of a dataclass.
'''
import logging
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Set, Type

from .types import DataclassType, ErrorKind, FieldSpec, ParserError, normalize_tag
from .utils import analysis_dataclass, coerce_value

logger = logging.getLogger(__name__)


class BindingState:
    '''
        Track the fields already assigned during one parse.
    '''

    def __init__(self) -> None:
        self._assigned: Set[str] = set()

    def is_set(self, spec: FieldSpec) -> bool:
        return spec.name in self._assigned

    def mark(self, spec: FieldSpec) -> None:
        self._assigned.add(spec.name)


def _bind(
    args: Sequence[Optional[str]], schema: Mapping[str, FieldSpec],
    store: Callable[[FieldSpec, Any], None]
) -> BindingState:
    state = BindingState()
    index = 0
    while index < len(args):
        token = args[index]
        spec = None
        if isinstance(token, str):
            spec = schema.get(normalize_tag(token))
        if spec is not None:
            if state.is_set(spec):
                raise ParserError(ErrorKind.DuplicateArgument, token)
            if spec.is_switch:
                store(spec, True)
            else:
                index += 1
                if index >= len(args):
                    raise ParserError(ErrorKind.MissingValue, token)
                try:
                    value = coerce_value(args[index], spec)
                except ValueError as e:
                    raise ParserError(
                        ErrorKind.ValueConversionError, token
                    ) from e
                store(spec, value)
            state.mark(spec)
            logger.debug('bound %s to field "%s"', spec.tag, spec.name)
        index += 1

    for spec in schema.values():
        if not spec.optional and not state.is_set(spec):
            raise ParserError(ErrorKind.MissingRequiredArgument, spec.tag)

    return state


class BindingParser:
    '''
        A command-line argument parser to bind the arguments to a specified data class.

        Every field of the data class is bound to one flag, `--<field-name>` unless a tag is declared
        with `Argument`. The arguments are scanned from left to right: a flag of a `bool` field is a switch
        and sets the field to True, any other flag takes the following token as its value. Tokens that
        are not flags are ignored.

        Parameters:
        - clz (`type`): The type of the data class to which the parsed arguments will be bound.

        Example:
        ```python
        from dataclasses import dataclass

        @dataclass
        class MyDataClass:
            size: str = Argument('--size')
            filename: str = Argument('--filename', optional=True, default='randomfile.tmp')

        parser = BindingParser(MyDataClass)

        args = parser.parse(['--size', '10MB'])

        print(args.size, args.filename)
        ```
    '''

    def __init__(self, clz: Type[DataclassType]) -> None:
        self._dataclass = clz
        self._schema = analysis_dataclass(clz)

    @property
    def schema(self) -> Mapping[str, FieldSpec]:
        return self._schema

    def parse(self, args: Sequence[str]) -> DataclassType:
        '''
            Parse the command-line arguments into a new instance of the data class.

            The fields not given on the command-line keep the defaults declared on the data class.

            Parameters:
            - args (`Sequence[str]`): the argument vector, without the program name.

            Returns:
            - `DataclassType`: the initialized data class instance.

            Raises:
            - `ParserError`: if the arguments cannot be bound, `ErrorKind.NullArguments` if `args` is None.
        '''
        if args is None:
            raise ParserError(
                ErrorKind.NullArguments, message='argument vector is missing'
            )

        init_kwargs: Dict[str, Any] = {}

        def store(spec: FieldSpec, value: Any) -> None:
            init_kwargs[spec.name] = value

        _bind(args, self._schema, store)
        for spec in self._schema.values():
            if spec.name not in init_kwargs and not spec.has_default:
                init_kwargs[spec.name] = None

        return self._dataclass(**init_kwargs)

    def parse_into(
        self, args: Sequence[str], result: DataclassType
    ) -> DataclassType:
        '''
            Parse the command-line arguments into an existing instance of the data class.

            Only the fields given on the command-line are written, the others keep their current values.
            The fields written before a failing argument keep the new values.

            Parameters:
            - args (`Sequence[str]`): the argument vector, without the program name.
            - result (`DataclassType`): the instance to write into.

            Returns:
            - `DataclassType`: the same instance.

            Raises:
            - `ParserError`: if the arguments cannot be bound, `ErrorKind.NullArguments` if `args` or `result` is None.
        '''
        if args is None:
            raise ParserError(
                ErrorKind.NullArguments, message='argument vector is missing'
            )
        if result is None:
            raise ParserError(
                ErrorKind.NullArguments, message='target instance is missing'
            )
        if not isinstance(result, self._dataclass):
            raise TypeError(
                f'Expected an instance of {self._dataclass.__qualname__}, got {type(result).__qualname__}.'
            )

        def store(spec: FieldSpec, value: Any) -> None:
            setattr(result, spec.name, value)

        _bind(args, self._schema, store)

        return result


def parse_args(
    clz: Type[DataclassType], args: Sequence[str]
) -> DataclassType:
    '''
        Parse the command-line arguments into a new instance of `clz`, see `BindingParser.parse`.
    '''
    return BindingParser(clz).parse(args)


def parse_into(result: DataclassType, args: Sequence[str]) -> DataclassType:
    '''
        Parse the command-line arguments into `result`, see `BindingParser.parse_into`.
    '''
    if result is None:
        raise ParserError(
            ErrorKind.NullArguments, message='target instance is missing'
        )
    return BindingParser(type(result)).parse_into(args, result)
