from typing import Any

from ..errors import ConversionError
from ..field_types import ArrayType, EnumType, FieldType
from .converter import Converter, with_default_middlewares


def quote_array_element(element: str) -> str:
    """Quote an element of a Postgres array literal.

    Example:
        >>> quote_array_element('a"b')
        '"a\\\\"b"'
    """
    return '"' + element.replace('\\', '\\\\').replace('"', '\\"') + '"'


def set_enum_type(field_type: FieldType | None) -> EnumType | None:
    """Enum behind a SET column: the enum itself or the item of an enum array"""
    if isinstance(field_type, EnumType):
        return field_type
    if isinstance(field_type, ArrayType):
        return field_type.enum_item()
    return None


class SetConverter(Converter):
    """Turns a MySQL SET value ('a,b') into a Postgres enum array literal ('{"a","b"}')"""

    kind = 'set'

    def __init__(self, field_type: FieldType):
        enum_type = set_enum_type(field_type)
        if enum_type is None:
            raise ValueError(f'set converter requires an enum type, {field_type} given')
        self._field_type = field_type
        self.enum_type = enum_type

    @property
    def field_type(self):
        return self._field_type

    def convert(self, value: Any) -> str | None:
        if not isinstance(value, str):
            raise ConversionError(f'string is expected, {type(value).__name__} found')

        if value == '':
            if self.enum_type.is_suitable(value):
                return '{' + quote_array_element('') + '}'
            # No bits set in the MySQL bitmask
            return None

        # MySQL forbids commas inside SET members
        elements = []
        for element in value.split(','):
            if not self.enum_type.is_suitable(element):
                raise ConversionError(
                    f'unexpected field found: {element!r} is not a label of {self.enum_type.name}'
                )
            elements.append(quote_array_element(element))

        return '{' + ','.join(elements) + '}'

    def __repr__(self):
        return f'SetConverter({self._field_type})'


def new_set_converter(field_type: FieldType) -> Converter:
    return with_default_middlewares(SetConverter(field_type))
