from typing import Any

from ..errors import ConversionError
from ..field_types import parse_bool
from .converter import Converter, with_default_middlewares


def format_float(value: float) -> str:
    # Shortest form without exponent: 1.0 => '1', 0.5 => '0.5'
    text = repr(value)
    if 'e' in text or 'E' in text:
        text = f'{value:f}'
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text


class BooleanConverter(Converter):
    """Turns MySQL boolean-ish scalars (tinyint(1), bit(1), 'true') into bool"""

    kind = 'boolean'

    def convert(self, value: Any) -> bool:
        text = self.to_string(value)
        try:
            return parse_bool(text)
        except ValueError as e:
            raise ConversionError(f'unable to convert to boolean: {text!r}') from e

    @staticmethod
    def to_string(value: Any) -> str:
        if isinstance(value, bytes):
            return value.decode('utf-8', errors='replace')
        if isinstance(value, str):
            return value
        # bool is a subclass of int
        if isinstance(value, bool):
            return 'true' if value else 'false'
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            return format_float(value)
        return str(value)

    def __repr__(self):
        return 'BooleanConverter()'


def new_boolean_converter() -> Converter:
    return with_default_middlewares(BooleanConverter())
