from ..field_types import AnyType, ArrayType, BooleanType, EnumType, FieldType, TimestampType
from .converter import Converter, NullSafeConverter, with_default_middlewares
from .boolean_converter import BooleanConverter, new_boolean_converter
from .set_converter import SetConverter, new_set_converter, quote_array_element, set_enum_type
from .timestamp_converter import TimestampConverter, new_timestamp_converter


def converter_by_type(field_type: FieldType | None) -> Converter | None:
    """Converter for a column type learned from the catalog, None for pass-through"""
    if isinstance(field_type, ArrayType):
        if isinstance(field_type.item, EnumType):
            # MySQL SET
            return new_set_converter(field_type)
        return None
    if isinstance(field_type, BooleanType):
        return new_boolean_converter()
    if isinstance(field_type, TimestampType):
        return new_timestamp_converter()
    if isinstance(field_type, (EnumType, AnyType)) or field_type is None:
        return None
    raise TypeError(f'unknown field type {field_type!r}')


__all__ = [
    'Converter',
    'NullSafeConverter',
    'with_default_middlewares',
    'BooleanConverter',
    'SetConverter',
    'TimestampConverter',
    'new_boolean_converter',
    'new_set_converter',
    'new_timestamp_converter',
    'quote_array_element',
    'set_enum_type',
    'converter_by_type',
]
