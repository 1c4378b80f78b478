from typing import Any

from ..field_types import FieldType


class Converter:
    """Converts a single field value from the MySQL to the Postgres representation.

    One instance serves every record of a pipeline run for one field.
    """

    kind = 'unknown'

    def convert(self, value: Any) -> Any:
        raise NotImplementedError()

    @property
    def field_type(self) -> FieldType | None:
        return None


class NullSafeConverter(Converter):
    """Wraps a converter so that NULL always stays NULL"""

    def __init__(self, converter: Converter):
        self.converter = converter

    @property
    def kind(self):
        return self.converter.kind

    @property
    def field_type(self):
        return self.converter.field_type

    def convert(self, value: Any) -> Any:
        if value is None:
            return None
        return self.converter.convert(value)

    def __repr__(self):
        return f'{type(self).__name__}({self.converter!r})'


def with_default_middlewares(converter: Converter) -> Converter:
    return NullSafeConverter(converter)
