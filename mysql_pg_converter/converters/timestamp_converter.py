from typing import Any

from ..errors import ConversionError
from ..field_types import ZERO_TIMESTAMP
from .converter import Converter, with_default_middlewares


class TimestampConverter(Converter):
    """Turns the zero timestamp of legacy MySQL (0000-00-00 00:00:00) into NULL.

    The MySQL connector emits that value as 0001-01-01T00:00:00Z, which
    Postgres would accept as a real date.
    """

    kind = 'timestamp'

    def convert(self, value: Any) -> str | None:
        if not isinstance(value, str):
            raise ConversionError(f'invalid timestamp {value!r}: should be a string')

        if value == ZERO_TIMESTAMP:
            return None

        return value

    def __repr__(self):
        return 'TimestampConverter()'


def new_timestamp_converter() -> Converter:
    return with_default_middlewares(TimestampConverter())
