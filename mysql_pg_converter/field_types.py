"""
Logical types of target database columns.

A column discovered in the Postgres catalog resolves to exactly one of:

    AnyType        - plain column, every value admissible
    BooleanType    - boolean column
    TimestampType  - timestamp with time zone column
    ArrayType      - array column, owns the type of its items
    EnumType       - enumerated type, owns the set of admissible labels

MySQL SET columns are stored in Postgres as arrays of an enum, so
ArrayType(EnumType(...)) is what marks a SET column downstream.

Every instance is frozen: once built from the catalog it is shared by the
processor for the whole pipeline run.
"""

import datetime
from dataclasses import dataclass, field


BOOLEAN_LITERALS = {
    '1': True, 't': True, 'T': True, 'TRUE': True, 'true': True, 'True': True,
    '0': False, 'f': False, 'F': False, 'FALSE': False, 'false': False, 'False': False,
}

# Value the MySQL connector emits for the unrepresentable 0000-00-00 00:00:00
ZERO_TIMESTAMP = '0001-01-01T00:00:00Z'


def parse_bool(value: str) -> bool:
    try:
        return BOOLEAN_LITERALS[value]
    except KeyError:
        raise ValueError(f'invalid boolean literal: {value!r}') from None


class FieldType:
    kind = 'unknown'

    def is_suitable(self, value: str) -> bool:
        raise NotImplementedError()


@dataclass(frozen=True)
class AnyType(FieldType):
    kind = 'any'

    def is_suitable(self, value: str) -> bool:
        return True

    def __str__(self):
        return 'Any'


@dataclass(frozen=True)
class BooleanType(FieldType):
    kind = 'boolean'

    def is_suitable(self, value: str) -> bool:
        return value in BOOLEAN_LITERALS

    def __str__(self):
        return 'Boolean'


@dataclass(frozen=True)
class TimestampType(FieldType):
    kind = 'timestamp'

    def is_suitable(self, value: str) -> bool:
        if value == ZERO_TIMESTAMP:
            return True
        if value.endswith('Z'):
            value = value[:-1] + '+00:00'
        try:
            datetime.datetime.fromisoformat(value)
        except ValueError:
            return False
        return True

    def __str__(self):
        return 'Timestamp'


@dataclass(frozen=True)
class EnumType(FieldType):
    kind = 'enum'

    name: str = ''
    labels: tuple = ()
    allowed: frozenset = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'labels', tuple(self.labels))
        object.__setattr__(self, 'allowed', frozenset(self.labels))

    def is_suitable(self, value: str) -> bool:
        return value in self.allowed

    def __str__(self):
        return f'Enum({self.name})'


@dataclass(frozen=True)
class ArrayType(FieldType):
    kind = 'array'

    item: FieldType = field(default_factory=AnyType)

    def is_suitable(self, value: str) -> bool:
        # An array literal arrives the same way MySQL SET values do: comma-joined
        return all(self.item.is_suitable(element) for element in value.split(','))

    def enum_item(self):
        if isinstance(self.item, EnumType):
            return self.item
        return None

    def __str__(self):
        return f'Array({self.item})'
