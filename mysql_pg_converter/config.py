"""
MySQL to Postgres Converter Configuration Management

This module provides the configuration classes of the record conversion processor:
the target database connection and the per-collection lists of fields that need
type reconciliation.

Classes:
    CollectionSettings: Field references of one collection, grouped by field category
    Settings: Main configuration class that orchestrates all settings

Key Features:
    - YAML-based configuration loading
    - Loading from an already deserialized mapping (host pipeline configuration)
    - Postgres DSN validation through libpq
    - Type validation and error handling
"""

from dataclasses import dataclass
from logging import getLogger

import psycopg2
import psycopg2.extensions
import yaml

from .errors import ConfigurationError


logger = getLogger(__name__)


BOOLEAN_FIELDS = 'boolean_fields'
SET_FIELDS = 'set_fields'
TIMESTAMP_FIELDS = 'timestamp_fields'

FIELD_CATEGORIES = (BOOLEAN_FIELDS, SET_FIELDS, TIMESTAMP_FIELDS)


def stype(obj):
    """Get the simple type name of an object.

    Example:
        >>> stype([1, 2, 3])
        'list'
    """
    return type(obj).__name__


def parse_field_references(references) -> list[str]:
    """Split a comma-separated list of field references.

    Surrounding whitespace is trimmed. An empty list yields no references,
    while an empty element inside a non-empty list is rejected.

    Example:
        >>> parse_field_references(' field_a, field_b ')
        ['field_a', 'field_b']
    """
    if references is None:
        return []

    if isinstance(references, str):
        if not references.strip():
            return []
        items = references.split(',')
    elif isinstance(references, list):
        items = references
    else:
        raise ValueError(
            f"field references should be string or list and not {stype(references)}"
        )

    result = []
    for item in items:
        if not isinstance(item, str):
            raise ValueError(f"field reference should be string and not {stype(item)}")
        item = item.strip()
        if not item:
            raise ValueError(f"empty field reference in {references!r}")
        result.append(item)
    return result


@dataclass
class CollectionSettings:
    """Fields of a single collection that need conversion.

    Each attribute is either a comma-separated string (``"field_a, field_b"``)
    or a list of field names. Field names are the keys of the record's
    structured payload.

    Attributes:
        boolean_fields: Fields parsed into strict booleans
        set_fields: MySQL SET fields turned into Postgres enum array literals
        timestamp_fields: Fields where the MySQL zero timestamp becomes NULL
    """
    boolean_fields: str | list = ''
    set_fields: str | list = ''
    timestamp_fields: str | list = ''

    def field_references(self, category: str) -> list[str]:
        if category not in FIELD_CATEGORIES:
            raise ValueError(f'unknown field category {category}')
        return parse_field_references(getattr(self, category))

    def validate(self, collection_name: str = ''):
        seen = {}
        for category in FIELD_CATEGORIES:
            try:
                references = self.field_references(category)
            except ValueError as e:
                raise ValueError(f"collection {collection_name} {category}: {e}")
            for reference in references:
                previous = seen.get(reference)
                if previous is not None:
                    raise ValueError(
                        f"collection {collection_name}: field {reference} "
                        f"declared in both {previous} and {category}"
                    )
                seen[reference] = category


def parse_dsn(dsn: str) -> dict:
    """Parse a libpq connection string (URL or key=value form)"""
    if not isinstance(dsn, str):
        raise ValueError(f"dsn should be string and not {stype(dsn)}")
    if not dsn.strip():
        raise ValueError("dsn is required")
    try:
        params = psycopg2.extensions.parse_dsn(dsn)
    except psycopg2.ProgrammingError as e:
        raise ValueError(f"invalid dsn: {e}".strip())
    if not params.get('dbname'):
        raise ValueError("database name is not passed in dsn")
    return params


class Settings:
    DEFAULT_LOG_LEVEL = 'info'
    DEFAULT_SCHEMA = 'public'
    DEFAULT_CONNECT_TIMEOUT = 30
    DEFAULT_QUERY_TIMEOUT = 60

    # Key the dsn was read from by earlier pipeline configurations
    LEGACY_DSN_KEY = 'mysql_db_dsn'

    def __init__(self):
        self.dsn = ''
        self.schema = Settings.DEFAULT_SCHEMA
        self.connect_timeout = Settings.DEFAULT_CONNECT_TIMEOUT
        self.query_timeout = Settings.DEFAULT_QUERY_TIMEOUT
        self.log_level = Settings.DEFAULT_LOG_LEVEL
        self.collections: dict[str, CollectionSettings] = {}
        self.settings_file = ''
        self.raw_data = {}
        self.debug_log_level = False

    def load(self, settings_file):
        with open(settings_file, 'r') as f:
            try:
                data = yaml.safe_load(f.read())
            except yaml.YAMLError as e:
                raise ConfigurationError(f"unable to parse {settings_file}: {e}") from e
        self.settings_file = settings_file
        self.load_dict(data)

    def load_dict(self, data):
        if not isinstance(data, dict):
            raise ConfigurationError(f"settings should be a mapping and not {stype(data)}")

        self.raw_data = data
        data = dict(data)
        self.dsn = data.pop('dsn', '')
        legacy_dsn = data.pop(Settings.LEGACY_DSN_KEY, None)
        if not self.dsn and legacy_dsn:
            self.dsn = legacy_dsn
        self.schema = data.pop('schema', Settings.DEFAULT_SCHEMA)
        self.connect_timeout = data.pop('connect_timeout', Settings.DEFAULT_CONNECT_TIMEOUT)
        self.query_timeout = data.pop('query_timeout', Settings.DEFAULT_QUERY_TIMEOUT)
        self.log_level = data.pop('log_level', Settings.DEFAULT_LOG_LEVEL)

        collections = data.pop('collections', {}) or {}
        if not isinstance(collections, dict):
            raise ConfigurationError(
                f"collections should be a mapping and not {stype(collections)}"
            )

        self.collections = {}
        for collection_name, collection_data in collections.items():
            if collection_data is None:
                collection_data = {}
            if not isinstance(collection_data, dict):
                raise ConfigurationError(
                    f"collection {collection_name} should be a mapping and not {stype(collection_data)}"
                )
            collection_data = dict(collection_data)
            known = {
                category: collection_data.pop(category)
                for category in FIELD_CATEGORIES
                if category in collection_data
            }
            if collection_data:
                logger.debug(
                    f"ignoring unknown options of collection {collection_name}: "
                    f"{list(collection_data.keys())}"
                )
            self.collections[collection_name] = CollectionSettings(**known)

        if data:
            logger.debug(f"ignoring unknown config options: {list(data.keys())}")

        try:
            self.validate()
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    def dsn_params(self) -> dict:
        return parse_dsn(self.dsn)

    def validate_log_level(self):
        if self.log_level not in ['critical', 'error', 'warning', 'info', 'debug']:
            raise ValueError(f"wrong log level {self.log_level}")
        if self.log_level == 'debug':
            self.debug_log_level = True

    def validate(self):
        self.dsn_params()

        if not isinstance(self.schema, str) or not self.schema:
            raise ValueError(f"schema should be non-empty string and not {stype(self.schema)}")

        if not isinstance(self.connect_timeout, int) or self.connect_timeout <= 0:
            raise ValueError("connect_timeout should be at least 1 second")

        if not isinstance(self.query_timeout, int) or self.query_timeout < 0:
            raise ValueError("query_timeout should be non-negative integer")

        self.validate_log_level()

        for collection_name, collection in self.collections.items():
            if not isinstance(collection_name, str) or not collection_name:
                raise ValueError(f"wrong collection name {collection_name!r}")
            collection.validate(collection_name)
