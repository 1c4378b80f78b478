from contextlib import contextmanager
from logging import getLogger
from types import MappingProxyType

import psycopg2
from psycopg2 import sql

from .config import Settings, parse_dsn
from .errors import CatalogConnectionError, ConfigurationError, SchemaError
from .field_types import AnyType, ArrayType, BooleanType, EnumType, FieldType, TimestampType


logger = getLogger(__name__)


# https://www.postgresql.org/docs/current/catalog-pg-type.html
ENUM_TYPE_CATEGORY = 'E'

ARRAY_DATA_TYPE = 'ARRAY'
BOOLEAN_DATA_TYPE = 'boolean'
TIMESTAMP_DATA_TYPE = 'timestamp with time zone'

FETCH_COLUMNS_QUERY = '''
SELECT table_name, column_name, data_type, udt_schema, udt_name
FROM information_schema.columns
WHERE table_catalog = %s AND table_schema = %s AND table_name = ANY(%s)
ORDER BY table_name, ordinal_position
'''

TYPE_CATEGORY_QUERY = '''
SELECT t.typcategory
FROM pg_type t JOIN pg_namespace n ON n.oid = t.typnamespace
WHERE n.nspname = %s AND t.typname = %s
'''

ENUM_RANGE_QUERY = 'SELECT unnest(enum_range(NULL::{type_name}))::text'


class CollectionSchema:
    """Read-only collection name => column name => FieldType mapping"""

    def __init__(self, collections: dict[str, dict[str, FieldType]]):
        self._collections = MappingProxyType({
            name: MappingProxyType(dict(fields))
            for name, fields in collections.items()
        })

    def __contains__(self, collection_name):
        return collection_name in self._collections

    def __len__(self):
        return len(self._collections)

    def __iter__(self):
        return iter(self._collections)

    def fields(self, collection_name):
        return self._collections[collection_name]

    def field(self, collection_name, field_name) -> FieldType | None:
        return self._collections[collection_name].get(field_name)


class SchemaRepository:
    """Target database catalog access.

    Constructed with the target DSN; nothing touches the network until
    ``open()`` which returns a ``Catalog`` handle owning the connection.
    """

    def __init__(
            self,
            dsn: str,
            schema: str = Settings.DEFAULT_SCHEMA,
            connect_timeout: int = Settings.DEFAULT_CONNECT_TIMEOUT,
            query_timeout: int = Settings.DEFAULT_QUERY_TIMEOUT,
    ):
        try:
            self.dsn_params = parse_dsn(dsn)
        except ValueError as e:
            raise ConfigurationError(f'failed to parse dsn: {e}') from e
        self.database = self.dsn_params['dbname']
        self.schema = schema
        self.connect_timeout = connect_timeout
        self.query_timeout = query_timeout

    @classmethod
    def from_settings(cls, settings: Settings):
        return cls(
            settings.dsn,
            schema=settings.schema,
            connect_timeout=settings.connect_timeout,
            query_timeout=settings.query_timeout,
        )

    def get_connection_config(self):
        config = dict(self.dsn_params)
        config['connect_timeout'] = self.connect_timeout
        if self.query_timeout:
            # Keep options given in the dsn, e.g. -c search_path=app
            options = [config.get('options', '').strip()]
            options.append(f'-c statement_timeout={self.query_timeout * 1000}')
            config['options'] = ' '.join(option for option in options if option)
        return config

    def open(self) -> 'Catalog':
        config = self.get_connection_config()
        host = config.get('host', 'localhost')
        try:
            connection = psycopg2.connect(**config)
            connection.set_session(readonly=True, autocommit=True)
        except psycopg2.Error as e:
            logger.error(f'failed to connect to postgres {host}/{self.database}: {e}')
            raise CatalogConnectionError(f'failed to connect to postgres: {e}') from e
        logger.info(f'connected to postgres {host}/{self.database}, schema {self.schema}')
        return Catalog(connection, self.database, self.schema)


class Catalog:
    """Opened catalog of the target database.

    Enum types and type categories are cached per schema-qualified type name,
    so every column of the same enum type shares one EnumType instance.
    """

    def __init__(self, connection, database: str, schema: str):
        self.connection = connection
        self.database = database
        self.schema = schema
        self._type_categories = {}
        self._enum_types = {}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        if self.connection is None:
            return
        try:
            self.connection.close()
        finally:
            self.connection = None
        logger.debug(f'catalog connection to {self.database} closed')

    @contextmanager
    def get_cursor(self):
        if self.connection is None:
            raise RuntimeError('catalog connection is closed')
        cursor = self.connection.cursor()
        try:
            yield cursor
        finally:
            cursor.close()

    def query(self, query, args=None):
        with self.get_cursor() as cursor:
            try:
                cursor.execute(query, args)
                return cursor.fetchall()
            except psycopg2.Error as e:
                logger.error(f'catalog query failed: {query}, args: {args}, error: {e}')
                raise

    def fetch_collections(self, names) -> CollectionSchema:
        names = sorted(set(names))
        if not names:
            return CollectionSchema({})

        try:
            rows = self.query(FETCH_COLUMNS_QUERY, (self.database, self.schema, names))
        except psycopg2.Error as e:
            raise SchemaError(f'failed to fetch collections types: {e}') from e

        collections = {}
        for table_name, column_name, data_type, udt_schema, udt_name in rows:
            field_type = self.resolve_field_type(data_type, udt_schema, udt_name)
            logger.debug(
                f'{table_name}.{column_name}: {data_type} ({udt_schema}.{udt_name}) => {field_type}'
            )
            collections.setdefault(table_name, {})[column_name] = field_type

        missing = [name for name in names if name not in collections]
        if missing:
            raise SchemaError(
                f'collections not found in {self.database}.{self.schema}: {", ".join(missing)}'
            )

        return CollectionSchema(collections)

    def enum_range(self, type_schema, type_name) -> list[str]:
        query = sql.SQL(ENUM_RANGE_QUERY).format(
            type_name=sql.Identifier(type_schema, type_name),
        )
        try:
            rows = self.query(query)
        except psycopg2.Error as e:
            raise SchemaError(
                f'failed to select enum range of {type_schema}.{type_name}: {e}'
            ) from e
        return [row[0] for row in rows]

    def type_category(self, type_schema, type_name) -> str:
        category = self._type_categories.get((type_schema, type_name))
        if category is not None:
            return category

        try:
            rows = self.query(TYPE_CATEGORY_QUERY, (type_schema, type_name))
        except psycopg2.Error as e:
            raise SchemaError(
                f'failed to select type category of {type_schema}.{type_name}: {e}'
            ) from e

        if len(rows) != 1:
            raise SchemaError(
                f'bad type {type_schema}.{type_name}: '
                f'typcategories found: {[row[0] for row in rows]}'
            )

        category = rows[0][0]
        self._type_categories[(type_schema, type_name)] = category
        return category

    def resolve_field_type(self, data_type, udt_schema, udt_name) -> FieldType:
        if data_type.upper() == ARRAY_DATA_TYPE:
            # Array udt names carry a leading underscore: _mood for mood[].
            # The array type lives in the namespace of its element type.
            item_name = udt_name[1:] if udt_name.startswith('_') else udt_name
            return ArrayType(self.resolve_simple_type(udt_schema, item_name))
        if data_type == BOOLEAN_DATA_TYPE:
            return BooleanType()
        if data_type == TIMESTAMP_DATA_TYPE:
            return TimestampType()
        return self.resolve_simple_type(udt_schema, udt_name)

    def resolve_simple_type(self, type_schema, type_name) -> FieldType:
        if self.type_category(type_schema, type_name) != ENUM_TYPE_CATEGORY:
            return AnyType()

        enum_type = self._enum_types.get((type_schema, type_name))
        if enum_type is None:
            labels = tuple(self.enum_range(type_schema, type_name))
            enum_type = EnumType(name=type_name, labels=labels)
            self._enum_types[(type_schema, type_name)] = enum_type
        return enum_type
