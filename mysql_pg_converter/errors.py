class MigrationError(Exception):
    """Base class for every error raised by mysql_pg_converter"""
    pass


class ConfigurationError(MigrationError):
    """Raised when processor settings are malformed"""
    pass


class SchemaError(MigrationError):
    """Raised when the target catalog cannot be read or does not match settings"""
    pass


class CatalogConnectionError(SchemaError):
    """Raised when the target database is unreachable"""
    pass


class RecordError(MigrationError):
    """Base class for errors tagged to a single record"""
    pass


class ConversionError(RecordError):
    """Raised when a field value cannot be converted to the target representation"""

    def __init__(self, message, field_name=None):
        super().__init__(message)
        self.field_name = field_name


class PayloadError(RecordError):
    """Raised when a record does not carry the expected structured payload"""
    pass
