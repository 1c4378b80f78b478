from dataclasses import dataclass, field
from typing import Any

from .errors import PayloadError, RecordError


COLLECTION_METADATA_KEY = 'opencdc.collection'


@dataclass
class Payload:
    before: Any = None
    after: Any = None


@dataclass
class Record:
    """A change-data-capture record as delivered by the host pipeline.

    Only ``payload.after`` is ever modified by the processor.
    """
    operation: str = 'create'
    metadata: dict = field(default_factory=dict)
    key: Any = None
    payload: Payload = field(default_factory=Payload)

    def get_collection(self) -> str:
        collection = self.metadata.get(COLLECTION_METADATA_KEY)
        if not collection:
            raise PayloadError(f'metadata field {COLLECTION_METADATA_KEY} is missing')
        return collection

    def structured_payload(self) -> dict:
        after = self.payload.after
        if not isinstance(after, dict):
            raise PayloadError(f'bad record type: {type(after).__name__}, dict expected')
        return after


@dataclass
class ProcessedRecord:
    record: Record

    @property
    def is_error(self):
        return False


@dataclass
class ErrorRecord:
    record: Record
    error: RecordError

    @property
    def is_error(self):
        return True
