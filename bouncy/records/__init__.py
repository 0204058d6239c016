"""Record store adapter module."""

from bouncy.records.models import Indexable, Record
from bouncy.records.store import InMemoryRecordStore, RecordObserver, RecordStore

__all__ = [
    "InMemoryRecordStore",
    "Indexable",
    "Record",
    "RecordObserver",
    "RecordStore",
]
