"""Bulk synchronization of record collections."""

from collections.abc import Iterable, Iterator
from typing import Any

from bouncy.index.models import DocumentRef, IndexResult
from bouncy.logging_config import get_logger
from bouncy.observability.metrics import track_bulk_request
from bouncy.records.models import Record
from bouncy.sync import Synchronizer

logger = get_logger(__name__)


def bulk_descriptor(action: str, ref: DocumentRef, include_type: bool = False) -> dict[str, Any]:
    """Action line of a bulk body, e.g. ``{"index": {"_index": ..., "_id": ...}}``."""
    meta: dict[str, Any] = {"_index": ref.index}
    if include_type:
        meta["_type"] = ref.type
    meta["_id"] = ref.id
    return {action: meta}


class RecordCollection:
    """A set of records that can be indexed or removed with bulk requests."""

    def __init__(self, records: Iterable[Record], synchronizer: Synchronizer) -> None:
        self._records = list(records)
        self._sync = synchronizer

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, position: int) -> Record:
        return self._records[position]

    def is_empty(self) -> bool:
        return not self._records

    def index_operations(self) -> list[dict[str, Any]]:
        """Index descriptor/document pairs for every record."""
        operations: list[dict[str, Any]] = []
        for record in self._records:
            document = self._sync.mapper.to_document(record)
            operations.append(
                bulk_descriptor("index", document.ref(), self._sync.include_type_name)
            )
            operations.append(document.source)
        return operations

    def delete_operations(self) -> list[dict[str, Any]]:
        """Delete descriptors for every record."""
        return [
            bulk_descriptor(
                "delete",
                self._sync.mapper.reference(record),
                self._sync.include_type_name,
            )
            for record in self._records
        ]

    def index(self) -> IndexResult:
        """Index every record in one bulk request; SKIPPED when empty."""
        if self.is_empty():
            return IndexResult.skipped("bulk")

        track_bulk_request("index", len(self._records))
        return self._sync.client.bulk(self.index_operations())

    def remove_index(self) -> IndexResult:
        """Delete every record's document in one bulk request; SKIPPED when empty."""
        if self.is_empty():
            return IndexResult.skipped("bulk")

        track_bulk_request("delete", len(self._records))
        return self._sync.client.bulk(self.delete_operations())

    def reindex(self, single_request: bool = False) -> IndexResult:
        """Delete and re-index every record.

        The default sends two bulk requests, deletes first. This is not
        atomic: if the process dies between them the documents stay deleted.
        single_request=True puts both phases in one bulk body, which narrows
        that window to a partially applied bulk.
        """
        if self.is_empty():
            return IndexResult.skipped("bulk")

        if single_request:
            track_bulk_request("delete", len(self._records))
            track_bulk_request("index", len(self._records))
            return self._sync.client.bulk(self.delete_operations() + self.index_operations())

        self.remove_index()
        return self.index()
