"""Record-to-index synchronizer."""

from typing import Any

from bouncy.config import Settings, get_settings
from bouncy.index.client import IndexClient
from bouncy.index.models import IndexResult, IndexStatus
from bouncy.logging_config import get_logger
from bouncy.mapper import DocumentMapper
from bouncy.records.models import Record
from bouncy.records.store import RecordObserver, RecordStore

logger = get_logger(__name__)


class Synchronizer(RecordObserver):
    """Mirrors record lifecycle events into the search index.

    Attached to a RecordStore, it runs after each save and delete:

    - a newly created record is indexed in full;
    - an updated record gets a partial update with its changed fields,
      falling back to a full index write when the document is missing;
    - a deleted record has its document removed, a missing document is
      not an error.

    Lifecycle handling is gated by the ``auto_index`` setting, read on every
    call. The explicit index/update_index/remove_index/reindex methods are
    never gated.
    """

    def __init__(
        self,
        client: IndexClient,
        mapper: DocumentMapper | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the synchronizer.

        Args:
            client: Index client used for every request.
            mapper: Record/document mapper.
            settings: Application settings.
        """
        self._settings = settings or get_settings()
        self.client = client
        self.mapper = mapper or DocumentMapper(self._settings.bouncy)

    @property
    def auto_index(self) -> bool:
        return self._settings.bouncy.auto_index

    @property
    def include_type_name(self) -> bool:
        return self._settings.elasticsearch.include_type_name

    def attach(self, store: RecordStore) -> "Synchronizer":
        """Register for the store's lifecycle notifications."""
        store.register_observer(self)
        return self

    def index(self, record: Record, version: int | None = None) -> IndexResult:
        """Write the record's full document.

        Args:
            record: Persisted record.
            version: Optional external version. A stale version returns a
                falsy VERSION_CONFLICT result; nothing is retried.
        """
        document = self.mapper.to_document(record)
        result = self.client.index_document(document, version=version)

        if result.status == IndexStatus.VERSION_CONFLICT:
            logger.warning(
                f"Version conflict indexing {record!r}",
                extra={"index": document.index, "version": version},
            )
        return result

    def update_index(
        self,
        record: Record,
        fields: dict[str, Any] | None = None,
    ) -> IndexResult:
        """Partially update the record's document.

        Args:
            record: Persisted record.
            fields: Fields to send; defaults to the record's dirty fields.

        Returns:
            SKIPPED when there is nothing to send, NOT_FOUND when the
            document does not exist yet.
        """
        body = fields or record.get_dirty()
        if not body:
            return IndexResult.skipped("update", str(record.key))

        return self.client.update_document(self.mapper.reference(record), body)

    def remove_index(self, record: Record) -> IndexResult:
        """Delete the record's document; NOT_FOUND is returned, not raised."""
        result = self.client.delete_document(self.mapper.reference(record))
        if result.status == IndexStatus.NOT_FOUND:
            logger.info(f"No document to delete for {record!r}")
        return result

    def reindex(self, record: Record) -> IndexResult:
        """Delete then index the record's document, without existence checks."""
        self.remove_index(record)
        return self.index(record)

    def on_saved(
        self,
        record: Record,
        changes: dict[str, Any],
        created: bool,
    ) -> IndexResult:
        """Sync a save that the record store has already persisted."""
        if not self.auto_index:
            return IndexResult.skipped("save", str(record.key))

        if created:
            return self.index(record)

        result = self.update_index(record, changes)
        if result.status in (IndexStatus.NOT_FOUND, IndexStatus.SKIPPED):
            logger.info(
                f"Update of {record!r} returned {result.status.value}, indexing full document"
            )
            return self.index(record)

        return result

    def on_deleted(self, record: Record) -> IndexResult:
        """Sync a delete that the record store has already persisted."""
        if not self.auto_index:
            return IndexResult.skipped("delete", str(record.key))

        return self.remove_index(record)
