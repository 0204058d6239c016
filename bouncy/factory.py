"""Wiring helpers for the synchronization components."""

from dataclasses import dataclass

from bouncy.collection import RecordCollection
from bouncy.config import Settings, get_settings
from bouncy.index.client import ElasticsearchIndexClient, IndexClient
from bouncy.mapper import DocumentMapper
from bouncy.records.models import Record
from bouncy.records.store import RecordStore
from bouncy.search import QueryBuilder
from bouncy.sync import Synchronizer


@dataclass
class BouncyComponents:
    """Components sharing one client, mapper and settings object."""

    settings: Settings
    client: IndexClient
    mapper: DocumentMapper
    synchronizer: Synchronizer

    def query(self, record_class: type[Record]) -> QueryBuilder:
        """Query builders for one record type."""
        return QueryBuilder(record_class, self.client, self.mapper, self.settings.bouncy)

    def collection(self, records: list[Record]) -> RecordCollection:
        """Bulk operations over a set of records."""
        return RecordCollection(records, self.synchronizer)


def create_components(
    settings: Settings | None = None,
    store: RecordStore | None = None,
    client: IndexClient | None = None,
) -> BouncyComponents:
    """Create the synchronization components.

    Args:
        settings: Application settings (None uses get_settings()).
        store: Record store to attach the synchronizer to, if any.
        client: Index client (None creates an Elasticsearch one).

    Returns:
        BouncyComponents with the synchronizer attached to ``store``.
    """
    cfg = settings or get_settings()
    index_client = client or ElasticsearchIndexClient(cfg.elasticsearch)
    mapper = DocumentMapper(cfg.bouncy)
    synchronizer = Synchronizer(index_client, mapper, cfg)

    if store is not None:
        synchronizer.attach(store)

    return BouncyComponents(
        settings=cfg,
        client=index_client,
        mapper=mapper,
        synchronizer=synchronizer,
    )
