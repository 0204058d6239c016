"""Tests for the record/index synchronizer."""

from unittest.mock import MagicMock

import pytest

from bouncy.config import BouncySettings, Settings
from bouncy.index.models import IndexStatus
from bouncy.mapper import DocumentMapper
from bouncy.records.store import InMemoryRecordStore
from bouncy.sync import Synchronizer
from tests.fakes import Article, result


@pytest.fixture
def store(settings: Settings, index_client: MagicMock) -> InMemoryRecordStore:
    """Store with a synchronizer attached."""
    store = InMemoryRecordStore()
    Synchronizer(index_client, settings=settings).attach(store)
    return store


class TestSaveCreated:
    """Saving a record without a key."""

    def test_store_write_then_one_full_index(
        self, store: InMemoryRecordStore, index_client: MagicMock
    ) -> None:
        """The record is persisted first, then indexed once with its new key."""
        keys_in_store = []
        index_client.index_document.side_effect = lambda document, version=None: (
            keys_in_store.append(store.find(Article, int(document.id)) is not None)
            or result("index", document_id=document.id)
        )

        article = store.save(Article(title="Hello"))

        index_client.index_document.assert_called_once()
        document = index_client.index_document.call_args.args[0]
        assert document.id == str(article.key) == "1"
        assert document.source == {"title": "Hello", "id": 1}
        assert keys_in_store == [True]
        index_client.update_document.assert_not_called()


class TestSaveExisting:
    """Saving a record that already has a key."""

    def test_update_with_dirty_fields_only(
        self, store: InMemoryRecordStore, index_client: MagicMock
    ) -> None:
        """Exactly one update carrying only the changed fields."""
        article = store.save(Article(title="Hello", body="World"))
        index_client.reset_mock()

        article["title"] = "Changed"
        store.save(article)

        index_client.update_document.assert_called_once()
        ref, fields = index_client.update_document.call_args.args
        assert ref.id == "1"
        assert fields == {"title": "Changed"}
        index_client.index_document.assert_not_called()

    def test_missing_document_falls_back_to_index(
        self, store: InMemoryRecordStore, index_client: MagicMock
    ) -> None:
        """NOT_FOUND on update triggers a full index write."""
        article = store.save(Article(title="Hello"))
        index_client.reset_mock()
        index_client.update_document.return_value = result("update", IndexStatus.NOT_FOUND)
        index_client.index_document.return_value = result("index")

        article["title"] = "Changed"
        store.save(article)

        index_client.update_document.assert_called_once()
        index_client.index_document.assert_called_once()
        document = index_client.index_document.call_args.args[0]
        assert document.source == {"id": 1, "title": "Changed"}

    def test_clean_save_indexes_full_document(
        self, store: InMemoryRecordStore, index_client: MagicMock
    ) -> None:
        """A save without changes skips the update and writes the full document."""
        article = store.save(Article(title="Hello"))
        index_client.reset_mock()

        store.save(article)

        index_client.update_document.assert_not_called()
        index_client.index_document.assert_called_once()

    def test_in_place_mutation_reaches_index(
        self, store: InMemoryRecordStore, index_client: MagicMock
    ) -> None:
        """A list changed in place is part of the update next to other changes."""
        article = store.save(Article(title="a", tags=["x"]))
        index_client.reset_mock()

        article["tags"].append("y")
        article["title"] = "b"
        store.save(article)

        _, fields = index_client.update_document.call_args.args
        assert fields == {"title": "b", "tags": ["x", "y"]}

    def test_saving_rehydrated_record_updates_same_row(
        self, store: InMemoryRecordStore, index_client: MagicMock
    ) -> None:
        """A record rebuilt from a hit is saved under its original key."""
        store.save(Article(title="a"))
        mapper = DocumentMapper(BouncySettings(index="bouncy"))
        hit = {"_id": "1", "_source": {"id": 1, "title": "a"}}
        index_client.reset_mock()

        article = mapper.from_hit(hit, Article)
        article["title"] = "b"
        store.save(article)

        assert [(a.key, a["title"]) for a in store.all(Article)] == [(1, "b")]
        ref, fields = index_client.update_document.call_args.args
        assert ref.id == "1"
        assert fields == {"title": "b"}


class TestDelete:
    """Deleting records."""

    def test_delete_removes_document(
        self, store: InMemoryRecordStore, index_client: MagicMock
    ) -> None:
        """Deleting a record deletes its document."""
        article = store.save(Article(title="Hello"))

        store.delete(article)

        ref = index_client.delete_document.call_args.args[0]
        assert ref.id == "1"

    def test_missing_document_is_a_no_op(
        self, settings: Settings, index_client: MagicMock
    ) -> None:
        """An absent document yields a falsy NOT_FOUND result, no exception."""
        index_client.delete_document.return_value = result("delete", IndexStatus.NOT_FOUND)
        sync = Synchronizer(index_client, settings=settings)

        outcome = sync.on_deleted(Article(id=3))

        assert not outcome
        assert outcome.status == IndexStatus.NOT_FOUND


class TestAutoIndexGate:
    """The auto_index flag."""

    def test_disabled_sync_only_persists(self, index_client: MagicMock) -> None:
        """With auto_index off, saves and deletes never touch the index."""
        settings = Settings(bouncy=BouncySettings(auto_index=False))
        store = InMemoryRecordStore()
        sync = Synchronizer(index_client, settings=settings).attach(store)

        article = store.save(Article(title="Hello"))
        article["title"] = "Changed"
        store.save(article)
        store.delete(article)

        assert store.find(Article, article.key) is None
        index_client.index_document.assert_not_called()
        index_client.update_document.assert_not_called()
        index_client.delete_document.assert_not_called()
        assert sync.on_saved(article, {}, False).status == IndexStatus.SKIPPED

    def test_flag_read_on_every_call(self, index_client: MagicMock) -> None:
        """Toggling the setting takes effect without rebuilding the synchronizer."""
        settings = Settings(bouncy=BouncySettings(auto_index=False))
        sync = Synchronizer(index_client, settings=settings)

        sync.on_saved(Article(id=1, title="a"), {"title": "a"}, True)
        index_client.index_document.assert_not_called()

        settings.bouncy.auto_index = True
        sync.on_saved(Article(id=1, title="a"), {"title": "a"}, True)
        index_client.index_document.assert_called_once()

    def test_explicit_calls_are_not_gated(self, index_client: MagicMock) -> None:
        """index/remove_index work even with auto_index off."""
        settings = Settings(bouncy=BouncySettings(auto_index=False))
        sync = Synchronizer(index_client, settings=settings)

        assert sync.index(Article(id=1))
        assert sync.remove_index(Article(id=1))


class TestExplicitOperations:
    """Direct synchronizer calls."""

    def test_update_index_with_explicit_fields(
        self, settings: Settings, index_client: MagicMock
    ) -> None:
        """Supplied fields take precedence over dirty fields."""
        article = Article(id=1, title="a", body="b")
        sync = Synchronizer(index_client, settings=settings)

        sync.update_index(article, {"body": "only this"})

        assert index_client.update_document.call_args.args[1] == {"body": "only this"}

    def test_update_index_nothing_to_send(
        self, settings: Settings, index_client: MagicMock
    ) -> None:
        """A clean record without supplied fields is skipped."""
        article = Article(id=1, title="a")
        article.sync_original()

        outcome = Synchronizer(index_client, settings=settings).update_index(article)

        assert outcome.status == IndexStatus.SKIPPED
        index_client.update_document.assert_not_called()

    def test_reindex_deletes_then_indexes(
        self, settings: Settings, index_client: MagicMock
    ) -> None:
        """reindex always deletes, then indexes, even if the delete finds nothing."""
        index_client.delete_document.return_value = result("delete", IndexStatus.NOT_FOUND)
        sync = Synchronizer(index_client, settings=settings)

        outcome = sync.reindex(Article(id=1, title="a"))

        assert outcome
        names = [c[0] for c in index_client.method_calls]
        assert names == ["delete_document", "index_document"]

    def test_versioned_conflict_is_falsy(
        self, settings: Settings, index_client: MagicMock
    ) -> None:
        """A stale version comes back as a falsy conflict, not retried."""
        index_client.index_document.return_value = result(
            "index", IndexStatus.VERSION_CONFLICT
        )
        sync = Synchronizer(index_client, settings=settings)

        outcome = sync.index(Article(id=1), version=2)

        assert not outcome
        assert outcome.conflict
        index_client.index_document.assert_called_once()
        assert index_client.index_document.call_args.kwargs["version"] == 2
