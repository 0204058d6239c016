"""Record store interface, lifecycle observers and an in-memory store."""

from abc import ABC, abstractmethod
from copy import deepcopy
from itertools import count
from typing import Any, TypeVar

from bouncy.exceptions import ErrorCode, RecordStoreError
from bouncy.logging_config import get_logger
from bouncy.records.models import Record

logger = get_logger(__name__)

R = TypeVar("R", bound=Record)


class RecordObserver(ABC):
    """Receives record lifecycle notifications after persistence completes."""

    @abstractmethod
    def on_saved(
        self,
        record: Record,
        changes: dict[str, Any],
        created: bool,
    ) -> Any:
        """Called after a record was written.

        Args:
            record: The persisted record (key assigned).
            changes: Fields that changed in this save.
            created: True when the record had no key before the save.
        """
        ...

    @abstractmethod
    def on_deleted(self, record: Record) -> Any:
        """Called after a record was removed from the store."""
        ...


class RecordStore(ABC):
    """Abstract record store.

    save() and delete() persist first and then notify every registered
    observer, in registration order.
    """

    def __init__(self) -> None:
        self._observers: list[RecordObserver] = []

    def register_observer(self, observer: RecordObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unregister_observer(self, observer: RecordObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    @property
    def observers(self) -> list[RecordObserver]:
        return list(self._observers)

    def save(self, record: R) -> R:
        """Persist a record and notify observers.

        Args:
            record: Record to insert (no key yet) or update.

        Returns:
            The same record, with its key assigned and changes synced.

        Raises:
            RecordStoreError: If the write fails.
        """
        created = record.key is None
        changes = record.get_dirty()

        self._persist(record, created)
        record.exists = True
        record.sync_original()

        logger.debug(
            f"Saved {record!r}",
            extra={"table": record.get_table(), "inserted": created},
        )

        for observer in self._observers:
            observer.on_saved(record, changes, created)

        return record

    def delete(self, record: Record) -> bool:
        """Remove a record and notify observers.

        Raises:
            RecordStoreError: If the record was never persisted or removal fails.
        """
        if record.key is None:
            raise RecordStoreError(
                "Cannot delete a record without a key",
                code=ErrorCode.RECORD_NOT_FOUND,
                details={"table": record.get_table()},
            )

        self._remove(record)
        record.exists = False

        logger.debug(f"Deleted {record!r}", extra={"table": record.get_table()})

        for observer in self._observers:
            observer.on_deleted(record)

        return True

    @abstractmethod
    def find(self, record_class: type[R], key: Any) -> R | None:
        """Load a record by key."""
        ...

    @abstractmethod
    def all(self, record_class: type[R]) -> list[R]:
        """Load every record of a type."""
        ...

    @abstractmethod
    def _persist(self, record: Record, created: bool) -> None:
        """Write the record; assign a generated key when created."""
        ...

    @abstractmethod
    def _remove(self, record: Record) -> None:
        """Remove the record's row."""
        ...


class InMemoryRecordStore(RecordStore):
    """Dictionary-backed store with per-table auto-increment keys.

    Rows are deep copies, so in-place changes to a record reach the store
    only through save().
    """

    def __init__(self) -> None:
        super().__init__()
        self._tables: dict[str, dict[Any, dict[str, Any]]] = {}
        self._sequences: dict[str, count] = {}

    def _table(self, name: str) -> dict[Any, dict[str, Any]]:
        return self._tables.setdefault(name, {})

    def _next_key(self, table: str) -> int:
        return next(self._sequences.setdefault(table, count(1)))

    def _persist(self, record: Record, created: bool) -> None:
        table = record.get_table()
        if created:
            record.key = self._next_key(table)
        self._table(table)[record.key] = deepcopy(record.get_attributes())

    def _remove(self, record: Record) -> None:
        rows = self._table(record.get_table())
        if record.key not in rows:
            raise RecordStoreError(
                f"Record not found: {record!r}",
                code=ErrorCode.RECORD_NOT_FOUND,
                details={"table": record.get_table(), "key": record.key},
            )
        del rows[record.key]

    def find(self, record_class: type[R], key: Any) -> R | None:
        row = self._table(record_class.get_table()).get(key)
        if row is None:
            return None

        record = record_class()
        record.set_raw_attributes(deepcopy(row), sync=True)
        record.exists = True
        return record

    def all(self, record_class: type[R]) -> list[R]:
        keys = list(self._table(record_class.get_table()))
        return [record for key in keys if (record := self.find(record_class, key))]
