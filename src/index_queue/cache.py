"""Scoped memo of record lookups."""

from collections.abc import Sequence

from .records import Record, RecordSource


class RecordCache:
    """Remembers records fetched during one logical queue operation.

    Keyed by (table, uid, fields). Only existing records are remembered, so a
    record that appears later in the same scope is still found. The cache has
    no eviction: drop the instance when the operation ends.
    """

    def __init__(self, record_source: RecordSource):
        self.record_source: RecordSource = record_source
        self._records: dict[tuple[str, int, frozenset[str]], Record] = {}

    def get_record(self, table: str, uid: int, fields: Sequence[str]) -> Record | None:
        key = (table, uid, frozenset(fields))
        record = self._records.get(key)
        if record is None:
            record = self.record_source.get_record(table, uid, fields)
            if record is not None:
                self._records[key] = record
        return record

    def __len__(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        self._records.clear()
