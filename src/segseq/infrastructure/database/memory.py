"""In-process segment store.

Rows live in a dict. A transaction holds the store lock for its whole
duration (the equivalent of a table write lock) and works on a private
copy of the rows that replaces the shared copy only on commit.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager

from segseq.errors import StorageAccessError
from segseq.infrastructure.database.store import SegmentRow, SegmentTransaction


class _MemoryTransaction:
    def __init__(self, rows: dict[str, int | None]) -> None:
        self.rows = rows

    def read_for_update(self, segment_key: str) -> SegmentRow | None:
        if segment_key not in self.rows:
            return None
        return SegmentRow(segment_key, self.rows[segment_key])

    def insert(self, segment_key: str, counter: int) -> None:
        if segment_key in self.rows:
            msg = f"Duplicate segment key {segment_key!r}"
            raise StorageAccessError(msg)
        self.rows[segment_key] = counter

    def compare_and_swap(self, segment_key: str, expected: int | None, new: int) -> bool:
        if segment_key not in self.rows or self.rows[segment_key] != expected:
            return False
        self.rows[segment_key] = new
        return True


class InMemorySegmentStore:
    """A :class:`~segseq.infrastructure.database.store.SegmentStore` backed by a dict."""

    def __init__(self, rows: Mapping[str, int | None] | None = None) -> None:
        self._rows: dict[str, int | None] = dict(rows or {})
        self._lock = threading.Lock()
        self.transactions = 0

    @contextmanager
    def transaction(self) -> Iterator[SegmentTransaction]:
        with self._lock:
            txn = _MemoryTransaction(dict(self._rows))
            yield txn
            self._rows = txn.rows
            self.transactions += 1

    def peek(self, segment_key: str) -> int | None:
        with self._lock:
            return self._rows.get(segment_key)

    @property
    def rows(self) -> dict[str, int | None]:
        with self._lock:
            return dict(self._rows)
