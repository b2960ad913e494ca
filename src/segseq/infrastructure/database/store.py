"""Transactional access to segment rows.

The storage protocol in :mod:`segseq.services.segments` only needs three
operations inside one transaction: read a row with write intent, insert a
row, and compare-and-swap a row's counter. :class:`SegmentStore` captures
that capability; :class:`SqlSegmentStore` implements it with SQLAlchemy
Core on its own connection, so its work is isolated from whatever
transaction the caller has open.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from sqlalchemy import Table, bindparam, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from segseq.errors import StorageAccessError
from segseq.infrastructure.database.engine import write_transaction

if TYPE_CHECKING:
    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine
    from sqlalchemy.engine.interfaces import Dialect


@dataclass(frozen=True)
class SegmentRow:
    segment_key: str
    counter: int | None


class SegmentTransaction(Protocol):
    """Operations available inside one segment-table transaction."""

    def read_for_update(self, segment_key: str) -> SegmentRow | None:
        """Read and write-lock the row for *segment_key*; None if absent."""
        ...

    def insert(self, segment_key: str, counter: int) -> None: ...

    def compare_and_swap(self, segment_key: str, expected: int | None, new: int) -> bool:
        """Set the counter to *new* only if it still equals *expected*.

        Returns False when no row matched, i.e. another transaction
        advanced the counter first.
        """
        ...


@runtime_checkable
class SegmentStore(Protocol):
    """Source of isolated transactions over one segment table.

    A transaction commits when its block exits normally and rolls back
    when the block raises.
    """

    def transaction(self) -> AbstractContextManager[SegmentTransaction]: ...


class SegmentStatements:
    """Prepared select/insert/update constructs for one segment table."""

    def __init__(self, table: Table, segment_column: str, value_column: str) -> None:
        self.table = table
        segment = table.c[segment_column]
        value = table.c[value_column]

        self.select = select(value).where(segment == bindparam("segment_key")).with_for_update()
        self.insert = insert(table).values(
            {segment: bindparam("segment_key"), value: bindparam("new_value")}
        )
        self.update = (
            update(table)
            .where(value == bindparam("expected_value"), segment == bindparam("segment_key"))
            .values({value: bindparam("new_value")})
        )
        # "= NULL" never matches, so a NULL counter needs its own predicate.
        self.update_null = (
            update(table)
            .where(value.is_(None), segment == bindparam("segment_key"))
            .values({value: bindparam("new_value")})
        )
        self.peek = select(value).where(segment == bindparam("segment_key"))

    def render(self, dialect: Dialect | None = None) -> tuple[str, str, str]:
        """SQL text of the select, insert and update statements."""
        return (
            str(self.select.compile(dialect=dialect)),
            str(self.insert.compile(dialect=dialect)),
            str(self.update.compile(dialect=dialect)),
        )


class _SqlSegmentTransaction:
    def __init__(self, conn: Connection, statements: SegmentStatements) -> None:
        self._conn = conn
        self._statements = statements

    def read_for_update(self, segment_key: str) -> SegmentRow | None:
        try:
            row = self._conn.execute(
                self._statements.select, {"segment_key": segment_key}
            ).first()
        except SQLAlchemyError as exc:
            msg = f"Unable to read segment {segment_key!r}"
            raise StorageAccessError(msg) from exc
        if row is None:
            return None
        return SegmentRow(segment_key, row[0])

    def insert(self, segment_key: str, counter: int) -> None:
        try:
            self._conn.execute(
                self._statements.insert,
                {"segment_key": segment_key, "new_value": counter},
            )
        except SQLAlchemyError as exc:
            msg = f"Unable to initialize segment {segment_key!r}"
            raise StorageAccessError(msg) from exc

    def compare_and_swap(self, segment_key: str, expected: int | None, new: int) -> bool:
        params: dict[str, object] = {"segment_key": segment_key, "new_value": new}
        if expected is None:
            stmt = self._statements.update_null
        else:
            stmt = self._statements.update
            params["expected_value"] = expected
        try:
            result = self._conn.execute(stmt, params)
        except SQLAlchemyError as exc:
            msg = f"Unable to update segment {segment_key!r}"
            raise StorageAccessError(msg) from exc
        return result.rowcount == 1


class SqlSegmentStore:
    """Segment store over a SQLAlchemy engine.

    Each transaction checks out a fresh connection, so it never joins a
    transaction the caller holds on another connection, and declares write
    intent. :meth:`peek` reads without it.
    """

    def __init__(self, engine: Engine, statements: SegmentStatements) -> None:
        self._engine = engine
        self._statements = statements

    @property
    def table(self) -> Table:
        return self._statements.table

    @contextmanager
    def transaction(self) -> Iterator[SegmentTransaction]:
        try:
            with write_transaction(self._engine) as conn:
                yield _SqlSegmentTransaction(conn, self._statements)
        except SQLAlchemyError as exc:
            msg = f"Transaction on {self.table.fullname} failed"
            raise StorageAccessError(msg) from exc

    def peek(self, segment_key: str) -> int | None:
        """Current stored counter of *segment_key*, without locking."""
        try:
            with self._engine.connect() as conn:
                return conn.execute(
                    self._statements.peek, {"segment_key": segment_key}
                ).scalar()
        except SQLAlchemyError as exc:
            msg = f"Unable to read segment {segment_key!r}"
            raise StorageAccessError(msg) from exc
