"""Database engine setup and schema creation.

For SQLite the engine runs in WAL mode with a busy timeout. SQLite has no
row locks and ignores ``FOR UPDATE``, so a transaction opened by
:func:`write_transaction` starts with ``BEGIN IMMEDIATE`` and takes the
database write lock up front; that is what makes the segment read a
write-intent read. Every other transaction starts deferred, so plain
reads never wait on the write lock.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Connection, MetaData, create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from segseq.errors import StorageAccessError
from segseq.infrastructure.database.schema import seed_commands

logger = logging.getLogger(__name__)

# Execution option marking a connection whose transactions will write.
WRITE_INTENT_OPTION = "segseq_write_intent"


def create_db_engine(url: str, *, busy_timeout: float = 30.0, echo: bool = False) -> Engine:
    """Create an engine for *url*, with write-intent transactions on SQLite."""
    if make_url(url).get_backend_name() != "sqlite":
        return create_engine(url, echo=echo)

    engine = create_engine(url, echo=echo, connect_args={"timeout": busy_timeout})

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        # Let the "begin" listener below own transaction start.
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin(conn: Connection) -> None:
        if conn.get_execution_options().get(WRITE_INTENT_OPTION):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")

    return engine


@contextmanager
def write_transaction(engine: Engine) -> Iterator[Connection]:
    """Open a transaction on a fresh connection, declaring write intent.

    Commits on success and rolls back on error, like ``engine.begin()``.
    """
    with engine.connect() as conn:
        conn.execution_options(**{WRITE_INTENT_OPTION: True})
        with conn.begin():
            yield conn


def create_schema(engine: Engine, metadata: MetaData) -> int:
    """Create all declared tables, then run pending seed commands.

    Idempotent: existing tables and existing segment rows are left alone.
    Returns the number of segment rows seeded.
    """
    seeded = 0
    try:
        metadata.create_all(engine)
        with write_transaction(engine) as conn:
            for command in seed_commands(metadata):
                if command.apply(conn):
                    seeded += 1
                    logger.info(
                        "Seeded segment %r in %s with %d",
                        command.segment_value,
                        command.table.fullname,
                        command.value,
                    )
    except SQLAlchemyError as exc:
        msg = f"Unable to create segment tables: {exc.__class__.__name__}"
        raise StorageAccessError(msg) from exc
    return seeded
