"""Segment tables via SQLAlchemy Core: engine, schema, stores."""

from segseq.infrastructure.database.engine import create_db_engine, create_schema
from segseq.infrastructure.database.memory import InMemorySegmentStore
from segseq.infrastructure.database.schema import (
    SeedCommand,
    SegmentTableSpec,
    describe_segment_table,
    register_segment_table,
    seed_commands,
)
from segseq.infrastructure.database.store import (
    SegmentRow,
    SegmentStatements,
    SegmentStore,
    SegmentTransaction,
    SqlSegmentStore,
)

__all__ = [
    "InMemorySegmentStore",
    "SeedCommand",
    "SegmentRow",
    "SegmentStatements",
    "SegmentStore",
    "SegmentTableSpec",
    "SegmentTransaction",
    "SqlSegmentStore",
    "create_db_engine",
    "create_schema",
    "describe_segment_table",
    "register_segment_table",
    "seed_commands",
]
