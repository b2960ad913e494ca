"""Declarative schema requirements for segment tables.

:func:`describe_segment_table` is a pure function from a generator
configuration to a :class:`SegmentTableSpec`. :func:`register_segment_table`
applies a spec to a SQLAlchemy ``MetaData``: it declares the table if the
metadata does not know it yet and attaches a seed command for the
segment row. DDL execution belongs to whoever owns the metadata (see
:func:`segseq.infrastructure.database.engine.create_schema`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Column, MetaData, String, Table, insert, select

from segseq.domain.naming import QualifiedName
from segseq.errors import ConfigurationError

if TYPE_CHECKING:
    from sqlalchemy import Connection, Insert
    from sqlalchemy.engine.interfaces import Dialect

    from segseq.config.models import GeneratorConfig

# Key under ``Table.info`` holding seed commands, one per segment value.
SEED_COMMANDS_KEY = "segseq_seed_commands"


@dataclass(frozen=True)
class SegmentTableSpec:
    """What a generator needs from the database."""

    table: QualifiedName
    segment_column: str
    segment_length: int
    value_column: str
    segment_value: str
    seed_value: int


@dataclass(frozen=True)
class SeedCommand:
    """One-time insert of a segment row at schema creation time."""

    table: Table
    segment_column: str
    value_column: str
    segment_value: str
    value: int

    def statement(self) -> Insert:
        return insert(self.table).values(
            {self.segment_column: self.segment_value, self.value_column: self.value}
        )

    def render(self, dialect: Dialect | None = None) -> str:
        """SQL text with the literal values inlined."""
        compiled = self.statement().compile(
            dialect=dialect, compile_kwargs={"literal_binds": True}
        )
        return str(compiled)

    def apply(self, conn: Connection) -> bool:
        """Insert the seed row unless the segment already exists.

        Returns True if a row was inserted.
        """
        segment = self.table.c[self.segment_column]
        existing = conn.execute(
            select(segment).where(segment == self.segment_value)
        ).first()
        if existing is not None:
            return False
        conn.execute(self.statement())
        return True


def describe_segment_table(config: GeneratorConfig) -> SegmentTableSpec:
    return SegmentTableSpec(
        table=config.table,
        segment_column=config.segment_column_name,
        segment_length=config.segment_value_length,
        value_column=config.value_column_name,
        segment_value=config.segment_value,
        seed_value=config.seed_value,
    )


def table_key(name: QualifiedName) -> str:
    """Key of *name* in ``MetaData.tables``."""
    schema = name.sqlalchemy_schema
    return f"{schema}.{name.table}" if schema else name.table


def register_segment_table(spec: SegmentTableSpec, metadata: MetaData) -> Table:
    """Declare the segment table on *metadata* and register its seed command.

    If the table is already declared it is reused untouched: no columns
    are added or altered. It must already have the segment and value
    columns. The seed command is registered at most once per
    segment value.
    """
    table = metadata.tables.get(table_key(spec.table))
    if table is None:
        table = Table(
            spec.table.table,
            metadata,
            Column(
                spec.segment_column,
                String(spec.segment_length),
                primary_key=True,
                nullable=False,
            ),
            Column(spec.value_column, BigInteger),
            schema=spec.table.sqlalchemy_schema,
        )
    else:
        for column in (spec.segment_column, spec.value_column):
            if column not in table.c:
                msg = (
                    f"Segment table {table.fullname} is already declared and has no "
                    f"column {column!r}"
                )
                raise ConfigurationError(msg)

    seeds: dict[str, SeedCommand] = table.info.setdefault(SEED_COMMANDS_KEY, {})
    if spec.segment_value not in seeds:
        seeds[spec.segment_value] = SeedCommand(
            table=table,
            segment_column=spec.segment_column,
            value_column=spec.value_column,
            segment_value=spec.segment_value,
            value=spec.seed_value,
        )
    return table


def seed_commands(metadata: MetaData) -> list[SeedCommand]:
    """All seed commands registered on *metadata*, in table order."""
    commands: list[SeedCommand] = []
    for table in metadata.sorted_tables:
        commands.extend(table.info.get(SEED_COMMANDS_KEY, {}).values())
    return commands
