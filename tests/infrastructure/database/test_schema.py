"""Tests for segment table declarations and seed commands."""

from __future__ import annotations

import pytest
from sqlalchemy import BigInteger, Column, Integer, MetaData, String, Table, select
from sqlalchemy.engine import Engine

from segseq.domain.naming import QualifiedName
from segseq.errors import ConfigurationError
from segseq.infrastructure.database.schema import (
    SEED_COMMANDS_KEY,
    SegmentTableSpec,
    describe_segment_table,
    register_segment_table,
    seed_commands,
    table_key,
)
from segseq.services.generator import resolve_config


def _spec(
    segment_value: str = "default",
    *,
    table: QualifiedName | None = None,
    seed_value: int = 0,
) -> SegmentTableSpec:
    return SegmentTableSpec(
        table=table or QualifiedName("id_segments"),
        segment_column="sequence_name",
        segment_length=64,
        value_column="next_val",
        segment_value=segment_value,
        seed_value=seed_value,
    )


class TestDescribeSegmentTable:
    def test_from_config(self) -> None:
        config = resolve_config(
            "long",
            {
                "table_name": "audit.ids",
                "segment_value": "orders",
                "segment_value_length": 40,
                "value_column_name": "hi",
                "initial_value": 10,
            },
        )
        spec = describe_segment_table(config)
        assert spec.table == QualifiedName("ids", schema="audit")
        assert spec.segment_column == "sequence_name"
        assert spec.segment_length == 40
        assert spec.value_column == "hi"
        assert spec.segment_value == "orders"
        assert spec.seed_value == 9


class TestRegisterSegmentTable:
    def test_declares_two_columns(self) -> None:
        metadata = MetaData()
        table = register_segment_table(_spec(), metadata)

        assert [c.name for c in table.columns] == ["sequence_name", "next_val"]
        segment = table.c.sequence_name
        assert segment.primary_key
        assert not segment.nullable
        assert isinstance(segment.type, String)
        assert segment.type.length == 64
        assert isinstance(table.c.next_val.type, BigInteger)
        assert [c.name for c in table.primary_key] == ["sequence_name"]

    def test_schema_qualified(self) -> None:
        metadata = MetaData()
        name = QualifiedName("ids", schema="audit")
        table = register_segment_table(_spec(table=name), metadata)
        assert table.schema == "audit"
        assert table_key(name) == "audit.ids"
        assert metadata.tables["audit.ids"] is table

    def test_registering_twice_reuses_table_and_seed(self) -> None:
        metadata = MetaData()
        first = register_segment_table(_spec(), metadata)
        second = register_segment_table(_spec(seed_value=500), metadata)

        assert second is first
        assert len(metadata.tables) == 1
        seeds = first.info[SEED_COMMANDS_KEY]
        assert list(seeds) == ["default"]
        assert seeds["default"].value == 0

    def test_one_seed_per_segment(self) -> None:
        metadata = MetaData()
        register_segment_table(_spec("orders"), metadata)
        register_segment_table(_spec("invoices", seed_value=99), metadata)

        commands = seed_commands(metadata)
        assert [(c.segment_value, c.value) for c in commands] == [
            ("orders", 0),
            ("invoices", 99),
        ]

    def test_existing_table_left_untouched(self) -> None:
        metadata = MetaData()
        existing = Table(
            "id_segments",
            metadata,
            Column("sequence_name", String(20), primary_key=True),
            Column("next_val", Integer),
            Column("note", String(10)),
        )
        table = register_segment_table(_spec(), metadata)
        assert table is existing
        assert [c.name for c in table.columns] == ["sequence_name", "next_val", "note"]
        assert type(table.c.next_val.type) is Integer
        assert len(seed_commands(metadata)) == 1

    def test_existing_table_without_value_column(self) -> None:
        metadata = MetaData()
        Table(
            "id_segments",
            metadata,
            Column("sequence_name", String(20), primary_key=True),
            Column("hi", BigInteger),
        )
        with pytest.raises(ConfigurationError, match="has no column 'next_val'"):
            register_segment_table(_spec(), metadata)
        assert seed_commands(metadata) == []


class TestSeedCommand:
    def test_render(self) -> None:
        metadata = MetaData()
        register_segment_table(_spec("orders", seed_value=99), metadata)
        (command,) = seed_commands(metadata)
        assert command.render() == (
            "INSERT INTO id_segments (sequence_name, next_val) VALUES ('orders', 99)"
        )

    def test_apply_inserts_once(self, db_engine: Engine) -> None:
        metadata = MetaData()
        table = register_segment_table(_spec("orders", seed_value=5), metadata)
        metadata.create_all(db_engine)
        (command,) = seed_commands(metadata)

        with db_engine.begin() as conn:
            assert command.apply(conn) is True
            assert command.apply(conn) is False
            rows = conn.execute(select(table.c.sequence_name, table.c.next_val)).all()
        assert [tuple(r) for r in rows] == [("orders", 5)]
