"""Tests for human and JSON rendering of service results."""

from __future__ import annotations

import json

from segseq.output.formatters import format_result
from segseq.services.result import ServiceError, ServiceResult


class TestJsonMode:
    def test_dumps_result(self) -> None:
        result = ServiceResult(ok=True, op="next", data={"generator": "orders", "ids": [1]})
        parsed = json.loads(format_result(result, json_output=True))
        assert parsed["ok"] is True
        assert parsed["data"]["ids"] == [1]

    def test_dumps_error(self) -> None:
        result = ServiceResult(
            ok=False, op="next", error=ServiceError(code="STORAGE_ERROR", message="locked")
        )
        parsed = json.loads(format_result(result, json_output=True))
        assert parsed["error"]["code"] == "STORAGE_ERROR"


class TestHumanMode:
    def test_error_line(self) -> None:
        result = ServiceResult(
            ok=False, op="next", error=ServiceError(code="CONFIGURATION_ERROR", message="bad")
        )
        assert format_result(result) == "ERROR: next: bad"

    def test_next_prints_one_id_per_line(self) -> None:
        result = ServiceResult(ok=True, op="next", data={"ids": [7, 8, 9], "generator": "x"})
        assert format_result(result) == "7\n8\n9"

    def test_generic_ok(self) -> None:
        result = ServiceResult(
            ok=True, op="init", data={"seeded": 2, "tables": ["id_segments"]}
        )
        assert format_result(result) == 'OK: init\n  seeded: 2\n  tables: ["id_segments"]'

    def test_show_renders_table(self) -> None:
        result = ServiceResult(
            ok=True,
            op="show",
            data={
                "generators": [
                    {
                        "name": "orders",
                        "table": "id_segments",
                        "segment": "orders",
                        "optimizer": "pooled",
                        "increment_size": 50,
                        "stored": 150,
                    },
                    {
                        "name": "tickets",
                        "table": "ticket_ids",
                        "segment": "default",
                        "optimizer": "none",
                        "increment_size": 1,
                        "stored": None,
                    },
                ]
            },
        )
        output = format_result(result)
        assert output.startswith("Generators")
        assert "orders" in output
        assert "ticket_ids" in output
        assert "150" in output
        assert "-" in output
