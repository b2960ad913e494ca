"""Human/JSON rendering of ServiceResult.

JSON mode dumps the result model. Human mode prints an ``OK: <op>`` line
followed by key-value pairs, except for ``show`` which renders a Rich
table of generators.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table

from segseq.output.console import render

if TYPE_CHECKING:
    from segseq.services.result import ServiceResult


def _format_data_human(data: dict[str, Any]) -> str:
    """Format result data as indented key-value pairs."""
    lines: list[str] = []
    for key, value in data.items():
        if isinstance(value, (dict, list)):
            lines.append(f"  {key}: {_json.dumps(value, separators=(',', ':'))}")
        else:
            lines.append(f"  {key}: {value}")
    return "\n".join(lines)


def _format_generators(rows: list[dict[str, Any]]) -> str:
    table = Table(title="Generators", title_justify="left")
    table.add_column("name", style="seg.name")
    table.add_column("table", style="seg.table")
    table.add_column("segment")
    table.add_column("optimizer", style="seg.optimizer")
    table.add_column("increment", justify="right")
    table.add_column("stored", justify="right", style="seg.value")
    for row in rows:
        table.add_row(
            row["name"],
            row["table"],
            row["segment"],
            row["optimizer"],
            str(row["increment_size"]),
            "[seg.missing]-[/]" if row["stored"] is None else str(row["stored"]),
        )
    return render(table)


def format_result(result: ServiceResult, *, json_output: bool = False) -> str:
    """Format a ServiceResult for display.

    Args:
        result: The service result to format.
        json_output: If True, return JSON; otherwise return human-readable text.
    """
    if json_output:
        return result.model_dump_json(indent=2)
    if not result.ok:
        error_msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {error_msg}"
    if result.op == "show":
        return _format_generators(result.data.get("generators", []))
    if result.op == "next":
        return "\n".join(str(i) for i in result.data.get("ids", []))
    parts = [f"OK: {result.op}"]
    if result.data:
        parts.append(_format_data_human(result.data))
    return "\n".join(parts)
