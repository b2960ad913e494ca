"""Output formatting for the segseq CLI."""

from segseq.output.formatters import format_result

__all__ = ["format_result"]
