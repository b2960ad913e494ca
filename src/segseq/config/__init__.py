"""Configuration models, settings sources and logging setup."""

from segseq.config.models import (
    DatabaseConfig,
    GeneratorConfig,
    GeneratorEntry,
    GeneratorOptions,
)
from segseq.config.settings import SegseqSettings

__all__ = [
    "DatabaseConfig",
    "GeneratorConfig",
    "GeneratorEntry",
    "GeneratorOptions",
    "SegseqSettings",
]
