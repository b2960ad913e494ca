"""SequenceService: CLI-facing operations over a generator registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from segseq.config.logging import generator_log_context
from segseq.errors import SegseqError
from segseq.infrastructure.database.engine import create_schema
from segseq.services.result import ServiceResult

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from segseq.services.registry import GeneratorRegistry

logger = logging.getLogger(__name__)


class SequenceService:
    """Schema creation, identifier generation and inspection.

    Every method converts :class:`SegseqError` into a failed
    :class:`ServiceResult`.
    """

    def __init__(self, registry: GeneratorRegistry, engine: Engine) -> None:
        self._registry = registry
        self._engine = engine

    def init_schema(self) -> ServiceResult:
        """Create segment tables and seed rows for every generator."""
        try:
            seeded = create_schema(self._engine, self._registry.metadata)
        except SegseqError as exc:
            return ServiceResult.failure("init", exc)
        tables = sorted(self._registry.metadata.tables)
        return ServiceResult.success(
            "init",
            {"tables": tables, "seeded": seeded, "generators": self._registry.names()},
        )

    def next_ids(self, name: str, count: int = 1) -> ServiceResult:
        """Generate *count* identifiers from generator *name*."""
        if count < 1:
            return ServiceResult.rejected(
                "next", "INVALID_COUNT", f"Count must be positive, got {count}"
            )
        ids: list[int] = []
        try:
            generator = self._registry.get(name)
            with generator_log_context(name, generator.segment_value):
                for _ in range(count):
                    ids.append(generator.generate(self._engine))
        except SegseqError as exc:
            logger.debug("Generation from %r failed after %d ids", name, len(ids))
            return ServiceResult.failure("next", exc, generator=name, generated=ids)
        return ServiceResult.success(
            "next",
            {
                "generator": name,
                "ids": ids,
                "table_accesses": generator.table_access_count,
            },
        )

    def show(self) -> ServiceResult:
        """Describe every generator with its currently stored counter."""
        rows: list[dict[str, Any]] = []
        warnings: list[str] = []
        for name, generator in self._registry.items():
            config = generator.config
            store = generator.store_for(self._engine)
            try:
                stored = store.peek(config.segment_value)
            except SegseqError as exc:
                stored = None
                warnings.append(f"{name}: {exc}")
            rows.append(
                {
                    "name": name,
                    "table": config.table.render(),
                    "segment": config.segment_value,
                    "optimizer": config.optimizer.value,
                    "increment_size": config.increment_size,
                    "stored": stored,
                }
            )
        return ServiceResult.success("show", {"generators": rows}, warnings)
