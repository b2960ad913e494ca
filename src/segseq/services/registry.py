"""GeneratorRegistry: the owner of configured generators.

A registry builds one :class:`TableGenerator` per ``[generators.<name>]``
section, exposes all of their schema requirements to a single
``MetaData`` up front, and keeps the generators (and their in-memory
optimizer state) alive for as long as it lives.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from sqlalchemy import MetaData

from segseq.errors import ConfigurationError
from segseq.services.generator import TableGenerator

if TYPE_CHECKING:
    from segseq.config.settings import SegseqSettings

logger = logging.getLogger(__name__)


class GeneratorRegistry:
    """Named generators sharing one schema description."""

    def __init__(self, metadata: MetaData | None = None) -> None:
        self.metadata = metadata if metadata is not None else MetaData()
        self._generators: dict[str, TableGenerator] = {}

    @classmethod
    def from_settings(
        cls,
        settings: SegseqSettings,
        metadata: MetaData | None = None,
    ) -> GeneratorRegistry:
        registry = cls(metadata)
        for name, entry in settings.generators.items():
            registry.register(
                name,
                TableGenerator.configure(entry.identifier_type, settings.options_for(name)),
            )
        return registry

    def register(self, name: str, generator: TableGenerator) -> TableGenerator:
        """Add *generator* under *name* and expose its schema requirements."""
        if name in self._generators:
            msg = f"Generator {name!r} is already registered"
            raise ConfigurationError(msg)
        generator.expose_schema_requirements(self.metadata)
        self._generators[name] = generator
        logger.debug(
            "Registered generator %r on %s segment %r",
            name,
            generator.table_name,
            generator.segment_value,
        )
        return generator

    def get(self, name: str) -> TableGenerator:
        try:
            return self._generators[name]
        except KeyError:
            msg = f"Unknown generator: {name!r}. Configured: {sorted(self._generators)}"
            raise ConfigurationError(msg) from None

    def names(self) -> list[str]:
        return sorted(self._generators)

    def items(self) -> Iterator[tuple[str, TableGenerator]]:
        for name in self.names():
            yield name, self._generators[name]

    def __contains__(self, name: object) -> bool:
        return name in self._generators

    def __len__(self) -> int:
        return len(self._generators)

    def clear(self) -> None:
        """Drop every generator and its optimizer state."""
        self._generators.clear()
