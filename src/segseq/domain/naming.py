"""Qualified table names and implicit naming strategies.

When no ``table_name`` option is given, a naming strategy decides which
table backs a generator. Strategies are looked up by name; any object
implementing :class:`NamingStrategy` may be passed directly instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from segseq.errors import ConfigurationError

DEFAULT_TABLE = "id_segments"


@dataclass(frozen=True)
class QualifiedName:
    """A ``[catalog.][schema.]table`` name."""

    table: str
    schema: str | None = None
    catalog: str | None = None

    @classmethod
    def parse(cls, text: str) -> QualifiedName:
        """Parse a dotted table name.

        Raises:
            ConfigurationError: If the name is empty, has empty parts,
                or has more than three parts.
        """
        parts = [part.strip() for part in text.split(".")]
        if not text.strip() or any(not part for part in parts) or len(parts) > 3:
            msg = f"Malformed table name: {text!r}"
            raise ConfigurationError(msg)
        if len(parts) == 1:
            return cls(table=parts[0])
        if len(parts) == 2:
            return cls(table=parts[1], schema=parts[0])
        return cls(table=parts[2], schema=parts[1], catalog=parts[0])

    @property
    def sqlalchemy_schema(self) -> str | None:
        """Schema argument for ``sqlalchemy.Table`` (catalog-qualified if needed)."""
        if self.catalog and self.schema:
            return f"{self.catalog}.{self.schema}"
        return self.schema or self.catalog

    def render(self) -> str:
        return ".".join(part for part in (self.catalog, self.schema, self.table) if part)

    def __str__(self) -> str:
        return self.render()


@runtime_checkable
class NamingStrategy(Protocol):
    """Derives the generator table when none is configured explicitly."""

    def determine_table_name(
        self,
        catalog: str | None,
        schema: str | None,
        *,
        generator_name: str | None = None,
        entity_table: str | None = None,
    ) -> QualifiedName: ...


class StandardNamingStrategy:
    """One table per named generator, the shared default table otherwise."""

    def determine_table_name(
        self,
        catalog: str | None,
        schema: str | None,
        *,
        generator_name: str | None = None,
        entity_table: str | None = None,
    ) -> QualifiedName:
        return QualifiedName(generator_name or DEFAULT_TABLE, schema=schema, catalog=catalog)


class SingleNamingStrategy:
    """Every generator shares the default table."""

    def determine_table_name(
        self,
        catalog: str | None,
        schema: str | None,
        *,
        generator_name: str | None = None,
        entity_table: str | None = None,
    ) -> QualifiedName:
        return QualifiedName(DEFAULT_TABLE, schema=schema, catalog=catalog)


class LegacyNamingStrategy:
    """``<entity_table>_seq`` when the entity is known, the default table otherwise."""

    def determine_table_name(
        self,
        catalog: str | None,
        schema: str | None,
        *,
        generator_name: str | None = None,
        entity_table: str | None = None,
    ) -> QualifiedName:
        name = f"{entity_table}_seq" if entity_table else DEFAULT_TABLE
        return QualifiedName(name, schema=schema, catalog=catalog)


NAMING_STRATEGIES: dict[str, type[NamingStrategy]] = {
    "standard": StandardNamingStrategy,
    "single": SingleNamingStrategy,
    "legacy": LegacyNamingStrategy,
}


def resolve_naming_strategy(strategy: str | NamingStrategy) -> NamingStrategy:
    """Return a strategy instance for a registered name or pass one through."""
    if isinstance(strategy, NamingStrategy):
        return strategy
    factory = NAMING_STRATEGIES.get(strategy.strip().lower())
    if factory is None:
        msg = (
            f"Unknown naming strategy: {strategy!r}. "
            f"Expected one of {sorted(NAMING_STRATEGIES)}"
        )
        raise ConfigurationError(msg)
    return factory()
