"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, segseq.toml only contains
overrides. ``[defaults]`` applies to every generator and each
``[generators.<name>]`` table overrides it for one generator.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from segseq.domain.counter import IdentifierType
from segseq.domain.naming import QualifiedName
from segseq.domain.optimizers import OptimizerKind

DEFAULT_VALUE_COLUMN = "next_val"
DEFAULT_SEGMENT_COLUMN = "sequence_name"
DEFAULT_SEGMENT_VALUE = "default"
DEFAULT_SEGMENT_LENGTH = 255
DEFAULT_INITIAL_VALUE = 1
DEFAULT_INCREMENT_SIZE = 1


# --- generator options (what users write) ---


class GeneratorOptions(BaseModel):
    """Options for one table-backed generator.

    Unset optional values are resolved when the generator is configured:
    the table through the naming strategy, the segment value through
    ``prefer_entity_table_as_segment_value``, and the optimizer from the
    increment size.
    """

    model_config = {"frozen": True, "extra": "forbid", "populate_by_name": True}

    table_name: str | None = None
    catalog: str | None = None
    schema_: str | None = Field(default=None, alias="schema")
    value_column_name: str = Field(default=DEFAULT_VALUE_COLUMN, min_length=1)
    segment_column_name: str = Field(default=DEFAULT_SEGMENT_COLUMN, min_length=1)
    segment_value: str | None = None
    segment_value_length: int = Field(default=DEFAULT_SEGMENT_LENGTH, gt=0)
    initial_value: int | None = None
    increment_size: int = DEFAULT_INCREMENT_SIZE
    optimizer: OptimizerKind | None = None
    prefer_entity_table_as_segment_value: bool = False
    entity_table: str | None = None
    generator_name: str | None = None
    stores_last_used_value: bool = True
    preferred_pooled_optimizer: OptimizerKind | None = None
    prefer_pooled_values_lo: bool = False
    naming_strategy: str = "standard"


class GeneratorEntry(GeneratorOptions):
    """[generators.<name>] section: options plus the identifier type.

    ``identifier_type`` accepts any name understood by
    :func:`segseq.domain.counter.resolve_identifier_type`; it is checked
    when the generator is configured.
    """

    identifier_type: str = IdentifierType.LONG.value


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    url: str = "sqlite:///segseq.db"
    busy_timeout: float = Field(default=30.0, gt=0)
    echo: bool = False


# --- resolved configuration (what generators run with) ---


class GeneratorConfig(BaseModel):
    """Fully resolved, immutable configuration of one generator."""

    model_config = {"frozen": True}

    identifier_type: IdentifierType
    table: QualifiedName
    segment_column_name: str
    value_column_name: str
    segment_value: str
    segment_value_length: int
    initial_value: int
    increment_size: int
    optimizer: OptimizerKind
    optimizer_initial_value: int
    stores_last_used_value: bool

    @property
    def seed_value(self) -> int:
        """Counter stored for a segment that has issued nothing yet."""
        if self.stores_last_used_value:
            return self.initial_value - 1
        return self.initial_value
