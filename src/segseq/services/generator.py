"""TableGenerator: the table-backed identifier generator.

A generator is configured once from :class:`GeneratorOptions`, exposes
its schema requirements to a ``MetaData`` exactly once, and then hands
out identifiers through :meth:`TableGenerator.generate`.

Usage::

    generator = TableGenerator.configure("long", GeneratorOptions(increment_size=50))
    generator.expose_schema_requirements(metadata)
    create_schema(engine, metadata)
    new_id = generator.generate(engine)

Within one process each generator serializes its own calls; across
processes the segment row's lock and compare-and-swap update keep
identifiers unique.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from sqlalchemy import Connection
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from segseq.config.models import (
    DEFAULT_INITIAL_VALUE,
    DEFAULT_SEGMENT_VALUE,
    GeneratorConfig,
    GeneratorOptions,
)
from segseq.domain import optimizers
from segseq.domain.counter import CounterValue, IdentifierType, resolve_identifier_type
from segseq.domain.naming import NamingStrategy, QualifiedName, resolve_naming_strategy
from segseq.errors import ConfigurationError, GeneratorStateError
from segseq.infrastructure.database.schema import describe_segment_table, register_segment_table
from segseq.infrastructure.database.store import SegmentStatements, SegmentStore, SqlSegmentStore
from segseq.services.segments import SegmentAccessor

if TYPE_CHECKING:
    from sqlalchemy import MetaData, Table

logger = logging.getLogger(__name__)

GenerationContext = SegmentStore | Engine | Connection | Session


class TableGenerator:
    """Generates identifiers from one segment of a shared table."""

    def __init__(self, config: GeneratorConfig) -> None:
        self._config = config
        self._optimizer = optimizers.build_optimizer(
            config.optimizer,
            config.increment_size,
            config.optimizer_initial_value,
        )
        self._accessor = SegmentAccessor(
            config,
            applies_increment=optimizers.applies_increment_to_source(self._optimizer),
        )
        self._lock = threading.Lock()
        self._table: Table | None = None
        self._statements: SegmentStatements | None = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @classmethod
    def configure(
        cls,
        identifier_type: IdentifierType | str | type,
        options: GeneratorOptions | dict[str, Any] | None = None,
        *,
        naming_strategy: str | NamingStrategy | None = None,
    ) -> TableGenerator:
        """Resolve *options* into a :class:`GeneratorConfig` and build a generator.

        Args:
            identifier_type: Declared type of the generated identifiers.
            options: Generator options, as a model or a plain mapping.
            naming_strategy: Overrides ``options.naming_strategy`` for
                deriving the table name when ``table_name`` is unset.

        Raises:
            ConfigurationError: Unmappable identifier type, malformed table
                name, unknown naming strategy, or invalid options.
        """
        return cls(resolve_config(identifier_type, options, naming_strategy=naming_strategy))

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    @property
    def table_name(self) -> str:
        return self._config.table.render()

    @property
    def segment_column_name(self) -> str:
        return self._config.segment_column_name

    @property
    def segment_value(self) -> str:
        return self._config.segment_value

    @property
    def segment_value_length(self) -> int:
        return self._config.segment_value_length

    @property
    def value_column_name(self) -> str:
        return self._config.value_column_name

    @property
    def initial_value(self) -> int:
        return self._config.initial_value

    @property
    def increment_size(self) -> int:
        return self._config.increment_size

    @property
    def optimizer(self) -> optimizers.Optimizer:
        return self._optimizer

    @property
    def table_access_count(self) -> int:
        """Number of completed segment table accesses (for diagnostics)."""
        return self._accessor.access_count

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    @property
    def schema_exposed(self) -> bool:
        return self._table is not None

    def expose_schema_requirements(self, metadata: MetaData) -> Table:
        """Declare the segment table and its seed row on *metadata*.

        Only the first call has an effect; later calls return the table
        registered the first time.
        """
        if self._table is not None:
            return self._table
        spec = describe_segment_table(self._config)
        table = register_segment_table(spec, metadata)
        self._statements = SegmentStatements(table, spec.segment_column, spec.value_column)
        self._table = table
        return table

    def sql_statements(self) -> tuple[str, str, str]:
        """Rendered select, insert and update SQL used against the table."""
        return self._require_statements().render()

    def _require_statements(self) -> SegmentStatements:
        if self._statements is None:
            msg = (
                f"Schema requirements of the generator for segment "
                f"{self._config.segment_value!r} have not been exposed"
            )
            raise GeneratorStateError(msg)
        return self._statements

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate(self, context: GenerationContext) -> int:
        """Return the next identifier.

        *context* supplies storage access: a :class:`SegmentStore`, or an
        ``Engine``, ``Connection`` or ``Session`` whose engine is used to
        open a separate connection. The caller's own transaction is never
        joined.

        Raises:
            GeneratorStateError: Schema requirements were not exposed yet.
            StorageAccessError: The segment table could not be accessed.
            IdentifierOverflowError: The identifier type's range is exhausted.
        """
        store = self._resolve_store(context)
        with self._lock:
            value = optimizers.generate(
                self._optimizer,
                lambda: self._accessor.fetch_next_raw_value(store, self._check_source_value),
            )
        return int(value)

    def _check_source_value(self, value: CounterValue) -> None:
        optimizers.check_source_value(self._optimizer, value)

    def store_for(self, engine: Engine) -> SqlSegmentStore:
        """A SQL segment store for this generator's table on *engine*."""
        return SqlSegmentStore(engine, self._require_statements())

    def _resolve_store(self, context: GenerationContext) -> SegmentStore:
        if isinstance(context, Engine):
            return self.store_for(context)
        if isinstance(context, Connection):
            return self.store_for(context.engine)
        if isinstance(context, Session):
            bind = context.get_bind()
            return self.store_for(bind.engine if isinstance(bind, Connection) else bind)
        self._require_statements()
        if isinstance(context, SegmentStore):
            return context
        msg = f"Cannot generate identifiers from a {type(context).__name__}"
        raise TypeError(msg)


# ----------------------------------------------------------------------
# Option resolution
# ----------------------------------------------------------------------


def resolve_config(
    identifier_type: IdentifierType | str | type,
    options: GeneratorOptions | dict[str, Any] | None = None,
    *,
    naming_strategy: str | NamingStrategy | None = None,
) -> GeneratorConfig:
    """Resolve generator options into a complete configuration."""
    resolved_type = resolve_identifier_type(identifier_type)
    opts = _coerce_options(options)

    table = _determine_table_name(opts, naming_strategy or opts.naming_strategy)
    segment_value = _determine_segment_value(opts, table)
    optimizer = opts.optimizer or optimizers.implicit_optimizer_kind(
        opts.increment_size,
        preferred_pooled=opts.preferred_pooled_optimizer,
        prefer_pooled_lo=opts.prefer_pooled_values_lo,
    )

    return GeneratorConfig(
        identifier_type=resolved_type,
        table=table,
        segment_column_name=opts.segment_column_name,
        value_column_name=opts.value_column_name,
        segment_value=segment_value,
        segment_value_length=opts.segment_value_length,
        initial_value=DEFAULT_INITIAL_VALUE if opts.initial_value is None else opts.initial_value,
        increment_size=opts.increment_size,
        optimizer=optimizer,
        optimizer_initial_value=(
            optimizers.UNSET_INITIAL_VALUE if opts.initial_value is None else opts.initial_value
        ),
        stores_last_used_value=opts.stores_last_used_value,
    )


def _coerce_options(options: GeneratorOptions | dict[str, Any] | None) -> GeneratorOptions:
    if options is None:
        return GeneratorOptions()
    if isinstance(options, GeneratorOptions):
        return options
    try:
        return GeneratorOptions.model_validate(options)
    except ValidationError as exc:
        msg = f"Invalid generator options: {exc}"
        raise ConfigurationError(msg) from exc


def _determine_table_name(
    opts: GeneratorOptions,
    naming_strategy: str | NamingStrategy,
) -> QualifiedName:
    explicit = opts.table_name
    if explicit is not None and explicit.strip():
        if "." in explicit:
            return QualifiedName.parse(explicit)
        return QualifiedName(
            QualifiedName.parse(explicit).table,
            schema=opts.schema_,
            catalog=opts.catalog,
        )
    if explicit is not None:
        msg = f"Malformed table name: {explicit!r}"
        raise ConfigurationError(msg)

    strategy = resolve_naming_strategy(naming_strategy)
    return strategy.determine_table_name(
        opts.catalog,
        opts.schema_,
        generator_name=opts.generator_name,
        entity_table=opts.entity_table,
    )


def _determine_segment_value(opts: GeneratorOptions, table: QualifiedName) -> str:
    if opts.segment_value:
        return opts.segment_value
    if opts.prefer_entity_table_as_segment_value and opts.entity_table:
        default = opts.entity_table
    else:
        default = DEFAULT_SEGMENT_VALUE
    logger.info(
        "Using default segment value %r for %s.%s",
        default,
        table,
        opts.segment_column_name,
    )
    return default
