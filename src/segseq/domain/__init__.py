"""Pure domain logic: counter values, optimizers, table naming."""

from segseq.domain.counter import CounterValue, IdentifierType, resolve_identifier_type
from segseq.domain.naming import (
    DEFAULT_TABLE,
    NamingStrategy,
    QualifiedName,
    resolve_naming_strategy,
)
from segseq.domain.optimizers import (
    Optimizer,
    OptimizerKind,
    applies_increment_to_source,
    build_optimizer,
    generate,
    implicit_optimizer_kind,
)

__all__ = [
    "DEFAULT_TABLE",
    "CounterValue",
    "IdentifierType",
    "NamingStrategy",
    "Optimizer",
    "OptimizerKind",
    "QualifiedName",
    "applies_increment_to_source",
    "build_optimizer",
    "generate",
    "implicit_optimizer_kind",
    "resolve_identifier_type",
    "resolve_naming_strategy",
]
