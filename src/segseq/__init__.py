"""segseq: table-backed segmented identifier generation."""

from segseq.config.models import GeneratorConfig, GeneratorOptions
from segseq.domain.counter import IdentifierType
from segseq.domain.optimizers import OptimizerKind
from segseq.errors import (
    ConfigurationError,
    GeneratorStateError,
    IdentifierOverflowError,
    SegseqError,
    StorageAccessError,
)
from segseq.services.generator import TableGenerator
from segseq.services.registry import GeneratorRegistry

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "GeneratorConfig",
    "GeneratorOptions",
    "GeneratorRegistry",
    "GeneratorStateError",
    "IdentifierOverflowError",
    "IdentifierType",
    "OptimizerKind",
    "SegseqError",
    "StorageAccessError",
    "TableGenerator",
    "__version__",
]
