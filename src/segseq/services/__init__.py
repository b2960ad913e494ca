"""Service layer: the storage protocol, the generator facade, the registry."""

from segseq.services.generator import TableGenerator, resolve_config
from segseq.services.registry import GeneratorRegistry
from segseq.services.result import ServiceError, ServiceResult
from segseq.services.segments import SegmentAccessor

__all__ = [
    "GeneratorRegistry",
    "SegmentAccessor",
    "ServiceError",
    "ServiceResult",
    "TableGenerator",
    "resolve_config",
]
